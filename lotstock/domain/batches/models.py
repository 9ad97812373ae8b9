from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from lotstock.ledger.canonical import sha256_hex


class Batch(BaseModel):
    """One receiving event of one product (a lot).

    Several batches may share a ``name``; that is the multi-lot case the
    aggregator and allocator exist for.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: str = ""
    current_stock: int = Field(ge=0)
    reorder_level: int = Field(default=0, ge=0)
    expiry_date: date
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    selling_price: Decimal | None = Field(default=None, ge=0)
    batch_number: str | None = None
    barcode_id: str | None = None
    pharmacy_id: str | None = None

    @property
    def effective_price(self) -> Decimal:
        if self.selling_price is not None:
            return self.selling_price
        return self.unit_price


@dataclass
class GroupedProduct:
    key: str
    name: str
    category: str
    batches: list[Batch]
    valid_batches: list[Batch]
    total_stock: int
    lowest_price: Decimal
    highest_price: Decimal
    display_price: Decimal
    earliest_expiry: date
    earliest_batch: Batch
    has_multiple_batches: bool
    has_expired_batch: bool
    has_low_stock: bool
    barcode_id: str | None = None


@dataclass(frozen=True)
class BatchDeduction:
    batch_id: str
    quantity: int
    expiry_date: date


@dataclass
class DeductionPlan:
    product_name: str
    quantity_requested: int
    deductions: list[BatchDeduction] = field(default_factory=list)
    # Receipt fragments, one per deduction, in the same order.
    batch_expiry_info: list[str] = field(default_factory=list)

    @property
    def total_deducted(self) -> int:
        return sum(item.quantity for item in self.deductions)

    @property
    def used_multiple_batches(self) -> bool:
        return len(self.deductions) > 1

    @property
    def shortfall(self) -> int:
        return self.quantity_requested - self.total_deducted

    @property
    def is_fully_allocated(self) -> bool:
        return self.shortfall == 0

    def as_pairs(self) -> list[tuple[str, int]]:
        return [(item.batch_id, item.quantity) for item in self.deductions]

    def to_dict(self) -> dict:
        return {
            "product_name": self.product_name,
            "quantity_requested": self.quantity_requested,
            "deductions": [
                {
                    "batch_id": item.batch_id,
                    "quantity": item.quantity,
                    "expiry_date": item.expiry_date,
                }
                for item in self.deductions
            ],
            "batch_expiry_info": list(self.batch_expiry_info),
            "total_deducted": self.total_deducted,
            "used_multiple_batches": self.used_multiple_batches,
        }

    def fingerprint(self) -> str:
        return sha256_hex(self.to_dict())
