from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from lotstock.domain.batches.models import Batch, GroupedProduct


class GroupedProductOut(BaseModel):
    key: str
    name: str
    category: str
    total_stock: int
    lowest_price: Decimal
    highest_price: Decimal
    display_price: Decimal
    earliest_expiry: date
    earliest_batch_id: str
    barcode_id: str | None = None
    has_multiple_batches: bool
    has_expired_batch: bool
    has_low_stock: bool
    valid_batch_ids: list[str]
    batches: list[Batch]

    @classmethod
    def from_group(cls, group: GroupedProduct) -> "GroupedProductOut":
        return cls(
            key=group.key,
            name=group.name,
            category=group.category,
            total_stock=group.total_stock,
            lowest_price=group.lowest_price,
            highest_price=group.highest_price,
            display_price=group.display_price,
            earliest_expiry=group.earliest_expiry,
            earliest_batch_id=group.earliest_batch.id,
            barcode_id=group.barcode_id,
            has_multiple_batches=group.has_multiple_batches,
            has_expired_batch=group.has_expired_batch,
            has_low_stock=group.has_low_stock,
            valid_batch_ids=[batch.id for batch in group.valid_batches],
            batches=group.batches,
        )


class AllocationRequest(BaseModel):
    product_name: str = Field(min_length=1)
    quantity: int = Field(ge=0)
    as_of: date | None = None


class CheckoutRequest(AllocationRequest):
    allow_partial: bool = False
