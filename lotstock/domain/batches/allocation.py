from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable

from lotstock.core.errors import AllocationInputError
from lotstock.domain.batches.expiry import is_valid_batch, normalize_name, sort_by_expiry
from lotstock.domain.batches.models import Batch, BatchDeduction, DeductionPlan

logger = logging.getLogger(__name__)


def format_expiry_fragment(quantity: int, expiry_date: date) -> str:
    return f"{quantity}x exp {expiry_date:%m/%y}"


def find_by_name(batches: Iterable[Batch], product_name: str) -> list[Batch]:
    key = normalize_name(product_name)
    return [batch for batch in batches if normalize_name(batch.name) == key]


def allocate(
    batches: Iterable[Batch],
    product_name: str,
    quantity_needed: int,
    reference_now: date | datetime,
) -> DeductionPlan:
    """Plan a FEFO deduction of ``quantity_needed`` units of ``product_name``.

    Valid batches are consumed earliest expiry first. When stock runs out the
    plan simply covers less than requested; the caller decides what to do with
    the shortfall.
    """
    if isinstance(quantity_needed, bool) or not isinstance(quantity_needed, int):
        raise AllocationInputError(f"quantity must be a whole integer unit, got {quantity_needed!r}")
    if quantity_needed < 0:
        raise AllocationInputError(f"quantity must be >= 0, got {quantity_needed}")

    candidates = sort_by_expiry(
        batch for batch in find_by_name(batches, product_name) if is_valid_batch(batch, reference_now)
    )

    plan = DeductionPlan(product_name=product_name, quantity_requested=quantity_needed)
    remaining = quantity_needed
    for batch in candidates:
        if remaining <= 0:
            break
        take = min(remaining, batch.current_stock)
        plan.deductions.append(BatchDeduction(batch_id=batch.id, quantity=take, expiry_date=batch.expiry_date))
        plan.batch_expiry_info.append(format_expiry_fragment(take, batch.expiry_date))
        remaining -= take

    if remaining > 0:
        logger.debug(
            "allocation short for %s: requested=%s short=%s", product_name, quantity_needed, remaining
        )
    return plan


def would_use_multiple_batches(
    batches: Iterable[Batch],
    product_name: str,
    quantity: int,
    reference_now: date | datetime,
) -> bool:
    return allocate(batches, product_name, quantity, reference_now).used_multiple_batches
