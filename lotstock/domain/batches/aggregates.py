from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from lotstock.domain.batches.expiry import is_expired, is_valid_batch, normalize_name, sort_by_expiry
from lotstock.domain.batches.models import Batch, GroupedProduct

LOW_STOCK_FALLBACK_REORDER_LEVEL = 10


def _is_low_stock(total_stock: int, valid_batches: list[Batch], fallback_reorder_level: int) -> bool:
    if not valid_batches:
        return total_stock <= fallback_reorder_level
    # total <= sum / n, kept in integers
    reorder_sum = sum(batch.reorder_level for batch in valid_batches)
    return total_stock * len(valid_batches) <= reorder_sum


def _build_group(
    key: str,
    batches: list[Batch],
    reference_now: date | datetime,
    fallback_reorder_level: int,
) -> GroupedProduct:
    sorted_batches = sort_by_expiry(batches)
    valid_batches = [batch for batch in sorted_batches if is_valid_batch(batch, reference_now)]
    earliest = valid_batches[0] if valid_batches else sorted_batches[0]

    total_stock = sum(batch.current_stock for batch in valid_batches)
    prices = [batch.effective_price for batch in valid_batches if batch.effective_price > 0]
    lowest_price = min(prices) if prices else Decimal("0")
    highest_price = max(prices) if prices else Decimal("0")

    barcode_id = earliest.barcode_id
    if barcode_id is None:
        barcode_id = next((batch.barcode_id for batch in sorted_batches if batch.barcode_id), None)

    return GroupedProduct(
        key=key,
        name=earliest.name,
        category=earliest.category,
        batches=sorted_batches,
        valid_batches=valid_batches,
        total_stock=total_stock,
        lowest_price=lowest_price,
        highest_price=highest_price,
        display_price=earliest.effective_price,
        earliest_expiry=earliest.expiry_date,
        earliest_batch=earliest,
        has_multiple_batches=len(valid_batches) > 1,
        has_expired_batch=any(is_expired(batch.expiry_date, reference_now) for batch in sorted_batches),
        has_low_stock=_is_low_stock(total_stock, valid_batches, fallback_reorder_level),
        barcode_id=barcode_id,
    )


def group_by_product(
    batches: Iterable[Batch],
    reference_now: date | datetime,
    fallback_reorder_level: int = LOW_STOCK_FALLBACK_REORDER_LEVEL,
) -> list[GroupedProduct]:
    """Build one aggregate per normalized product name.

    Groups come out in order of first appearance of each name. Products whose
    batches are all expired or empty are still returned with ``total_stock == 0``.
    """
    groups: dict[str, list[Batch]] = {}
    for batch in batches:
        groups.setdefault(normalize_name(batch.name), []).append(batch)
    return [
        _build_group(key, bucket, reference_now, fallback_reorder_level)
        for key, bucket in groups.items()
    ]
