from __future__ import annotations

from datetime import date, datetime
from typing import Iterable

from lotstock.domain.batches.models import Batch


def as_reference_date(reference_now: date | datetime) -> date:
    if isinstance(reference_now, datetime):
        return reference_now.date()
    return reference_now


def is_expired(expiry_date: date, reference_now: date | datetime) -> bool:
    """True iff ``expiry_date`` falls strictly before the day of ``reference_now``."""
    return expiry_date < as_reference_date(reference_now)


def is_valid_batch(batch: Batch, reference_now: date | datetime) -> bool:
    return batch.current_stock > 0 and not is_expired(batch.expiry_date, reference_now)


def normalize_name(name: str) -> str:
    return name.strip().casefold()


def expiry_sort_key(batch: Batch) -> date:
    return batch.expiry_date


def sort_by_expiry(batches: Iterable[Batch]) -> list[Batch]:
    # sorted() is stable: equal expiry dates keep input order.
    return sorted(batches, key=expiry_sort_key)
