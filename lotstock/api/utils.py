from __future__ import annotations

from datetime import date, datetime, timezone


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def resolve_reference_date(as_of: date | None) -> date:
    return as_of if as_of is not None else now_utc().date()
