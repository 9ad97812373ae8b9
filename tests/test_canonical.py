from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from lotstock.ledger.canonical import CanonicalError, canonical_json, sha256_hex


def test_canonical_json_stable_key_order():
    obj_a = {"b": 2, "a": 1, "nested": {"y": 2, "x": 1}}
    obj_b = {"nested": {"x": 1, "y": 2}, "a": 1, "b": 2}

    assert canonical_json(obj_a) == canonical_json(obj_b)
    assert sha256_hex(obj_a) == sha256_hex(obj_b)


def test_canonical_json_rejects_float():
    with pytest.raises(CanonicalError):
        canonical_json({"amount": 1.23})


def test_canonical_json_encodes_dates_and_decimals():
    encoded = canonical_json({"expiry": date(2025, 7, 1), "price": Decimal("2.50")})
    assert encoded == b'{"expiry":"2025-07-01","price":"2.50"}'


def test_canonical_json_rejects_datetime():
    with pytest.raises(CanonicalError):
        canonical_json({"at": datetime(2025, 6, 1, tzinfo=timezone.utc)})
