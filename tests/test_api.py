from __future__ import annotations

from datetime import date
from decimal import Decimal


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_products_endpoint_groups_batches(client, seed, amoxicillin, make_batch):
    seed(
        "ph1",
        [
            *amoxicillin,
            make_batch("Amoxicillin", 8, date(2025, 5, 1), id="C"),
            make_batch("Zinc", 0, date(2025, 9, 1), id="Z", selling_price=Decimal("1.20")),
        ],
    )

    resp = client.get("/pharmacies/ph1/products", params={"as_of": "2025-06-01"})
    assert resp.status_code == 200
    amox, zinc = resp.json()

    assert amox["total_stock"] == 15
    assert amox["has_expired_batch"] is True
    assert amox["has_multiple_batches"] is True
    assert amox["valid_batch_ids"] == ["A", "B"]
    assert [b["id"] for b in amox["batches"]] == ["C", "A", "B"]
    assert amox["earliest_batch_id"] == "A"

    assert zinc["total_stock"] == 0
    assert zinc["has_low_stock"] is True
    assert Decimal(zinc["display_price"]) == Decimal("1.20")


def test_lookup_endpoint(client, seed, amoxicillin):
    seed("ph1", amoxicillin)

    resp = client.get("/pharmacies/ph1/batches", params={"name": " AMOXICILLIN"})
    assert resp.status_code == 200
    assert [b["id"] for b in resp.json()] == ["A", "B"]


def test_allocation_preview_does_not_write(client, seed, amoxicillin):
    seed("ph1", amoxicillin)
    body = {"product_name": "Amoxicillin", "quantity": 12, "as_of": "2025-06-01"}

    first = client.post("/pharmacies/ph1/allocations", json=body)
    second = client.post("/pharmacies/ph1/allocations", json=body)
    assert first.status_code == 200
    payload = first.json()
    assert [(d["batch_id"], d["quantity"]) for d in payload["deductions"]] == [("A", 10), ("B", 2)]
    assert payload["batch_expiry_info"] == ["10x exp 07/25", "2x exp 08/25"]
    assert payload["used_multiple_batches"] is True
    assert payload == second.json()


def test_checkout_endpoint(client, seed, amoxicillin):
    seed("ph1", amoxicillin)

    resp = client.post(
        "/pharmacies/ph1/checkout",
        json={"product_name": "Amoxicillin", "quantity": 3, "as_of": "2025-06-01"},
    )
    assert resp.status_code == 200
    assert resp.json()["total_deducted"] == 3

    short = client.post(
        "/pharmacies/ph1/checkout",
        json={"product_name": "Amoxicillin", "quantity": 100, "as_of": "2025-06-01"},
    )
    assert short.status_code == 409
    assert short.json()["error"] == "insufficient_stock"
    assert short.json()["available"] == 12


def test_negative_quantity_is_rejected(client):
    resp = client.post("/pharmacies/ph1/allocations", json={"product_name": "Zinc", "quantity": -1})
    assert resp.status_code == 422
