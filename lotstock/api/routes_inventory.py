from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from lotstock.api.schemas import AllocationRequest, CheckoutRequest, GroupedProductOut
from lotstock.api.utils import resolve_reference_date
from lotstock.core.config import get_settings
from lotstock.domain.batches.aggregates import group_by_product
from lotstock.domain.batches.allocation import allocate, find_by_name
from lotstock.domain.batches.models import Batch, DeductionPlan
from lotstock.persistence.batches import load_snapshot
from lotstock.persistence.pg import get_session
from lotstock.services.checkout import checkout_line

router = APIRouter(prefix="/pharmacies/{pharmacy_id}", tags=["inventory"])


def _plan_payload(plan: DeductionPlan) -> dict:
    return {**plan.to_dict(), "fingerprint": plan.fingerprint()}


@router.get("/products", response_model=list[GroupedProductOut])
def list_products(
    pharmacy_id: str,
    as_of: date | None = Query(default=None, description="Reference date, defaults to today (UTC)"),
    session: Session = Depends(get_session),
):
    snapshot = load_snapshot(session, pharmacy_id)
    groups = group_by_product(
        snapshot,
        resolve_reference_date(as_of),
        fallback_reorder_level=get_settings().low_stock_fallback_reorder_level,
    )
    return [GroupedProductOut.from_group(group) for group in groups]


@router.get("/batches", response_model=list[Batch])
def lookup_batches(
    pharmacy_id: str,
    name: str = Query(..., min_length=1),
    session: Session = Depends(get_session),
):
    return find_by_name(load_snapshot(session, pharmacy_id), name)


@router.post("/allocations")
def preview_allocation(
    pharmacy_id: str,
    request: AllocationRequest,
    session: Session = Depends(get_session),
):
    plan = allocate(
        load_snapshot(session, pharmacy_id),
        request.product_name,
        request.quantity,
        resolve_reference_date(request.as_of),
    )
    return _plan_payload(plan)


@router.post("/checkout")
def checkout(pharmacy_id: str, request: CheckoutRequest):
    plan = checkout_line(
        pharmacy_id,
        request.product_name,
        request.quantity,
        resolve_reference_date(request.as_of),
        allow_partial=request.allow_partial,
    )
    return _plan_payload(plan)
