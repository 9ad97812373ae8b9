from __future__ import annotations

import logging
from datetime import date, datetime

from lotstock.core.config import get_settings
from lotstock.core.errors import InsufficientStockError, StaleSnapshotError, StockConflictError
from lotstock.domain.batches.allocation import allocate
from lotstock.domain.batches.models import DeductionPlan
from lotstock.persistence.batches import apply_plan, load_snapshot
from lotstock.persistence.pg import session_scope

logger = logging.getLogger(__name__)


def checkout_line(
    pharmacy_id: str,
    product_name: str,
    quantity: int,
    reference_now: date | datetime,
    allow_partial: bool = False,
    max_attempts: int | None = None,
) -> DeductionPlan:
    """Allocate one sale line against a fresh snapshot and persist it.

    Every attempt reads its own snapshot. A guarded write that finds less
    stock than the plan expects rolls the attempt back and the plan is
    recomputed from a new snapshot.
    """
    attempts = max_attempts or get_settings().checkout_max_attempts
    for attempt in range(1, attempts + 1):
        try:
            with session_scope() as session:
                snapshot = load_snapshot(session, pharmacy_id)
                plan = allocate(snapshot, product_name, quantity, reference_now)
                if plan.shortfall and not allow_partial:
                    raise InsufficientStockError(product_name, quantity, plan.total_deducted)
                apply_plan(session, plan)
        except StaleSnapshotError as exc:
            logger.warning(
                "stale snapshot on checkout: pharmacy=%s product=%s attempt=%s/%s: %s",
                pharmacy_id, product_name, attempt, attempts, exc,
            )
            continue
        logger.info(
            "checkout applied: pharmacy=%s product=%s requested=%s deducted=%s batches=%s",
            pharmacy_id, product_name, quantity, plan.total_deducted, len(plan.deductions),
        )
        return plan
    raise StockConflictError(
        f"could not apply allocation for {product_name} after {attempts} attempts"
    )
