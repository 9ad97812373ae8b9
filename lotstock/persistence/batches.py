from __future__ import annotations

from typing import Iterable

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from lotstock.core.errors import StaleSnapshotError
from lotstock.domain.batches.models import Batch, DeductionPlan
from lotstock.persistence.models import BatchModel


def _to_batch(row: BatchModel) -> Batch:
    return Batch(
        id=row.id,
        name=row.name,
        category=row.category,
        current_stock=row.current_stock,
        reorder_level=row.reorder_level,
        expiry_date=row.expiry_date,
        unit_price=row.unit_price,
        selling_price=row.selling_price,
        batch_number=row.batch_number,
        barcode_id=row.barcode_id,
        pharmacy_id=row.pharmacy_id,
    )


def add_batches(session: Session, pharmacy_id: str, batches: Iterable[Batch]) -> list[BatchModel]:
    rows = [
        BatchModel(
            id=batch.id,
            pharmacy_id=pharmacy_id,
            name=batch.name,
            category=batch.category,
            batch_number=batch.batch_number,
            barcode_id=batch.barcode_id,
            current_stock=batch.current_stock,
            reorder_level=batch.reorder_level,
            expiry_date=batch.expiry_date,
            unit_price=batch.unit_price,
            selling_price=batch.selling_price,
        )
        for batch in batches
    ]
    session.add_all(rows)
    session.flush()
    return rows


def load_snapshot(session: Session, pharmacy_id: str) -> list[Batch]:
    """All batches of one pharmacy, in insertion order."""
    rows = session.scalars(
        select(BatchModel)
        .where(BatchModel.pharmacy_id == pharmacy_id)
        .order_by(BatchModel.seq_id.asc())
    ).all()
    return [_to_batch(row) for row in rows]


def apply_plan(session: Session, plan: DeductionPlan) -> None:
    """Apply each deduction as a guarded decrement.

    A deduction that no longer fits the stored stock raises
    StaleSnapshotError; the surrounding session scope rolls back every
    decrement of the plan.
    """
    for item in plan.deductions:
        result = session.execute(
            update(BatchModel)
            .where(BatchModel.id == item.batch_id)
            .where(BatchModel.current_stock >= item.quantity)
            .values(current_stock=BatchModel.current_stock - item.quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise StaleSnapshotError(item.batch_id, item.quantity)
