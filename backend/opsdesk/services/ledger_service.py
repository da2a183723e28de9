# Overview: Best-effort inventory movement log written alongside balance changes.

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import InventoryMovement

"""
Inventory movement log

- Append-only; one row per balance change with a signed quantity_change.
- Written inside a SAVEPOINT so a failure here never rolls back the balance
  change or the fact row it accompanies. Failures are logged, not raised.
- Balances are authoritative; movements are never summed to derive stock.
"""


def append_movement(
    *,
    workspace_id: str,
    product_id: int,
    quantity_change: int,
    reason: str,
    note: str | None = None,
) -> InventoryMovement | None:
    movement = InventoryMovement(
        workspace_id=workspace_id,
        product_id=product_id,
        quantity_change=quantity_change,
        reason=reason,
        note=note,
    )
    try:
        with db.session.begin_nested():
            db.session.add(movement)
            db.session.flush()
    except SQLAlchemyError:
        current_app.logger.warning(
            "Failed to record inventory movement (workspace=%s product=%s reason=%s)",
            workspace_id,
            product_id,
            reason,
            exc_info=True,
        )
        return None
    return movement


def list_movements(*, workspace_id: str, product_id: int, limit: int = 200) -> list[InventoryMovement]:
    return (
        db.session.query(InventoryMovement)
        .filter_by(workspace_id=workspace_id, product_id=product_id)
        .order_by(InventoryMovement.created_at.desc(), InventoryMovement.id.desc())
        .limit(limit)
        .all()
    )
