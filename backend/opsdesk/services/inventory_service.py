# Overview: Atomic stock-balance changes per (workspace, product).

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import InventoryBalance
from ..time_utils import utcnow
from .ledger_service import append_movement

"""
Inventory balance invariants (authoritative)

- One InventoryBalance row per (workspace, product); quantity_on_hand is the
  stored truth and is never recomputed from movements.
- Every change is a single relative UPDATE (quantity_on_hand + delta), so
  concurrent sales and restocks of the same product never lose updates.
- A missing row is created with quantity = delta. If a concurrent writer
  created it first, the insert fails on the unique constraint and the
  relative UPDATE is applied instead.
- Stock may go negative; selling ahead of a restock is allowed.
- The caller owns the transaction; nothing here commits.
"""


def _delta_stmt(workspace_id: str, product_id: int, delta: int):
    return (
        update(InventoryBalance)
        .where(
            InventoryBalance.workspace_id == workspace_id,
            InventoryBalance.product_id == product_id,
        )
        .values(
            quantity_on_hand=InventoryBalance.quantity_on_hand + delta,
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )


def get_quantity_on_hand(workspace_id: str, product_id: int) -> int:
    qty = (
        db.session.query(InventoryBalance.quantity_on_hand)
        .filter_by(workspace_id=workspace_id, product_id=product_id)
        .scalar()
    )
    return int(qty or 0)


def _apply_inventory_delta_inner(*, workspace_id: str, product_id: int, delta: int) -> int:
    """Apply delta and return the new balance."""
    stmt = _delta_stmt(workspace_id, product_id, delta)
    result = db.session.execute(stmt)
    if not result.rowcount:
        try:
            with db.session.begin_nested():
                db.session.add(
                    InventoryBalance(
                        workspace_id=workspace_id,
                        product_id=product_id,
                        quantity_on_hand=delta,
                    )
                )
                db.session.flush()
        except IntegrityError:
            result = db.session.execute(stmt)
            if not result.rowcount:
                raise
    db.session.flush()
    return get_quantity_on_hand(workspace_id, product_id)


def adjust_stock(
    *,
    workspace_id: str,
    product_id: int,
    delta: int,
    reason: str,
    note: str | None = None,
) -> int:
    """Apply a signed stock change plus its movement row; returns the new balance."""
    if delta == 0:
        return get_quantity_on_hand(workspace_id, product_id)
    new_qty = _apply_inventory_delta_inner(workspace_id=workspace_id, product_id=product_id, delta=delta)
    append_movement(
        workspace_id=workspace_id,
        product_id=product_id,
        quantity_change=delta,
        reason=reason,
        note=note,
    )
    return new_qty

