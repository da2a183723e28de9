# Overview: Records sale facts and the matching stock decrease.

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from ..extensions import db
from ..models import Product, Sale
from .inventory_service import adjust_stock

"""
Sales invariants

- A sale is an append-only fact: product, whole quantity, unit price in
  cents (half-up), payment status.
- Recording a sale decreases stock by the quantity sold in the same unit of
  work. Stock may go negative.
- The caller commits.
"""

PAYMENT_STATUSES = ("paid", "unpaid")

# Largest quantity or cent amount accepted into an integer column.
MAX_STORED_INT = 2**31 - 1


def to_cents(amount) -> int:
    """Decimal currency amount -> integer cents, rounded half-up."""
    try:
        d = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValueError("invalid amount")
    if not d.is_finite():
        raise ValueError("invalid amount")
    return int((d * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def record_sale(
    *,
    workspace_id: str,
    product: Product,
    quantity: int,
    unit_price_cents: int,
    payment_status: str = "paid",
) -> tuple[Sale, int]:
    """Returns (sale, new quantity on hand)."""
    if quantity <= 0:
        raise ValueError("quantity must be positive")
    if unit_price_cents < 0:
        raise ValueError("unit price cannot be negative")
    if payment_status not in PAYMENT_STATUSES:
        raise ValueError("invalid payment status")

    sale = Sale(
        workspace_id=workspace_id,
        product_id=product.id,
        quantity_sold=quantity,
        unit_price_cents=unit_price_cents,
        payment_status=payment_status,
    )
    db.session.add(sale)
    db.session.flush()

    new_qty = adjust_stock(
        workspace_id=workspace_id,
        product_id=product.id,
        delta=-quantity,
        reason="sale",
        note=f"sale {sale.id}",
    )
    return sale, new_qty
