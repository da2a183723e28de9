# Overview: Records expense facts.

from __future__ import annotations

from ..extensions import db
from ..models import Expense

INVENTORY_CATEGORIES = frozenset({"inventory", "inventory_purchase"})
DEFAULT_CATEGORY = "general"


def normalize_category(category: str | None) -> str:
    value = (category or "").strip().lower()
    return value or DEFAULT_CATEGORY


def is_inventory_category(category: str | None) -> bool:
    return normalize_category(category) in INVENTORY_CATEGORIES


def record_expense(*, workspace_id: str, name: str, amount_cents: int, category: str | None = None) -> Expense:
    """Insert an expense row (flushed, not committed)."""
    if amount_cents <= 0:
        raise ValueError("amount must be positive")
    expense = Expense(
        workspace_id=workspace_id,
        name=name.strip(),
        amount_cents=amount_cents,
        category=normalize_category(category),
    )
    db.session.add(expense)
    db.session.flush()
    return expense
