# Overview: Coerces loosely-typed extraction output into canonical command variants.

"""
Command normalization

Input is untrusted: dicts from the remote model, dicts built by tests or the
CLI, or already-canonical command objects. Output is always a canonical
variant from commands.py.

Rules:
- Strings are trimmed; blank strings become None.
- Numbers are parsed ("$4.50", "1,200", 3); non-finite or unparseable values
  become None.
- payment_status is "unpaid" only when explicitly unpaid, else "paid".
- Unrecognized actions become Unknown.
- Normalizing an already-canonical command returns an equal command.
"""

from __future__ import annotations

import math
from typing import Any, Iterable

from .commands import (
    ANALYTICS_METRICS,
    ANALYTICS_PERIODS,
    AddStock,
    Analytics,
    Command,
    COMMAND_TYPES,
    CreateInvoice,
    CreateProduct,
    CreateReceipt,
    LineItem,
    RecordExpense,
    RecordSale,
    RemoveStock,
    SendEmail,
    Unknown,
)

ACTION_ALIASES = {
    "get_analytics": "analytics",
    "sale": "record_sale",
    "expense": "record_expense",
    "restock": "add_stock",
    "invoice": "create_invoice",
    "receipt": "create_receipt",
    "email": "send_email",
}

# Legacy metric names from earlier model prompts: (metric, payment_split)
METRIC_ALIASES = {
    "profit_after_inventory": ("profit", False),
    "profit_without_inventory": ("profit", False),
    "revenue_split": ("revenue", True),
    "paid_vs_unpaid": ("revenue", True),
    "expense": ("expenses", False),
    "top_selling": ("top_products", False),
}


def clean_str(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def clean_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    else:
        s = str(value).strip().replace(",", "").replace("$", "")
        if not s:
            return None
        try:
            number = float(s)
        except (OverflowError, ValueError):
            return None
    if not math.isfinite(number):
        return None
    return number


def clean_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    s = str(value).strip().lower()
    if s in {"true", "yes", "1", "y"}:
        return True
    if s in {"false", "no", "0", "n"}:
        return False
    return default


def _first_str(raw: dict, *keys: str) -> str | None:
    for key in keys:
        s = clean_str(raw.get(key))
        if s is not None:
            return s
    return None


def _first_number(raw: dict, *keys: str) -> float | None:
    for key in keys:
        n = clean_number(raw.get(key))
        if n is not None:
            return n
    return None


def _payment_status(value: Any) -> str:
    return "unpaid" if clean_str(value) and str(value).strip().lower() == "unpaid" else "paid"


def _line_items(raw_items: Any) -> tuple[LineItem, ...]:
    if not isinstance(raw_items, (list, tuple)):
        return ()
    items = []
    for raw in raw_items:
        if isinstance(raw, LineItem):
            raw = raw.to_dict()
        if not isinstance(raw, dict):
            continue
        name = _first_str(raw, "name", "description", "product_name", "item")
        unit_price = _first_number(raw, "unit_price", "price", "amount")
        if name is None or unit_price is None:
            continue
        quantity = _first_number(raw, "quantity", "qty")
        items.append(LineItem(name=name, quantity=quantity if quantity is not None else 1, unit_price=unit_price))
    return tuple(items)


def _analytics(raw: dict) -> Analytics:
    metric = (clean_str(raw.get("metric")) or "profit").lower()
    payment_split = clean_bool(raw.get("payment_split"), False)
    if metric in METRIC_ALIASES:
        metric, split = METRIC_ALIASES[metric]
        payment_split = payment_split or split
    if metric not in ANALYTICS_METRICS:
        metric = "profit"

    period = (clean_str(raw.get("period")) or "today").lower()
    if period not in ANALYTICS_PERIODS:
        period = "today"

    return Analytics(metric=metric, period=period, payment_split=payment_split)


def normalize_command(raw: Any) -> Command:
    """Coerce one raw object into a canonical command."""
    if hasattr(raw, "to_dict") and getattr(raw, "action", None) in COMMAND_TYPES:
        raw = raw.to_dict()
    if not isinstance(raw, dict):
        return Unknown()

    action = (clean_str(raw.get("action")) or "unknown").lower()
    action = ACTION_ALIASES.get(action, action)

    if action == "record_sale":
        return RecordSale(
            product_name=_first_str(raw, "product_name", "product", "item"),
            quantity=_first_number(raw, "quantity", "qty", "count"),
            unit_price=_first_number(raw, "unit_price", "price", "unit_cost"),
            payment_status=_payment_status(raw.get("payment_status")),
        )

    if action == "record_expense":
        category = clean_str(raw.get("category"))
        return RecordExpense(
            expense_name=_first_str(raw, "expense_name", "name", "expense", "description"),
            amount=_first_number(raw, "amount", "cost", "total"),
            category=category.lower() if category else None,
        )

    if action in ("add_stock", "remove_stock"):
        cls = AddStock if action == "add_stock" else RemoveStock
        return cls(
            product_name=_first_str(raw, "product_name", "product", "item"),
            quantity=_first_number(raw, "quantity", "qty", "count"),
        )

    if action == "create_product":
        return CreateProduct(
            product_name=_first_str(raw, "product_name", "product", "name"),
            reorder_threshold=_first_number(raw, "reorder_threshold", "reorder_level"),
        )

    if action == "analytics":
        return _analytics(raw)

    if action == "send_email":
        return SendEmail(
            to=_first_str(raw, "to", "email", "recipient"),
            subject=clean_str(raw.get("subject")),
            message=_first_str(raw, "message", "body", "text"),
        )

    if action in ("create_invoice", "create_receipt"):
        cls = CreateInvoice if action == "create_invoice" else CreateReceipt
        return cls(
            to=_first_str(raw, "to", "email", "recipient"),
            items=_line_items(raw.get("items")),
            note=clean_str(raw.get("note")),
            send_email=clean_bool(raw.get("send_email"), True),
        )

    return Unknown(ask=clean_str(raw.get("ask")))


def normalize_many(raw: Any) -> list[Command]:
    """
    Accepts {"actions": [...]}, {"commands": [...]}, a bare list, or a single
    object, and normalizes each entry.
    """
    items: Iterable[Any]
    if isinstance(raw, (list, tuple)):
        items = raw
    elif isinstance(raw, dict) and isinstance(raw.get("actions"), list):
        items = raw["actions"]
    elif isinstance(raw, dict) and isinstance(raw.get("commands"), list):
        items = raw["commands"]
    elif raw is None:
        items = []
    else:
        items = [raw]
    return [normalize_command(item) for item in items]
