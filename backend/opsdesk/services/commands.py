# Overview: Canonical command variants produced by the interpreter and consumed by the executor.

"""
Command model (authoritative)

One frozen dataclass per intent. Every variant carries enough fields to run
on its own; optional fields are validated by the executor, not here.

Invariants:
- Numeric fields are finite floats or None (never NaN/inf); the normalizer
  enforces this for anything coming from outside.
- payment_status is always "paid" or "unpaid".
- Anything the interpreter cannot map becomes Unknown, which carries the
  clarifying question to show the user.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Union


@dataclass(frozen=True)
class RecordSale:
    action: ClassVar[str] = "record_sale"
    product_name: str | None = None
    quantity: float | None = None
    unit_price: float | None = None
    payment_status: str = "paid"

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "payment_status": self.payment_status,
        }


@dataclass(frozen=True)
class RecordExpense:
    action: ClassVar[str] = "record_expense"
    expense_name: str | None = None
    amount: float | None = None
    category: str | None = None

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "expense_name": self.expense_name,
            "amount": self.amount,
            "category": self.category,
        }


@dataclass(frozen=True)
class AddStock:
    action: ClassVar[str] = "add_stock"
    product_name: str | None = None
    quantity: float | None = None

    def to_dict(self) -> dict:
        return {"action": self.action, "product_name": self.product_name, "quantity": self.quantity}


@dataclass(frozen=True)
class RemoveStock:
    action: ClassVar[str] = "remove_stock"
    product_name: str | None = None
    quantity: float | None = None

    def to_dict(self) -> dict:
        return {"action": self.action, "product_name": self.product_name, "quantity": self.quantity}


@dataclass(frozen=True)
class CreateProduct:
    action: ClassVar[str] = "create_product"
    product_name: str | None = None
    reorder_threshold: float | None = None

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "product_name": self.product_name,
            "reorder_threshold": self.reorder_threshold,
        }


@dataclass(frozen=True)
class Analytics:
    action: ClassVar[str] = "analytics"
    metric: str = "profit"
    period: str = "today"
    payment_split: bool = False

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "metric": self.metric,
            "period": self.period,
            "payment_split": self.payment_split,
        }


@dataclass(frozen=True)
class SendEmail:
    action: ClassVar[str] = "send_email"
    to: str | None = None
    subject: str | None = None
    message: str | None = None

    def to_dict(self) -> dict:
        return {"action": self.action, "to": self.to, "subject": self.subject, "message": self.message}


@dataclass(frozen=True)
class LineItem:
    name: str
    quantity: float = 1
    unit_price: float = 0

    def to_dict(self) -> dict:
        return {"name": self.name, "quantity": self.quantity, "unit_price": self.unit_price}


@dataclass(frozen=True)
class CreateDocument:
    """Invoice or receipt handed to the invoicing collaborator."""
    action: ClassVar[str] = "create_invoice"
    to: str | None = None
    items: tuple[LineItem, ...] = field(default_factory=tuple)
    note: str | None = None
    send_email: bool = True

    @property
    def kind(self) -> str:
        return self.action.replace("create_", "", 1)

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "to": self.to,
            "items": [item.to_dict() for item in self.items],
            "note": self.note,
            "send_email": self.send_email,
        }


@dataclass(frozen=True)
class CreateInvoice(CreateDocument):
    action: ClassVar[str] = "create_invoice"


@dataclass(frozen=True)
class CreateReceipt(CreateDocument):
    action: ClassVar[str] = "create_receipt"


@dataclass(frozen=True)
class Unknown:
    action: ClassVar[str] = "unknown"
    ask: str | None = None

    def to_dict(self) -> dict:
        return {"action": self.action, "ask": self.ask}


Command = Union[
    RecordSale,
    RecordExpense,
    AddStock,
    RemoveStock,
    CreateProduct,
    Analytics,
    SendEmail,
    CreateInvoice,
    CreateReceipt,
    Unknown,
]

COMMAND_TYPES: dict[str, type] = {
    cls.action: cls
    for cls in (
        RecordSale,
        RecordExpense,
        AddStock,
        RemoveStock,
        CreateProduct,
        Analytics,
        SendEmail,
        CreateInvoice,
        CreateReceipt,
        Unknown,
    )
}

PREMIUM_ACTIONS = frozenset({"send_email", "create_invoice", "create_receipt"})

ANALYTICS_METRICS = ("top_products", "revenue", "expenses", "profit")
ANALYTICS_PERIODS = ("today", "week", "month", "all")

CLARIFICATION_PROMPT = (
    "I didn't understand. Try: \"I sold 2 rice for $4 each\" or \"spent $15 on gas\"."
)
