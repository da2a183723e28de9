"""Command normalizer: coercion of loosely-typed extraction output."""

import math

import pytest

from opsdesk.services.command_normalizer import (
    clean_number,
    normalize_command,
    normalize_many,
)
from opsdesk.services.commands import (
    AddStock,
    Analytics,
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


CANONICAL = [
    RecordSale(product_name="rice", quantity=2.0, unit_price=4.0, payment_status="paid"),
    RecordSale(product_name="beans", quantity=1.0, unit_price=0.0, payment_status="unpaid"),
    RecordExpense(expense_name="gas", amount=15.0, category="general"),
    AddStock(product_name="rice", quantity=5.0),
    RemoveStock(product_name="rice", quantity=5.0),
    CreateProduct(product_name="Milk", reorder_threshold=3.0),
    Analytics(metric="revenue", period="week", payment_split=True),
    SendEmail(to="bob@example.com", subject="Hi", message="Order ready"),
    CreateInvoice(to="bob@example.com", items=(LineItem(name="rice", quantity=2.0, unit_price=4.0),), note="thanks"),
    CreateReceipt(to="bob@example.com", items=(), note=None, send_email=False),
    Unknown(ask="What did you sell?"),
]


@pytest.mark.parametrize("command", CANONICAL, ids=lambda c: c.action)
def test_normalizing_canonical_command_is_noop(command):
    assert normalize_command(command) == command
    assert normalize_command(normalize_command(command)) == command


def test_strings_trimmed_and_blank_becomes_none():
    cmd = normalize_command({"action": "record_sale", "product_name": "  rice ", "quantity": "2", "unit_price": "  "})
    assert cmd == RecordSale(product_name="rice", quantity=2.0, unit_price=None, payment_status="paid")

    cmd = normalize_command({"action": "record_expense", "expense_name": "   ", "amount": 5})
    assert cmd.expense_name is None


@pytest.mark.parametrize("raw,expected", [
    ("$4.50", 4.5),
    ("1,200", 1200.0),
    (3, 3.0),
    ("abc", None),
    ("", None),
    (None, None),
    (True, None),
    (float("nan"), None),
    (float("inf"), None),
    ("-inf", None),
])
def test_clean_number(raw, expected):
    assert clean_number(raw) == expected


def test_numbers_are_finite_or_absent():
    cmd = normalize_command({"action": "add_stock", "product_name": "rice", "quantity": float("nan")})
    assert cmd.quantity is None
    cmd = normalize_command({"action": "record_expense", "expense_name": "gas", "amount": "Infinity"})
    assert cmd.amount is None or math.isfinite(cmd.amount)
    cmd = normalize_command({"action": "record_sale", "product_name": "rice", "quantity": 10**400})
    assert cmd.quantity is None
    assert clean_number("1" + "0" * 400) is None


@pytest.mark.parametrize("status,expected", [
    ("unpaid", "unpaid"),
    (" UNPAID ", "unpaid"),
    ("paid", "paid"),
    ("pending", "paid"),
    (None, "paid"),
])
def test_payment_status_restricted(status, expected):
    cmd = normalize_command({"action": "record_sale", "product_name": "rice", "quantity": 1, "payment_status": status})
    assert cmd.payment_status == expected


def test_unrecognized_action_becomes_unknown():
    assert normalize_command({"action": "launch_rocket"}) == Unknown(ask=None)
    assert normalize_command({"product_name": "rice"}) == Unknown(ask=None)
    assert normalize_command("sold rice") == Unknown(ask=None)


def test_unknown_keeps_ask():
    assert normalize_command({"action": "unknown", "ask": " Which product? "}) == Unknown(ask="Which product?")


def test_field_and_action_aliases():
    cmd = normalize_command({"action": "sale", "product": "rice", "qty": "3", "price": "$2"})
    assert cmd == RecordSale(product_name="rice", quantity=3.0, unit_price=2.0)

    cmd = normalize_command({"action": "expense", "name": "Rent", "cost": 500, "category": "Rent"})
    assert cmd == RecordExpense(expense_name="Rent", amount=500.0, category="rent")


def test_legacy_analytics_names():
    assert normalize_command({"action": "get_analytics", "metric": "revenue_split", "period": "today"}) == Analytics(
        metric="revenue", period="today", payment_split=True
    )
    assert normalize_command({"action": "analytics", "metric": "profit_after_inventory"}) == Analytics(
        metric="profit", period="today"
    )


def test_analytics_defaults_for_bad_values():
    assert normalize_command({"action": "analytics", "metric": "vibes", "period": "decade"}) == Analytics()


def test_line_items_drop_incomplete_entries():
    cmd = normalize_command({
        "action": "create_invoice",
        "to": "bob@example.com",
        "items": [
            {"name": "rice", "quantity": 2, "unit_price": 4},
            {"description": "beans", "price": "1.50"},
            {"name": "no price"},
            "junk",
        ],
        "send_email": "no",
    })
    assert cmd.items == (
        LineItem(name="rice", quantity=2.0, unit_price=4.0),
        LineItem(name="beans", quantity=1, unit_price=1.5),
    )
    assert cmd.send_email is False


def test_normalize_many_shapes():
    sale = {"action": "record_sale", "product_name": "rice", "quantity": 1}
    assert len(normalize_many({"actions": [sale, sale]})) == 2
    assert len(normalize_many({"commands": [sale]})) == 1
    assert len(normalize_many([sale])) == 1
    assert normalize_many(sale) == [RecordSale(product_name="rice", quantity=1.0)]
    assert normalize_many(None) == []
