# Overview: Sentence segmentation and the local pattern-based parser bank.

"""
Local command parsing

Free text is split into statements (newlines and bullet glyphs), then each
statement runs through PARSERS in fixed priority order. The first parser that
returns a command wins; a statement nothing matches becomes Unknown.

Priority (do not reorder):
    email -> invoice/receipt -> analytics -> sale -> expense -> stock purchase
followed by the product-creation and stock-removal parsers.

Parsers are pure functions `str -> Command | None`. No NLP: keywords and
regular expressions only. Anything they cannot handle falls through to the
remote extractor (see extraction_service).
"""

from __future__ import annotations

import re
from typing import Callable, Optional

from .commands import (
    CLARIFICATION_PROMPT,
    AddStock,
    Analytics,
    Command,
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

Parser = Callable[[str], Optional[Command]]

_STATEMENT_SPLIT_RE = re.compile(r"[\r\n•]+")

_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}")
_EMAIL_KEYWORD_RE = re.compile(r"\b(e-?mail|mail|send|message|tell|write)\b", re.I)
_SUBJECT_RE = re.compile(r"\bsubject\s*:\s*(.+?)(?=\s*\b(?:message|body)\s*:|$)", re.I | re.S)
_MESSAGE_RE = re.compile(r"\b(?:message|body)\s*:\s*(.+)$", re.I | re.S)
_EMAIL_LEADING_FILLER_RE = re.compile(
    r"^(?:\s*(?:please|can you|could you|send|an|a|e-?mail|mail|message|to|tell|write|saying|that|them|him|her)\b[\s,:]*)+",
    re.I,
)

_DOCUMENT_KEYWORD_RE = re.compile(r"\b(invoice|receipt)\b", re.I)
_ITEM_RE = re.compile(
    r"(\d+)\s+([a-z][a-z0-9'\- ]*?)\s+(?:at|@|for|x)\s*\$?\s*(\d+(?:\.\d{1,2})?)",
    re.I,
)
_NOTE_RE = re.compile(r"\bnote\s*:\s*(.+)$", re.I | re.S)

_ANALYTICS_KEYWORD_RE = re.compile(
    r"\b(profit|profits|revenue|expenses|top selling|best selling|made money|make money)\b", re.I
)
_TOP_PRODUCTS_RE = re.compile(r"\b(top|best)[\s-]+sell(ing|ers?)\b|\btop products\b", re.I)

_SOLD_RE = re.compile(r"\bsold\b", re.I)
_SOLD_QTY_RE = re.compile(r"\bsold\s+(\d+)\s+", re.I)
_SOLD_NAME_RE = re.compile(r"\bsold\s+(?:\d+\s+)?(.+?)(?=\s+(?:for|at)\b|\s*@|$)", re.I)
_SALE_PRICE_RE = re.compile(r"(?:\bfor|\bat|@)\s*\$?\s*(\d+(?:,\d{3})*(?:\.\d+)?)", re.I)
_UNPAID_RE = re.compile(r"\b(unpaid|on credit|not paid)\b", re.I)

_EXPENSE_KEYWORD_RE = re.compile(r"\b(paid|spent|spend|expense)\b", re.I)
_MONEY_RE = re.compile(r"(-\s*)?\$\s*(-\s*)?(\d+(?:,\d{3})*(?:\.\d+)?)")
_NUMBER_RE = re.compile(r"(-\s*)?\b(\d+(?:,\d{3})*(?:\.\d+)?)")
_INVENTORY_KEYWORD_RE = re.compile(r"\b(inventory|stock|restock|restocking|goods)\b", re.I)
_EXPENSE_FILLER_RE = re.compile(
    r"\b(i|we|my|our|just|today|yesterday|paid|pay|spent|spend|expense|expenses|add|on|for|the|a|an|of|to|"
    r"dollars?|bucks|usd|and|in|total|cost)\b",
    re.I,
)

_PURCHASE_KEYWORD_RE = re.compile(r"\b(bought|purchased)\b", re.I)
_PURCHASE_QTY_RE = re.compile(r"\b(?:bought|purchased)\s+(\d+)\b", re.I)
_PURCHASE_NAME_RE = re.compile(
    r"\b(?:bought|purchased)\s+(?:\d+\s+)?(.+?)(?=\s+(?:for|at|from)\b|\s*@|$)", re.I
)

_PRODUCT_KEYWORD_RE = re.compile(r"\b(?:add|new|create)\s+(?:a\s+)?product\s+(.+)$", re.I)
_REORDER_RE = re.compile(r"\s*(?:,|with)?\s*\breorder(?:\s+(?:at|level|threshold))?\s*:?\s*(\d+)\b", re.I)

_REMOVAL_RE = re.compile(
    r"\b(?:removed|threw away|thrown away|damaged|spoiled|lost|wasted|expired)\s+(\d+)\s+(.+?)(?=\s+(?:from|due|because)\b|$)",
    re.I,
)

_UNIT_WORDS_RE = re.compile(
    r"\b(bags?|pcs|pieces?|packs?|packets?|boxes|box|cartons?|crates?|bottles?|cans?|units?|kgs?|kilos?|"
    r"lbs?|sacks?|dozens?|of|x)\b",
    re.I,
)
_TRAILING_NOISE_RE = re.compile(r"\b(each|today|yesterday|please)\b", re.I)
_ARTICLE_RE = re.compile(r"^(?:the|a|an|some)\s+", re.I)


def segment_statements(text: str) -> list[str]:
    """Split input into trimmed, non-empty statements, preserving order."""
    if not text:
        return []
    return [part.strip() for part in _STATEMENT_SPLIT_RE.split(text) if part.strip()]


def _squash(s: str) -> str:
    return re.sub(r"\s+", " ", s).strip(" \t,.;:-!?")


def _clean_product_name(raw: str | None) -> str | None:
    if not raw:
        return None
    name = _UNIT_WORDS_RE.sub(" ", raw)
    name = _TRAILING_NOISE_RE.sub(" ", name)
    name = _squash(name)
    name = _ARTICLE_RE.sub("", name)
    return name or None


def _to_number(digits: str) -> float:
    return float(digits.replace(",", ""))


def _first_amount(statement: str) -> float | None:
    """Prefer a $-marked amount; otherwise the first bare number."""
    m = _MONEY_RE.search(statement)
    if m:
        value = _to_number(m.group(3))
        return -value if (m.group(1) or m.group(2)) else value
    m = _NUMBER_RE.search(statement)
    if m:
        value = _to_number(m.group(2))
        return -value if m.group(1) else value
    return None


def parse_email(statement: str) -> Command | None:
    email = _EMAIL_RE.search(statement)
    if not email or not _EMAIL_KEYWORD_RE.search(statement):
        return None
    # Invoices and receipts mention an address too; let that parser have them
    if _DOCUMENT_KEYWORD_RE.search(statement):
        return None

    subject_m = _SUBJECT_RE.search(statement)
    message_m = _MESSAGE_RE.search(statement)
    subject = _squash(subject_m.group(1)) if subject_m else None
    message = _squash(message_m.group(1)) if message_m else None

    if message is None:
        remainder = statement.replace(email.group(0), " ")
        if subject_m:
            remainder = remainder.replace(subject_m.group(0), " ")
        remainder = _EMAIL_LEADING_FILLER_RE.sub("", remainder.strip())
        message = _squash(remainder) or None

    return SendEmail(to=email.group(0), subject=subject or None, message=message)


def parse_document(statement: str) -> Command | None:
    keyword = _DOCUMENT_KEYWORD_RE.search(statement)
    email = _EMAIL_RE.search(statement)
    if not keyword or not email:
        return None

    cls = CreateReceipt if keyword.group(1).lower() == "receipt" else CreateInvoice

    note = None
    body = statement.replace(email.group(0), " ")
    note_m = _NOTE_RE.search(body)
    if note_m:
        note = _squash(note_m.group(1)) or None
        body = body[: note_m.start()]

    items: tuple[LineItem, ...] = ()
    item_m = _ITEM_RE.search(body)
    if item_m:
        name = _clean_product_name(item_m.group(2))
        if name:
            items = (
                LineItem(
                    name=name,
                    quantity=float(item_m.group(1)),
                    unit_price=_to_number(item_m.group(3)),
                ),
            )

    return cls(to=email.group(0), items=items, note=note, send_email=True)


def parse_analytics(statement: str) -> Command | None:
    if not _ANALYTICS_KEYWORD_RE.search(statement):
        return None
    lowered = statement.lower()
    period = "month" if "month" in lowered else "today"

    if _TOP_PRODUCTS_RE.search(statement):
        metric = "top_products"
    elif "revenue" in lowered:
        metric = "revenue"
    elif re.search(r"\bexpenses\b", lowered):
        metric = "expenses"
    else:
        metric = "profit"

    payment_split = metric == "revenue" and "unpaid" in lowered
    return Analytics(metric=metric, period=period, payment_split=payment_split)


def parse_sale(statement: str) -> Command | None:
    if not _SOLD_RE.search(statement):
        return None

    qty_m = _SOLD_QTY_RE.search(statement)
    quantity = float(qty_m.group(1)) if qty_m else None

    name_m = _SOLD_NAME_RE.search(statement)
    product_name = _clean_product_name(name_m.group(1)) if name_m else None

    price_m = _SALE_PRICE_RE.search(statement)
    unit_price = _to_number(price_m.group(1)) if price_m else 0.0

    payment_status = "unpaid" if _UNPAID_RE.search(statement) else "paid"
    return RecordSale(
        product_name=product_name,
        quantity=quantity,
        unit_price=unit_price,
        payment_status=payment_status,
    )


def parse_expense(statement: str) -> Command | None:
    if not _EXPENSE_KEYWORD_RE.search(statement):
        return None
    amount = _first_amount(statement)
    if amount is None or amount <= 0:
        return None

    name = _MONEY_RE.sub(" ", statement)
    name = _NUMBER_RE.sub(" ", name)
    name = _EXPENSE_FILLER_RE.sub(" ", name)
    name = _squash(name.replace("$", " ")).lower() or None

    category = "inventory" if _INVENTORY_KEYWORD_RE.search(statement) else "general"
    return RecordExpense(expense_name=name, amount=amount, category=category)


def parse_stock_purchase(statement: str) -> Command | None:
    if not _PURCHASE_KEYWORD_RE.search(statement):
        return None
    qty_m = _PURCHASE_QTY_RE.search(statement)
    quantity = float(qty_m.group(1)) if qty_m else 1.0

    name_m = _PURCHASE_NAME_RE.search(statement)
    product_name = _clean_product_name(name_m.group(1)) if name_m else None
    return AddStock(product_name=product_name, quantity=quantity)


def parse_product(statement: str) -> Command | None:
    m = _PRODUCT_KEYWORD_RE.search(statement)
    if not m:
        return None
    rest = m.group(1)
    threshold = None
    reorder_m = _REORDER_RE.search(rest)
    if reorder_m:
        threshold = float(reorder_m.group(1))
        rest = rest[: reorder_m.start()]
    return CreateProduct(product_name=_squash(rest) or None, reorder_threshold=threshold)


def parse_stock_removal(statement: str) -> Command | None:
    m = _REMOVAL_RE.search(statement)
    if not m:
        return None
    return RemoveStock(product_name=_clean_product_name(m.group(2)), quantity=float(m.group(1)))


PARSERS: tuple[Parser, ...] = (
    parse_email,
    parse_document,
    parse_analytics,
    parse_sale,
    parse_expense,
    parse_stock_purchase,
    parse_product,
    parse_stock_removal,
)


def parse_statement(statement: str) -> Command:
    for parser in PARSERS:
        command = parser(statement)
        if command is not None:
            return command
    return Unknown(ask=CLARIFICATION_PROMPT)


def parse_local(text: str) -> list[Command]:
    """
    Run every statement through the parser bank.

    If nothing resolved, only the first Unknown is kept so the user sees one
    clarifying question; otherwise Unknowns are dropped.
    """
    commands = [parse_statement(s) for s in segment_statements(text)]
    if not commands:
        return [Unknown(ask=CLARIFICATION_PROMPT)]

    resolved = [c for c in commands if not isinstance(c, Unknown)]
    if resolved:
        return resolved
    return commands[:1]


def is_unresolved(commands: list[Command]) -> bool:
    """True when local parsing produced nothing but a single Unknown."""
    return len(commands) == 1 and isinstance(commands[0], Unknown)
