# Overview: On-demand revenue/expense/profit rollups for a workspace and period.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy import case, func

from ..extensions import db
from ..models import Expense, Product, Sale
from ..time_utils import period_start, to_utc_z, utcnow
from .commands import ANALYTICS_PERIODS
from .expense_service import INVENTORY_CATEGORIES

"""
Analytics invariants

- Snapshots are derived on demand from Sale and Expense rows and never
  persisted.
- All sums are exact integer cents.
- revenue_total = revenue_paid + revenue_unpaid
- profit_after_inventory_purchases = revenue_total - expenses_total
- profit_without_inventory_purchases
      = revenue_total - (expenses_total - inventory_purchases)
- Period lower bounds are computed in the workspace timezone; "all" has no
  bound.
"""


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


@dataclass(frozen=True)
class TopProduct:
    product_id: int
    name: str
    quantity_sold: int
    revenue_cents: int

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "name": self.name,
            "qtySold": self.quantity_sold,
            "revenue": cents_to_decimal(self.revenue_cents),
            "revenueCents": self.revenue_cents,
        }


@dataclass(frozen=True)
class AnalyticsSnapshot:
    period: str
    since: datetime | None
    revenue_total_cents: int = 0
    revenue_paid_cents: int = 0
    revenue_unpaid_cents: int = 0
    expenses_total_cents: int = 0
    inventory_purchases_cents: int = 0
    top_products: tuple[TopProduct, ...] = field(default_factory=tuple)

    @property
    def profit_after_inventory_purchases_cents(self) -> int:
        return self.revenue_total_cents - self.expenses_total_cents

    @property
    def profit_without_inventory_purchases_cents(self) -> int:
        return self.revenue_total_cents - (self.expenses_total_cents - self.inventory_purchases_cents)

    def to_dict(self) -> dict:
        amounts = {
            "revenueTotal": self.revenue_total_cents,
            "revenuePaid": self.revenue_paid_cents,
            "revenueUnpaid": self.revenue_unpaid_cents,
            "expensesTotal": self.expenses_total_cents,
            "inventoryPurchases": self.inventory_purchases_cents,
            "profitAfterInventoryPurchases": self.profit_after_inventory_purchases_cents,
            "profitWithoutInventoryPurchases": self.profit_without_inventory_purchases_cents,
        }
        out = {"period": self.period, "since": to_utc_z(self.since)}
        for key, cents in amounts.items():
            out[key] = cents_to_decimal(cents)
            out[f"{key}Cents"] = cents
        out["topProducts"] = [p.to_dict() for p in self.top_products]
        return out


def cents_to_decimal(cents: int) -> float:
    return float(Decimal(cents) / 100)


def format_money(cents: int, symbol: str = "$") -> str:
    sign = "-" if cents < 0 else ""
    return f"{sign}{symbol}{Decimal(abs(cents)) / 100:.2f}"


def _sales_totals(workspace_id: str, since: datetime | None) -> tuple[int, int]:
    revenue = Sale.quantity_sold * Sale.unit_price_cents
    unpaid = func.lower(Sale.payment_status) == "unpaid"
    query = db.session.query(
        func.coalesce(func.sum(case((unpaid, 0), else_=revenue)), 0).label("paid"),
        func.coalesce(func.sum(case((unpaid, revenue), else_=0)), 0).label("unpaid"),
    ).filter(Sale.workspace_id == workspace_id)
    if since is not None:
        query = query.filter(Sale.created_at >= since)
    row = query.one()
    return int(row.paid or 0), int(row.unpaid or 0)


def _expense_totals(workspace_id: str, since: datetime | None) -> tuple[int, int]:
    is_inventory = func.lower(Expense.category).in_(sorted(INVENTORY_CATEGORIES))
    query = db.session.query(
        func.coalesce(func.sum(Expense.amount_cents), 0).label("total"),
        func.coalesce(func.sum(case((is_inventory, Expense.amount_cents), else_=0)), 0).label("inventory"),
    ).filter(Expense.workspace_id == workspace_id)
    if since is not None:
        query = query.filter(Expense.created_at >= since)
    row = query.one()
    return int(row.total or 0), int(row.inventory or 0)


def top_products(workspace_id: str, since: datetime | None, limit: int = 5) -> list[TopProduct]:
    """Sales grouped by product, highest revenue first; unknown names show the raw id."""
    revenue = func.sum(Sale.quantity_sold * Sale.unit_price_cents)
    query = db.session.query(
        Sale.product_id,
        func.coalesce(func.sum(Sale.quantity_sold), 0).label("qty"),
        func.coalesce(revenue, 0).label("revenue"),
    ).filter(Sale.workspace_id == workspace_id)
    if since is not None:
        query = query.filter(Sale.created_at >= since)
    rows = (
        query.group_by(Sale.product_id)
        .order_by(revenue.desc(), Sale.product_id.asc())
        .limit(max(int(limit), 0))
        .all()
    )
    if not rows:
        return []

    product_ids = [row.product_id for row in rows]
    names = dict(
        db.session.query(Product.id, Product.name)
        .filter(Product.workspace_id == workspace_id, Product.id.in_(product_ids))
        .all()
    )
    return [
        TopProduct(
            product_id=row.product_id,
            name=names.get(row.product_id) or str(row.product_id),
            quantity_sold=int(row.qty or 0),
            revenue_cents=int(row.revenue or 0),
        )
        for row in rows
    ]


def compute_analytics(
    *,
    workspace_id: str,
    period: str = "today",
    tz_name: str | None = None,
    top_n: int = 5,
    now: datetime | None = None,
) -> AnalyticsSnapshot:
    if period not in ANALYTICS_PERIODS:
        raise ReportError("period must be today, week, month, or all")

    since = period_start(period, tz_name, now=now or utcnow())
    paid, unpaid = _sales_totals(workspace_id, since)
    expenses_total, inventory_purchases = _expense_totals(workspace_id, since)

    return AnalyticsSnapshot(
        period=period,
        since=since,
        revenue_total_cents=paid + unpaid,
        revenue_paid_cents=paid,
        revenue_unpaid_cents=unpaid,
        expenses_total_cents=expenses_total,
        inventory_purchases_cents=inventory_purchases,
        top_products=tuple(top_products(workspace_id, since, limit=top_n)),
    )


def describe_snapshot(snapshot: AnalyticsSnapshot, *, metric: str, payment_split: bool = False, symbol: str = "$") -> str:
    """One result line (without bullet) for an analytics command."""
    period = snapshot.period

    def money(cents: int) -> str:
        return format_money(cents, symbol)

    if metric == "top_products":
        if not snapshot.top_products:
            lines = ["No sales yet in this period."]
        else:
            lines = [
                f"{i}. {p.name} - {p.quantity_sold} sold ({money(p.revenue_cents)})"
                for i, p in enumerate(snapshot.top_products, start=1)
            ]
        return f"Top products ({period}):\n" + "\n".join(lines)

    if metric == "revenue":
        if payment_split:
            return (
                f"Revenue split ({period}): Paid {money(snapshot.revenue_paid_cents)}"
                f" | Unpaid {money(snapshot.revenue_unpaid_cents)}"
                f" | Total {money(snapshot.revenue_total_cents)}"
            )
        return f"Revenue ({period}): {money(snapshot.revenue_total_cents)}"

    if metric == "expenses":
        return (
            f"Expenses ({period}): {money(snapshot.expenses_total_cents)}"
            f" (inventory purchases {money(snapshot.inventory_purchases_cents)})"
        )

    return (
        f"Profit ({period}): after inventory {money(snapshot.profit_after_inventory_purchases_cents)}"
        f" | operational {money(snapshot.profit_without_inventory_purchases_cents)}"
    )
