from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class Sale(db.Model):
    """
    Append-only sale fact. Never updated after insert.

    Money is stored in cents; revenue = quantity_sold * unit_price_cents.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_workspace_created", "workspace_id", "created_at"),
    )

    id = db.Column(db.Integer, primary_key=True)
    workspace_id = db.Column(db.String(64), db.ForeignKey("workspaces.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity_sold = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False, default=0)
    payment_status = db.Column(db.String(16), nullable=False, default="paid")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    product = db.relationship("Product")

    @property
    def revenue_cents(self) -> int:
        return self.quantity_sold * self.unit_price_cents

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "workspace_id": self.workspace_id,
            "product_id": self.product_id,
            "quantity_sold": self.quantity_sold,
            "unit_price_cents": self.unit_price_cents,
            "payment_status": self.payment_status,
            "created_at": to_utc_z(self.created_at),
        }


class Expense(db.Model):
    """Append-only expense fact. Category "inventory" marks stock purchases."""
    __tablename__ = "expenses"
    __table_args__ = (
        db.Index("ix_expenses_workspace_created", "workspace_id", "created_at"),
    )

    id = db.Column(db.Integer, primary_key=True)
    workspace_id = db.Column(db.String(64), db.ForeignKey("workspaces.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    category = db.Column(db.String(64), nullable=False, default="general")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "workspace_id": self.workspace_id,
            "name": self.name,
            "amount_cents": self.amount_cents,
            "category": self.category,
            "created_at": to_utc_z(self.created_at),
        }
