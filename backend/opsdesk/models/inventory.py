from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class Product(db.Model):
    """
    Product master data, scoped to a workspace.

    Names are unique-ish per workspace by convention only; the assistant
    resolves them by case-insensitive substring match and creates missing
    products on first reference.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_workspace_name", "workspace_id", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    workspace_id = db.Column(db.String(64), db.ForeignKey("workspaces.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    reorder_threshold = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    workspace = db.relationship("Workspace", backref=db.backref("products", lazy=True))

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} workspace_id={self.workspace_id!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "workspace_id": self.workspace_id,
            "name": self.name,
            "reorder_threshold": self.reorder_threshold,
            "created_at": to_utc_z(self.created_at),
        }


class InventoryBalance(db.Model):
    """
    Current on-hand quantity, one row per product.

    quantity_on_hand is authoritative; it is never recomputed from
    InventoryMovement rows. Writes go through inventory_service only.
    """
    __tablename__ = "inventory_balances"
    __table_args__ = (
        db.UniqueConstraint("workspace_id", "product_id", name="uq_inventory_balances_workspace_product"),
    )

    id = db.Column(db.Integer, primary_key=True)
    workspace_id = db.Column(db.String(64), db.ForeignKey("workspaces.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity_on_hand = db.Column(db.Integer, nullable=False, default=0)

    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "workspace_id": self.workspace_id,
            "product_id": self.product_id,
            "quantity_on_hand": self.quantity_on_hand,
            "updated_at": to_utc_z(self.updated_at),
        }


class InventoryMovement(db.Model):
    """Append-only audit row for every balance change. Best-effort."""
    __tablename__ = "inventory_movements"

    id = db.Column(db.Integer, primary_key=True)
    workspace_id = db.Column(db.String(64), db.ForeignKey("workspaces.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity_change = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(32), nullable=False)
    note = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "workspace_id": self.workspace_id,
            "product_id": self.product_id,
            "quantity_change": self.quantity_change,
            "reason": self.reason,
            "note": self.note,
            "created_at": to_utc_z(self.created_at),
        }
