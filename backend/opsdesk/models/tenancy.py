from __future__ import annotations

import uuid

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


def _new_workspace_id() -> str:
    return uuid.uuid4().hex


class Workspace(db.Model):
    """
    Multi-tenant root: every tenant is a Workspace.

    All products, balances, movements, sales and expenses carry workspace_id
    and every query touching them filters on it.

    Subscription fields are written by the billing provider integration;
    this service only reads them (see plan_service).
    """
    __tablename__ = "workspaces"

    id = db.Column(db.String(64), primary_key=True, default=_new_workspace_id)
    name = db.Column(db.String(255), nullable=False)

    plan = db.Column(db.String(32), nullable=False, default="standard")
    subscription_status = db.Column(db.String(32), nullable=True)

    # Workspace-level configuration
    timezone = db.Column(db.String(64), nullable=False, default="UTC")
    default_reorder_threshold = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Workspace id={self.id!r} name={self.name!r} plan={self.plan!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "plan": self.plan,
            "subscription_status": self.subscription_status,
            "timezone": self.timezone,
            "default_reorder_threshold": self.default_reorder_threshold,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
