# Overview: Plan gate; decides whether a workspace may run premium-only commands.

"""
Plan gate

A workspace is "paid" when its subscription is active or trialing, or when
its plan is premium. Premium-only actions (send_email, create_invoice,
create_receipt) are refused for unpaid workspaces with a result line, never
an exception, so the rest of the batch still runs.

Plan info is read from the workspace row on demand and never cached across
requests; billing webhooks may change it at any time.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..extensions import db
from ..models import Workspace
from .commands import PREMIUM_ACTIONS

PAID_STATUSES = frozenset({"active", "trialing"})
PREMIUM_PLANS = frozenset({"premium"})


@dataclass(frozen=True)
class WorkspacePlanInfo:
    plan: str
    status: str | None
    is_paid: bool

    def to_dict(self) -> dict:
        return {"plan": self.plan, "status": self.status, "isPaid": self.is_paid}


def plan_info_from_values(plan: str | None, status: str | None) -> WorkspacePlanInfo:
    plan_norm = (plan or "standard").strip().lower() or "standard"
    status_norm = (status or "").strip().lower() or None
    is_paid = status_norm in PAID_STATUSES or plan_norm in PREMIUM_PLANS
    return WorkspacePlanInfo(plan=plan_norm, status=status_norm, is_paid=is_paid)


def get_workspace_plan(workspace_id: str) -> WorkspacePlanInfo:
    """Missing workspace rows read as an unpaid standard plan."""
    row = (
        db.session.query(Workspace.plan, Workspace.subscription_status)
        .filter(Workspace.id == workspace_id)
        .first()
    )
    if row is None:
        return plan_info_from_values(None, None)
    return plan_info_from_values(row.plan, row.subscription_status)


def requires_paid_plan(action: str) -> bool:
    return action in PREMIUM_ACTIONS


def is_action_allowed(action: str, plan_info: WorkspacePlanInfo) -> bool:
    return not requires_paid_plan(action) or plan_info.is_paid
