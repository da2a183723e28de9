"""
Workspace (tenant) lookup helpers.

Every entity the assistant touches is scoped by workspace_id. Routes resolve
the workspace once per request through require_workspace() and pass the row
down; services never accept a workspace they did not receive explicitly.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Workspace


class TenantAccessError(Exception):
    """Raised when a workspace id does not resolve to a workspace."""
    pass


def get_workspace(workspace_id: str) -> Workspace | None:
    if not workspace_id:
        return None
    return db.session.query(Workspace).filter_by(id=workspace_id).first()


def require_workspace(workspace_id: str) -> Workspace:
    workspace = get_workspace(workspace_id)
    if workspace is None:
        raise TenantAccessError("Workspace not found")
    return workspace


def create_workspace(
    *,
    name: str,
    workspace_id: str | None = None,
    plan: str = "standard",
    subscription_status: str | None = None,
    timezone: str = "UTC",
    default_reorder_threshold: int | None = None,
) -> Workspace:
    workspace = Workspace(
        name=name,
        plan=plan,
        subscription_status=subscription_status,
        timezone=timezone,
        default_reorder_threshold=default_reorder_threshold,
    )
    if workspace_id:
        workspace.id = workspace_id
    db.session.add(workspace)
    db.session.commit()
    return workspace


def list_workspaces() -> list[Workspace]:
    return db.session.query(Workspace).order_by(Workspace.name.asc(), Workspace.id.asc()).all()
