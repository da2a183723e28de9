# Overview: Resolves product references by name within a workspace, creating missing products.

"""
Product resolution

- Lookup is a case-insensitive substring match on name, scoped to one
  workspace; the alphabetically first match wins so resolution is
  deterministic.
- LIKE wildcards in user-supplied names are matched literally.
- A missing product is created on first reference. Its reorder threshold is
  the explicit value when valid, else the workspace default, else the
  configured default.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Product, Workspace
from .sales_service import MAX_STORED_INT

_LIKE_ESCAPE = "\\"


def _escape_like(value: str) -> str:
    return (
        value.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def find_product(workspace_id: str, name: str) -> Product | None:
    needle = (name or "").strip()
    if not needle:
        return None
    return (
        db.session.query(Product)
        .filter(
            Product.workspace_id == workspace_id,
            Product.name.ilike(f"%{_escape_like(needle)}%", escape=_LIKE_ESCAPE),
        )
        .order_by(Product.name.asc(), Product.id.asc())
        .first()
    )


def resolve_reorder_threshold(
    workspace: Workspace,
    requested: float | None,
    fallback_default: int,
) -> int:
    if (
        requested is not None
        and 0 <= requested <= MAX_STORED_INT
        and float(requested).is_integer()
    ):
        return int(requested)
    if workspace.default_reorder_threshold is not None and workspace.default_reorder_threshold >= 0:
        return int(workspace.default_reorder_threshold)
    return int(fallback_default)


def create_product(
    workspace: Workspace,
    name: str,
    *,
    reorder_threshold: float | None = None,
    fallback_default: int = 5,
) -> Product:
    """Insert a product row (flushed, not committed)."""
    product = Product(
        workspace_id=workspace.id,
        name=name.strip(),
        reorder_threshold=resolve_reorder_threshold(workspace, reorder_threshold, fallback_default),
    )
    db.session.add(product)
    db.session.flush()
    return product


def resolve_product(
    workspace: Workspace,
    name: str,
    *,
    reorder_threshold: float | None = None,
    fallback_default: int = 5,
) -> tuple[Product, bool]:
    """Returns (product, created)."""
    product = find_product(workspace.id, name)
    if product is not None:
        return product, False
    product = create_product(
        workspace,
        name,
        reorder_threshold=reorder_threshold,
        fallback_default=fallback_default,
    )
    return product, True

