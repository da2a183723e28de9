"""Inventory balances, movements, product resolution and retry behavior."""

import pytest
from sqlalchemy.exc import OperationalError

from opsdesk.models import InventoryBalance, InventoryMovement, Product, Workspace
from opsdesk.services import ledger_service
from opsdesk.services.concurrency import run_with_retry
from opsdesk.services.inventory_service import adjust_stock, get_quantity_on_hand
from opsdesk.services.products_service import find_product, resolve_product, resolve_reorder_threshold


def _product(db_session, workspace, name, threshold=None):
    p = Product(workspace_id=workspace.id, name=name, reorder_threshold=threshold)
    db_session.add(p)
    db_session.commit()
    return p


def test_first_delta_creates_balance_row(db_session, workspace):
    p = _product(db_session, workspace, "Beans")
    assert get_quantity_on_hand(workspace.id, p.id) == 0

    new_qty = adjust_stock(workspace_id=workspace.id, product_id=p.id, delta=7, reason="restock")
    db_session.commit()

    assert new_qty == 7
    rows = db_session.query(InventoryBalance).filter_by(workspace_id=workspace.id, product_id=p.id).all()
    assert len(rows) == 1
    assert rows[0].quantity_on_hand == 7


def test_deltas_accumulate_and_may_go_negative(db_session, workspace):
    p = _product(db_session, workspace, "Beans")
    adjust_stock(workspace_id=workspace.id, product_id=p.id, delta=3, reason="restock")
    assert adjust_stock(workspace_id=workspace.id, product_id=p.id, delta=-5, reason="sale") == -2
    db_session.commit()
    assert get_quantity_on_hand(workspace.id, p.id) == -2


def test_add_then_remove_restores_balance(db_session, rice, workspace):
    before = get_quantity_on_hand(workspace.id, rice.id)
    adjust_stock(workspace_id=workspace.id, product_id=rice.id, delta=6, reason="restock")
    adjust_stock(workspace_id=workspace.id, product_id=rice.id, delta=-6, reason="removal")
    db_session.commit()
    assert get_quantity_on_hand(workspace.id, rice.id) == before


def test_each_change_logs_a_movement(db_session, workspace):
    p = _product(db_session, workspace, "Beans")
    adjust_stock(workspace_id=workspace.id, product_id=p.id, delta=4, reason="restock", note="delivery")
    adjust_stock(workspace_id=workspace.id, product_id=p.id, delta=-1, reason="sale")
    db_session.commit()

    movements = ledger_service.list_movements(workspace_id=workspace.id, product_id=p.id)
    assert sorted((m.quantity_change, m.reason) for m in movements) == [(-1, "sale"), (4, "restock")]


def test_movement_failure_is_swallowed(db_session, workspace, monkeypatch):
    p = _product(db_session, workspace, "Beans")

    def broken_movement(**kwargs):
        kwargs["reason"] = None  # violates NOT NULL
        return InventoryMovement(**kwargs)

    monkeypatch.setattr(ledger_service, "InventoryMovement", broken_movement)

    assert adjust_stock(workspace_id=workspace.id, product_id=p.id, delta=5, reason="restock") == 5
    db_session.commit()

    assert get_quantity_on_hand(workspace.id, p.id) == 5
    assert db_session.query(InventoryMovement).count() == 0


def test_balances_are_workspace_scoped(db_session, workspace, premium_workspace):
    p = _product(db_session, workspace, "Beans")
    adjust_stock(workspace_id=workspace.id, product_id=p.id, delta=4, reason="restock")
    db_session.commit()
    assert get_quantity_on_hand(premium_workspace.id, p.id) == 0


def test_find_product_is_case_insensitive_substring(db_session, workspace):
    rice = _product(db_session, workspace, "Rice")
    assert find_product(workspace.id, "rice").id == rice.id
    assert find_product(workspace.id, "RI").id == rice.id
    assert find_product(workspace.id, "beans") is None


def test_find_product_takes_alphabetical_first(db_session, workspace):
    _product(db_session, workspace, "Rice")
    brown = _product(db_session, workspace, "Brown Rice")
    assert find_product(workspace.id, "rice").id == brown.id


def test_find_product_matches_wildcards_literally(db_session, workspace):
    _product(db_session, workspace, "abc")
    assert find_product(workspace.id, "a_c") is None
    assert find_product(workspace.id, "%") is None
    pct = _product(db_session, workspace, "100% juice")
    assert find_product(workspace.id, "100%").id == pct.id


def test_find_product_ignores_other_workspaces(db_session, workspace, premium_workspace):
    _product(db_session, premium_workspace, "Rice")
    assert find_product(workspace.id, "rice") is None


def test_resolve_product_creates_missing(db_session, workspace):
    product, created = resolve_product(workspace, "Mango", fallback_default=5)
    db_session.commit()
    assert created is True
    assert product.name == "Mango"
    assert product.reorder_threshold == 5

    again, created_again = resolve_product(workspace, "mango", fallback_default=5)
    assert created_again is False
    assert again.id == product.id


@pytest.mark.parametrize("requested,workspace_default,expected", [
    (3, None, 3),
    (0, 8, 0),
    (-1, 8, 8),
    (2.5, None, 5),
    (None, 8, 8),
    (None, None, 5),
])
def test_reorder_threshold_resolution(requested, workspace_default, expected):
    ws = Workspace(id="x", name="x", default_reorder_threshold=workspace_default)
    assert resolve_reorder_threshold(ws, requested, 5) == expected


def test_run_with_retry_retries_operational_errors(db_session):
    calls = {"n": 0}

    def flaky():
        calls["n"] += 1
        if calls["n"] < 3:
            raise OperationalError("UPDATE inventory_balances", {}, Exception("database is locked"))
        return "ok"

    assert run_with_retry(flaky, backoff_base=0) == "ok"
    assert calls["n"] == 3


def test_run_with_retry_gives_up(db_session):
    def always_locked():
        raise OperationalError("UPDATE inventory_balances", {}, Exception("database is locked"))

    with pytest.raises(OperationalError):
        run_with_retry(always_locked, attempts=2, backoff_base=0)
