"""
Pytest fixtures for OpsDesk backend tests.

Provides test database setup, workspace fixtures, collaborator fakes, and
test client.
"""

import pytest

from opsdesk import create_app
from opsdesk.extensions import db
from opsdesk.models import Product, Workspace
from opsdesk.services.assistant_service import EXTENSION_KEY
from opsdesk.services.inventory_service import adjust_stock

from fakes import FakeEmailClient, FakeInvoiceClient


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'OPENAI_API_KEY': None,
        'EMAIL_SERVICE_URL': None,
        'INVOICE_SERVICE_URL': None,
        'DEFAULT_REORDER_THRESHOLD': 5,
        'CURRENCY_SYMBOL': '$',
        'ANALYTICS_TOP_N': 5,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(autouse=True)
def collaborators(app):
    """Fresh collaborator registry per test (no remote model, no HTTP)."""
    registry = app.extensions[EXTENSION_KEY]
    saved = dict(registry)
    registry.update({"extractor": None, "email_client": None, "invoice_client": None})
    yield registry
    registry.clear()
    registry.update(saved)


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def workspace(db_session):
    """Standard workspace with a canceled subscription (not paid)."""
    ws = Workspace(
        id="ws-standard",
        name="Corner Shop",
        plan="standard",
        subscription_status="canceled",
    )
    db_session.add(ws)
    db_session.commit()
    return ws


@pytest.fixture(scope='function')
def premium_workspace(db_session):
    """Premium workspace with an active subscription."""
    ws = Workspace(
        id="ws-premium",
        name="Market Stall",
        plan="premium",
        subscription_status="active",
    )
    db_session.add(ws)
    db_session.commit()
    return ws


@pytest.fixture(scope='function')
def rice(db_session, workspace):
    """Product "Rice" in the standard workspace with 10 on hand."""
    product = Product(workspace_id=workspace.id, name="Rice", reorder_threshold=5)
    db_session.add(product)
    db_session.flush()
    adjust_stock(workspace_id=workspace.id, product_id=product.id, delta=10, reason="restock")
    db_session.commit()
    return product


@pytest.fixture
def email_client(collaborators):
    fake = FakeEmailClient()
    collaborators["email_client"] = fake
    return fake


@pytest.fixture
def invoice_client(collaborators):
    fake = FakeInvoiceClient()
    collaborators["invoice_client"] = fake
    return fake
