"""HTTP collaborator clients (email and invoicing) against a mock transport."""

import json

import httpx
import pytest

from opsdesk.services.commands import LineItem
from opsdesk.services.communications_service import (
    CollaboratorError,
    EmailClient,
    EmailReceipt,
    InvoiceClient,
    InvoiceReceipt,
    is_valid_email,
)


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.mark.parametrize("value,valid", [
    ("bob@example.com", True),
    (" jane.doe+shop@mail.co.uk ", True),
    ("bob@example", False),
    ("bob example.com", False),
    ("", False),
    (None, False),
])
def test_is_valid_email(value, valid):
    assert is_valid_email(value) is valid


def test_email_send_posts_contract():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True, "id": "em_123"})

    client = EmailClient(url="https://mail.example.test/send", token="secret", http_client=_client(handler))
    receipt = client.send(to="bob@example.com", subject="Hi", text="Order ready")

    assert receipt == EmailReceipt(id="em_123")
    assert seen["url"] == "https://mail.example.test/send"
    assert seen["auth"] == "Bearer secret"
    assert seen["body"] == {"to": "bob@example.com", "subject": "Hi", "text": "Order ready"}


def test_email_error_body_raises():
    def handler(request):
        return httpx.Response(400, json={"ok": False, "error": "Invalid or missing recipient email (to)"})

    client = EmailClient(url="https://mail.example.test/send", http_client=_client(handler))
    with pytest.raises(CollaboratorError, match="Invalid or missing recipient"):
        client.send(to="bob@example.com", subject="Hi", text="x")


def test_email_non_json_failure_raises_with_status():
    def handler(request):
        return httpx.Response(502, text="Bad Gateway")

    client = EmailClient(url="https://mail.example.test/send", http_client=_client(handler))
    with pytest.raises(CollaboratorError, match="HTTP 502"):
        client.send(to="bob@example.com", subject="Hi", text="x")


def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = EmailClient(url="https://mail.example.test/send", http_client=_client(handler))
    with pytest.raises(CollaboratorError, match="unreachable"):
        client.send(to="bob@example.com", subject="Hi", text="x")


def test_unconfigured_client_raises():
    client = EmailClient(url=None)
    assert not client.configured
    with pytest.raises(CollaboratorError, match="not configured"):
        client.send(to="bob@example.com", subject="Hi", text="x")


def test_from_config():
    client = EmailClient.from_config({
        "EMAIL_SERVICE_URL": "https://mail.example.test/send",
        "EMAIL_SERVICE_TOKEN": "t",
        "COLLABORATOR_TIMEOUT_SECONDS": 3,
    })
    assert client.configured
    assert client.timeout == 3.0


def test_invoice_create_posts_contract():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True, "docNo": "INV-0042", "total": "8.00", "sent": True})

    client = InvoiceClient(url="https://docs.example.test/make", http_client=_client(handler))
    receipt = client.create(
        kind="invoice",
        to="bob@example.com",
        items=[LineItem(name="rice", quantity=2, unit_price=4)],
        note="thanks",
        send_email=True,
    )

    assert receipt == InvoiceReceipt(doc_no="INV-0042", total=8.0, sent=True)
    assert seen["body"] == {
        "kind": "invoice",
        "to": "bob@example.com",
        "items": [{"name": "rice", "quantity": 2, "unit_price": 4}],
        "note": "thanks",
        "send_email": True,
    }


def test_invoice_omits_blank_note_and_tolerates_missing_fields():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True})

    client = InvoiceClient(url="https://docs.example.test/make", http_client=_client(handler))
    receipt = client.create(kind="receipt", to="bob@example.com", items=[LineItem(name="soap")], send_email=False)

    assert "note" not in seen["body"]
    assert receipt == InvoiceReceipt(doc_no=None, total=None, sent=False)


@pytest.mark.parametrize("total", ["NaN", "inf", "-Infinity"])
def test_invoice_non_finite_total_is_dropped(total):
    def handler(request):
        return httpx.Response(200, json={"ok": True, "docNo": "INV-0007", "total": total, "sent": False})

    client = InvoiceClient(url="https://docs.example.test/make", http_client=_client(handler))
    receipt = client.create(kind="invoice", to="bob@example.com", items=[LineItem(name="rice")])

    assert receipt == InvoiceReceipt(doc_no="INV-0007", total=None, sent=False)


def test_invoice_ok_false_raises():
    def handler(request):
        return httpx.Response(200, json={"ok": False, "error": "template missing"})

    client = InvoiceClient(url="https://docs.example.test/make", http_client=_client(handler))
    with pytest.raises(CollaboratorError, match="template missing"):
        client.create(kind="invoice", to="bob@example.com", items=[LineItem(name="rice")])
