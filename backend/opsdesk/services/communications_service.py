# Overview: HTTP clients for the outbound email and invoicing collaborators.

"""
Outbound collaborators

Both services speak JSON over HTTP:
- Email:     {to, subject, text}                        -> {ok, id | error}
- Invoicing: {kind, to, items[], note?, send_email}     -> {ok, docNo, total, sent, error}

Every transport error, non-2xx status, or {ok: false} body becomes a
CollaboratorError; callers turn it into a result line and keep going.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Iterable

import httpx

from .commands import LineItem

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class CollaboratorError(Exception):
    """Raised when an outbound collaborator call fails."""
    pass


def is_valid_email(value: str | None) -> bool:
    return bool(value) and bool(EMAIL_RE.match(value.strip()))


@dataclass(frozen=True)
class EmailReceipt:
    id: str | None


@dataclass(frozen=True)
class InvoiceReceipt:
    doc_no: str | None
    total: float | None
    sent: bool


class _JsonServiceClient:
    service_name = "service"

    def __init__(
        self,
        *,
        url: str | None,
        token: str | None = None,
        timeout: float = 15.0,
        http_client: httpx.Client | None = None,
    ):
        self.url = url
        self.token = token
        self.timeout = timeout
        self._http_client = http_client

    @property
    def configured(self) -> bool:
        return bool(self.url)

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _send(self, client: httpx.Client, payload: dict) -> httpx.Response:
        return client.post(self.url, json=payload, headers=self._headers())

    def _post(self, payload: dict) -> dict:
        if not self.url:
            raise CollaboratorError(f"{self.service_name} is not configured")

        try:
            if self._http_client is not None:
                response = self._send(self._http_client, payload)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = self._send(client, payload)
        except httpx.HTTPError as e:
            raise CollaboratorError(f"{self.service_name} unreachable: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.status_code >= 400 or not body.get("ok"):
            error = body.get("error") or f"HTTP {response.status_code}"
            raise CollaboratorError(str(error))
        return body


class EmailClient(_JsonServiceClient):
    service_name = "Email service"

    @classmethod
    def from_config(cls, config, http_client: httpx.Client | None = None) -> "EmailClient":
        return cls(
            url=config.get("EMAIL_SERVICE_URL"),
            token=config.get("EMAIL_SERVICE_TOKEN"),
            timeout=float(config.get("COLLABORATOR_TIMEOUT_SECONDS") or 15.0),
            http_client=http_client,
        )

    def send(self, *, to: str, subject: str, text: str) -> EmailReceipt:
        body = self._post({"to": to, "subject": subject, "text": text})
        email_id = body.get("id")
        return EmailReceipt(id=str(email_id) if email_id is not None else None)


class InvoiceClient(_JsonServiceClient):
    service_name = "Invoice service"

    @classmethod
    def from_config(cls, config, http_client: httpx.Client | None = None) -> "InvoiceClient":
        return cls(
            url=config.get("INVOICE_SERVICE_URL"),
            token=config.get("INVOICE_SERVICE_TOKEN"),
            timeout=float(config.get("COLLABORATOR_TIMEOUT_SECONDS") or 15.0),
            http_client=http_client,
        )

    def create(
        self,
        *,
        kind: str,
        to: str,
        items: Iterable[LineItem],
        note: str | None = None,
        send_email: bool = True,
    ) -> InvoiceReceipt:
        payload: dict[str, Any] = {
            "kind": kind,
            "to": to,
            "items": [item.to_dict() for item in items],
            "send_email": send_email,
        }
        if note:
            payload["note"] = note

        body = self._post(payload)
        total = body.get("total")
        try:
            total = float(total) if total is not None else None
        except (TypeError, ValueError, OverflowError):
            total = None
        if total is not None and not math.isfinite(total):
            total = None
        doc_no = body.get("docNo") or body.get("doc_no")
        return InvoiceReceipt(
            doc_no=str(doc_no) if doc_no is not None else None,
            total=total,
            sent=bool(body.get("sent")),
        )
