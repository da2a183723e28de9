"""In-process stand-ins for the remote model and the HTTP collaborators."""

from types import SimpleNamespace

from opsdesk.services.communications_service import CollaboratorError, EmailReceipt, InvoiceReceipt


class FakeEmailClient:
    def __init__(self, error: str | None = None):
        self.error = error
        self.sent = []

    def send(self, *, to, subject, text):
        if self.error:
            raise CollaboratorError(self.error)
        self.sent.append({"to": to, "subject": subject, "text": text})
        return EmailReceipt(id=f"msg-{len(self.sent)}")


class FakeInvoiceClient:
    def __init__(self, error: str | None = None):
        self.error = error
        self.created = []

    def create(self, *, kind, to, items, note=None, send_email=True):
        if self.error:
            raise CollaboratorError(self.error)
        items = list(items)
        self.created.append({"kind": kind, "to": to, "items": items, "note": note, "send_email": send_email})
        total = sum(item.quantity * item.unit_price for item in items)
        return InvoiceReceipt(doc_no=f"{kind[:3].upper()}-{len(self.created):04d}", total=total, sent=send_email)


class FakeExtractor:
    def __init__(self, commands=None, error: Exception | None = None):
        self.commands = commands or []
        self.error = error
        self.calls = []

    def extract(self, text):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return list(self.commands)


class StubChatClient:
    """Mimics openai.OpenAI().chat.completions.create()."""

    def __init__(self, content: str | None = None, error: Exception | None = None):
        self.content = content
        self.error = error
        self.requests = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])
