"""Remote extraction fallback and the local-then-remote interpreter."""

import json

import httpx
import openai
import pytest

from opsdesk.services.assistant_service import interpret
from opsdesk.services.commands import CLARIFICATION_PROMPT, RecordExpense, RecordSale, Unknown
from opsdesk.services.extraction_service import (
    GENERIC_ASK,
    ExtractionError,
    RemoteExtractor,
    SYSTEM_INSTRUCTION,
)

from fakes import FakeExtractor, StubChatClient


def _extractor(content=None, error=None):
    stub = StubChatClient(content=content, error=error)
    return RemoteExtractor(model="test-model", client=stub), stub


def test_extract_normalizes_actions():
    payload = {"actions": [
        {"action": "record_sale", "product_name": "rice", "quantity": "2", "unit_price": 4},
        {"action": "record_expense", "expense_name": "gas", "amount": "$15", "category": "general"},
    ]}
    extractor, stub = _extractor(json.dumps(payload))

    commands = extractor.extract("two rice at four and gas fifteen")

    assert commands == [
        RecordSale(product_name="rice", quantity=2.0, unit_price=4.0, payment_status="paid"),
        RecordExpense(expense_name="gas", amount=15.0, category="general"),
    ]
    request = stub.requests[0]
    assert request["model"] == "test-model"
    assert request["temperature"] == 0
    assert request["response_format"] == {"type": "json_object"}
    assert request["messages"][0] == {"role": "system", "content": SYSTEM_INSTRUCTION}
    assert request["messages"][1]["content"] == "two rice at four and gas fifteen"


@pytest.mark.parametrize("content", ["not json", "", "{}", '{"actions": []}', "[]", '"text"'])
def test_unusable_output_becomes_generic_unknown(content):
    extractor, _ = _extractor(content)
    assert extractor.extract("???") == [Unknown(ask=GENERIC_ASK)]


def test_unknown_without_ask_gets_generic_question():
    extractor, _ = _extractor(json.dumps({"actions": [{"action": "unknown"}, {"action": "fly"}]}))
    assert extractor.extract("???") == [Unknown(ask=GENERIC_ASK), Unknown(ask=GENERIC_ASK)]


def test_api_failure_raises_extraction_error():
    error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.example.test/v1/chat/completions"))
    extractor, _ = _extractor(error=error)
    with pytest.raises(ExtractionError):
        extractor.extract("hello")


def test_from_config_without_key_disables_remote():
    assert RemoteExtractor.from_config({"OPENAI_API_KEY": None}) is None
    assert RemoteExtractor.from_config({}) is None


def test_interpret_uses_local_result_when_resolved(app):
    fake = FakeExtractor([RecordExpense(expense_name="rent", amount=100.0)])
    with app.app_context():
        commands = interpret("I sold 2 rice for $4 each", fake)
    assert [c.action for c in commands] == ["record_sale"]
    assert fake.calls == []


def test_interpret_falls_back_when_unresolved(app):
    fake = FakeExtractor([{"action": "record_expense", "name": "rent", "amount": "100"}])
    with app.app_context():
        commands = interpret("the landlord came by, gave him a hundred", fake)
    assert commands == [RecordExpense(expense_name="rent", amount=100.0, category=None)]
    assert fake.calls == ["the landlord came by, gave him a hundred"]


def test_interpret_keeps_local_unknown_when_remote_fails(app):
    fake = FakeExtractor(error=ExtractionError("timeout"))
    with app.app_context():
        commands = interpret("hello there", fake)
    assert commands == [Unknown(ask=CLARIFICATION_PROMPT)]


def test_interpret_without_extractor(app):
    with app.app_context():
        assert interpret("hello there") == [Unknown(ask=CLARIFICATION_PROMPT)]
