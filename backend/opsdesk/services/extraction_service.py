# Overview: Remote extraction fallback; asks a hosted model for commands when local parsing fails.

"""
Remote extraction

Only used when the local parser bank produced a single Unknown. The model is
asked for a JSON object {"actions": [...]} at temperature 0; its output is
untrusted and always goes through command_normalizer.

Failure semantics:
- Model reachable but output unusable (bad JSON, empty list): a generic
  Unknown asking the user what happened.
- Model unreachable / API error: ExtractionError. The interpreter logs it and
  keeps the local result; the request never fails because of this call.
"""

from __future__ import annotations

import json
from typing import Any

import openai

from .command_normalizer import normalize_many
from .commands import Command, Unknown

GENERIC_ASK = "Tell me what happened."

SYSTEM_INSTRUCTION = """
You extract small-business operations from a user's message.

Return ONLY JSON (no markdown, no commentary) in this exact shape:
{ "actions": [ { "action": "...", ... }, ... ] }

Allowed actions and their fields:
- record_sale: { action, product_name, quantity, unit_price, payment_status }
- record_expense: { action, expense_name, amount, category }
- add_stock: { action, product_name, quantity }
- remove_stock: { action, product_name, quantity }
- create_product: { action, product_name, reorder_threshold }
- analytics: { action, metric, period, payment_split }
    metric: profit | revenue | expenses | top_products
    period: today | week | month | all
- send_email: { action, to, subject, message }
- create_invoice: { action, to, items: [{ name, quantity, unit_price }], note, send_email }
- create_receipt: { action, to, items: [{ name, quantity, unit_price }], note, send_email }
- unknown: { action, ask }

Rules:
- "sold" means record_sale; inventory decreases are handled by the app.
- "bought", "restocked" or "received" items means add_stock.
- Removing stock without a sale (damaged, expired, lost) means remove_stock.
- Paying or spending money means record_expense. If category is not mentioned use "general";
  use "inventory" when the money was spent on stock.
- If the sale price is missing set unit_price to 0. If payment status is not mentioned use "paid".
- Questions about profit, revenue, expenses or top products use analytics.
- Split multiple operations into multiple actions.
- If anything is unclear use action "unknown" and ask ONE short question.
- Product names must be short: "rice", "beans", "sugar".
""".strip()


class ExtractionError(Exception):
    """Raised when the remote model cannot be reached or rejects the request."""
    pass


class RemoteExtractor:
    """Thin wrapper over an OpenAI-compatible chat completion endpoint."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        timeout: float = 20.0,
        client: Any | None = None,
    ):
        self._model = model
        if client is not None:
            self._client = client
        else:
            client_kwargs: dict[str, Any] = {"api_key": api_key, "timeout": timeout}
            if base_url:
                client_kwargs["base_url"] = base_url
            self._client = openai.OpenAI(**client_kwargs)

    @classmethod
    def from_config(cls, config) -> "RemoteExtractor | None":
        """Returns None when no API key is configured (local parsing only)."""
        api_key = config.get("OPENAI_API_KEY")
        if not api_key:
            return None
        return cls(
            api_key=api_key,
            model=config.get("OPENAI_MODEL") or "gpt-4o-mini",
            base_url=config.get("OPENAI_BASE_URL"),
            timeout=float(config.get("OPENAI_TIMEOUT_SECONDS") or 20.0),
        )

    def _complete(self, text: str) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                temperature=0,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": SYSTEM_INSTRUCTION},
                    {"role": "user", "content": text},
                ],
            )
        except openai.OpenAIError as e:
            raise ExtractionError(str(e)) from e

        if not response.choices:
            return "{}"
        return response.choices[0].message.content or "{}"

    def extract(self, text: str) -> list[Command]:
        raw = self._complete(text)
        try:
            parsed = json.loads(raw)
        except ValueError:
            return [Unknown(ask=GENERIC_ASK)]

        if isinstance(parsed, dict):
            actions = parsed.get("actions", parsed.get("commands"))
        else:
            actions = parsed
        if not isinstance(actions, list) or not actions:
            return [Unknown(ask=GENERIC_ASK)]

        commands = normalize_many(actions)
        return [
            Unknown(ask=c.ask or GENERIC_ASK) if isinstance(c, Unknown) else c
            for c in commands
        ]
