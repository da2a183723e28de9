# backend/opsdesk/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/opsdesk.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location
        "sqlite:///opsdesk.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Remote extraction fallback. Left unset, the assistant runs on local parsers only.
    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
    OPENAI_BASE_URL = os.environ.get("OPENAI_BASE_URL")
    OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_TIMEOUT_SECONDS = _float_env("OPENAI_TIMEOUT_SECONDS", 20.0)

    # External email / invoicing collaborators (HTTP JSON contracts)
    EMAIL_SERVICE_URL = os.environ.get("EMAIL_SERVICE_URL")
    EMAIL_SERVICE_TOKEN = os.environ.get("EMAIL_SERVICE_TOKEN")
    EMAIL_DEFAULT_SUBJECT = os.environ.get("EMAIL_DEFAULT_SUBJECT", "Message from OpsDesk")
    INVOICE_SERVICE_URL = os.environ.get("INVOICE_SERVICE_URL")
    INVOICE_SERVICE_TOKEN = os.environ.get("INVOICE_SERVICE_TOKEN")
    COLLABORATOR_TIMEOUT_SECONDS = _float_env("COLLABORATOR_TIMEOUT_SECONDS", 15.0)

    DEFAULT_REORDER_THRESHOLD = _int_env("DEFAULT_REORDER_THRESHOLD", 5)
    CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "$")
    ANALYTICS_TOP_N = _int_env("ANALYTICS_TOP_N", 5)


@dataclass(frozen=True)
class AssistantSettings:
    """
    Interpreter settings, resolved once per request from app config.

    Passed explicitly into the executor so command handling never reads
    environment state on its own.
    """
    default_reorder_threshold: int = 5
    currency_symbol: str = "$"
    top_n: int = 5
    default_email_subject: str = "Message from OpsDesk"

    @classmethod
    def from_config(cls, config: Mapping) -> "AssistantSettings":
        return cls(
            default_reorder_threshold=int(config.get("DEFAULT_REORDER_THRESHOLD", 5)),
            currency_symbol=str(config.get("CURRENCY_SYMBOL") or "$"),
            top_n=int(config.get("ANALYTICS_TOP_N", 5)),
            default_email_subject=str(config.get("EMAIL_DEFAULT_SUBJECT") or "Message from OpsDesk"),
        )
