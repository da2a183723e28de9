# Overview: Chat entry point; turns free text into commands and runs them for one workspace.

from __future__ import annotations

from flask import current_app

from ..config import AssistantSettings
from .command_executor import CommandExecutor
from .command_normalizer import normalize_many
from .command_parser import is_unresolved, parse_local
from .commands import Command
from .extraction_service import ExtractionError, RemoteExtractor
from .result_reporter import ResultReport
from .tenant_service import require_workspace

EXTENSION_KEY = "opsdesk"


def collaborators() -> dict:
    """Per-app collaborator registry populated by create_app()."""
    return current_app.extensions.setdefault(EXTENSION_KEY, {})


def interpret(text: str, extractor: RemoteExtractor | None = None) -> list[Command]:
    """
    Local parsers first; the remote extractor only runs when every statement
    was unresolved. A failing remote call keeps the local result.
    """
    commands = parse_local(text)
    if extractor is not None and is_unresolved(commands):
        try:
            remote = extractor.extract(text)
        except ExtractionError as e:
            current_app.logger.warning("Remote extraction failed, keeping local result: %s", e)
        else:
            current_app.logger.info("Remote extraction produced %d command(s)", len(remote))
            if remote:
                commands = remote
    return normalize_many(commands)


def handle_message(workspace_id: str, text: str) -> ResultReport:
    """
    Raises TenantAccessError for unknown workspaces. Store errors propagate;
    commands executed before the failure stay committed.
    """
    workspace = require_workspace(workspace_id)
    registry = collaborators()

    commands = interpret(text, registry.get("extractor"))
    executor = CommandExecutor(
        workspace,
        AssistantSettings.from_config(current_app.config),
        email_client=registry.get("email_client"),
        invoice_client=registry.get("invoice_client"),
    )
    return executor.run(commands)
