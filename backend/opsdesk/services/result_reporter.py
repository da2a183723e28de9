# Overview: Collects one human-readable line per executed command into the chat reply.

from __future__ import annotations

from dataclasses import dataclass, field

from .reporting_service import AnalyticsSnapshot

BULLET = "• "
DONE_PREFIX = "Done ✅\n\n"

SUGGESTIONS = (
    "did i make profit today",
    "top selling products today",
    "paid vs unpaid revenue",
)


@dataclass
class ResultReport:
    lines: list[str] = field(default_factory=list)
    analytics: AnalyticsSnapshot | None = None
    executed: bool = False

    def add(self, line: str) -> None:
        self.lines.append(f"{BULLET}{line}")

    def record(self, line: str) -> None:
        """Add a line for a command that ran (or was skipped with a reason)."""
        self.executed = True
        self.add(line)

    def clarify(self, ask: str) -> None:
        self.add(ask)

    def reply(self) -> str:
        body = "\n".join(self.lines) if self.lines else "No actions."
        return f"{DONE_PREFIX}{body}" if self.executed else body

    def to_dict(self) -> dict:
        return {
            "ok": True,
            "reply": self.reply(),
            "results": list(self.lines),
            "analytics": self.analytics.to_dict() if self.analytics is not None else None,
            "suggestions": list(SUGGESTIONS),
        }
