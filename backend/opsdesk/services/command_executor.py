# Overview: Runs canonical commands against the store and collaborators, one unit of work each.

"""
Command execution (authoritative)

- Commands run one at a time, in order. Each mutating command is its own
  unit of work, committed before the next starts; there is no batch-level
  atomicity.
- Soft failures (bad quantity/amount, missing name, bad recipient, missing
  line items, plan gate denial, collaborator errors) become result lines and
  the batch continues.
- Store failures propagate and abort the rest of the batch. Commands that
  already committed stay committed.
- Premium-only commands are checked against the workspace plan before any
  of their fields are validated.
"""

from __future__ import annotations

from flask import current_app

from ..config import AssistantSettings
from ..extensions import db
from ..models import Workspace
from .commands import (
    AddStock,
    Analytics,
    CLARIFICATION_PROMPT,
    Command,
    CreateDocument,
    CreateProduct,
    RecordExpense,
    RecordSale,
    RemoveStock,
    SendEmail,
    Unknown,
)
from .communications_service import CollaboratorError, EmailClient, InvoiceClient, is_valid_email
from .concurrency import run_with_retry
from .expense_service import normalize_category, record_expense
from .inventory_service import adjust_stock
from .plan_service import WorkspacePlanInfo, get_workspace_plan, requires_paid_plan
from .products_service import create_product, resolve_product
from .reporting_service import compute_analytics, describe_snapshot, format_money
from .result_reporter import ResultReport
from .sales_service import MAX_STORED_INT, record_sale, to_cents

PREMIUM_LABELS = {
    "send_email": "Email",
    "create_invoice": "Invoice",
    "create_receipt": "Receipt",
}


def whole_quantity(value: float | None) -> int | None:
    """Positive whole quantity up to MAX_STORED_INT, else None."""
    if value is None:
        return None
    if value <= 0 or value > MAX_STORED_INT or not float(value).is_integer():
        return None
    return int(value)


class CommandExecutor:
    def __init__(
        self,
        workspace: Workspace,
        settings: AssistantSettings,
        *,
        email_client: EmailClient | None = None,
        invoice_client: InvoiceClient | None = None,
        plan_loader=get_workspace_plan,
    ):
        self.workspace = workspace
        self.workspace_id = workspace.id
        self.settings = settings
        self.email_client = email_client
        self.invoice_client = invoice_client
        self._plan_loader = plan_loader
        self._plan_info: WorkspacePlanInfo | None = None

    def money(self, cents: int) -> str:
        return format_money(cents, self.settings.currency_symbol)

    @property
    def plan_info(self) -> WorkspacePlanInfo:
        if self._plan_info is None:
            self._plan_info = self._plan_loader(self.workspace_id)
        return self._plan_info

    def run(self, commands: list[Command], report: ResultReport | None = None) -> ResultReport:
        report = report if report is not None else ResultReport()
        for command in commands:
            self.execute(command, report)
        return report

    def execute(self, command: Command, report: ResultReport) -> None:
        if isinstance(command, Unknown):
            report.clarify(command.ask or CLARIFICATION_PROMPT)
            return

        if requires_paid_plan(command.action) and not self.plan_info.is_paid:
            label = PREMIUM_LABELS[command.action]
            report.record(
                f"{label} blocked 🔒: requires a paid plan "
                f"(plan: {self.plan_info.plan}, status: {self.plan_info.status or 'none'})"
            )
            return

        if isinstance(command, RecordSale):
            self._record_sale(command, report)
        elif isinstance(command, RecordExpense):
            self._record_expense(command, report)
        elif isinstance(command, (AddStock, RemoveStock)):
            self._adjust_stock(command, report)
        elif isinstance(command, CreateProduct):
            self._create_product(command, report)
        elif isinstance(command, Analytics):
            self._analytics(command, report)
        elif isinstance(command, SendEmail):
            self._send_email(command, report)
        elif isinstance(command, CreateDocument):
            self._create_document(command, report)
        else:
            report.record(f"I can't run action: {command.action}")

    # -- ledger ---------------------------------------------------------

    def _record_sale(self, cmd: RecordSale, report: ResultReport) -> None:
        if not cmd.product_name:
            report.record("Sale skipped: missing product name")
            return
        quantity = whole_quantity(cmd.quantity)
        if quantity is None:
            report.record("Sale skipped: invalid quantity")
            return
        unit_price = cmd.unit_price if cmd.unit_price is not None else 0
        if unit_price < 0:
            report.record("Sale skipped: invalid price")
            return
        unit_price_cents = to_cents(unit_price)
        if unit_price_cents > MAX_STORED_INT:
            report.record("Sale skipped: invalid price")
            return

        def _op():
            product, created = resolve_product(
                self.workspace,
                cmd.product_name,
                fallback_default=self.settings.default_reorder_threshold,
            )
            _, new_qty = record_sale(
                workspace_id=self.workspace_id,
                product=product,
                quantity=quantity,
                unit_price_cents=unit_price_cents,
                payment_status=cmd.payment_status,
            )
            db.session.commit()
            return product.name, created, new_qty

        name, created, new_qty = run_with_retry(_op)
        if created:
            report.record(f"Product auto-created ✅ {name}")
        line = f"Sale ✅ {quantity} x {name} @ {self.money(unit_price_cents)} (stock: {new_qty})"
        if cmd.payment_status == "unpaid":
            line += " [unpaid]"
        report.record(line)

    def _record_expense(self, cmd: RecordExpense, report: ResultReport) -> None:
        if not cmd.expense_name:
            report.record("Expense skipped: missing expense name")
            return
        amount_cents = to_cents(cmd.amount) if cmd.amount is not None else 0
        if amount_cents <= 0 or amount_cents > MAX_STORED_INT:
            report.record("Expense skipped: invalid amount")
            return
        category = normalize_category(cmd.category)

        def _op():
            expense = record_expense(
                workspace_id=self.workspace_id,
                name=cmd.expense_name,
                amount_cents=amount_cents,
                category=category,
            )
            db.session.commit()
            return expense.name

        name = run_with_retry(_op)
        report.record(f"Expense ✅ {category}: {name} ({self.money(amount_cents)})")

    def _adjust_stock(self, cmd: AddStock | RemoveStock, report: ResultReport) -> None:
        adding = isinstance(cmd, AddStock)
        if not cmd.product_name:
            report.record(f"Stock {cmd.action} skipped: missing product name")
            return
        quantity = whole_quantity(cmd.quantity)
        if quantity is None:
            report.record(f"Stock {cmd.action} skipped: invalid quantity")
            return

        def _op():
            product, created = resolve_product(
                self.workspace,
                cmd.product_name,
                fallback_default=self.settings.default_reorder_threshold,
            )
            new_qty = adjust_stock(
                workspace_id=self.workspace_id,
                product_id=product.id,
                delta=quantity if adding else -quantity,
                reason="restock" if adding else "removal",
            )
            db.session.commit()
            return product.name, created, new_qty

        name, created, new_qty = run_with_retry(_op)
        if created:
            report.record(f"Product auto-created ✅ {name}")
        verb = "added" if adding else "removed"
        report.record(f"Stock ✅ {verb} {quantity} {name} (stock: {new_qty})")

    def _create_product(self, cmd: CreateProduct, report: ResultReport) -> None:
        if not cmd.product_name:
            report.record("Create product skipped: missing product name")
            return

        def _op():
            product = create_product(
                self.workspace,
                cmd.product_name,
                reorder_threshold=cmd.reorder_threshold,
                fallback_default=self.settings.default_reorder_threshold,
            )
            db.session.commit()
            return product.name, product.reorder_threshold

        name, threshold = run_with_retry(_op)
        report.record(f"Product created ✅ {name} (reorder: {threshold})")

    # -- analytics ------------------------------------------------------

    def _analytics(self, cmd: Analytics, report: ResultReport) -> None:
        snapshot = compute_analytics(
            workspace_id=self.workspace_id,
            period=cmd.period,
            tz_name=self.workspace.timezone,
            top_n=self.settings.top_n,
        )
        report.analytics = snapshot
        report.record(
            describe_snapshot(
                snapshot,
                metric=cmd.metric,
                payment_split=cmd.payment_split,
                symbol=self.settings.currency_symbol,
            )
        )

    # -- collaborators --------------------------------------------------

    def _send_email(self, cmd: SendEmail, report: ResultReport) -> None:
        if not is_valid_email(cmd.to):
            report.record("Email skipped: invalid recipient address")
            return
        if not cmd.message:
            report.record("Email skipped: missing message")
            return
        if self.email_client is None:
            report.record("Email failed: email service is not configured")
            return

        to = cmd.to.strip()
        try:
            self.email_client.send(
                to=to,
                subject=cmd.subject or self.settings.default_email_subject,
                text=cmd.message,
            )
        except CollaboratorError as e:
            current_app.logger.warning("Email delivery failed (workspace=%s): %s", self.workspace_id, e)
            report.record(f"Email failed: {e}")
            return
        report.record(f"Email sent ✅ to {to}")

    def _create_document(self, cmd: CreateDocument, report: ResultReport) -> None:
        label = PREMIUM_LABELS[cmd.action]
        if not is_valid_email(cmd.to):
            report.record(f"{label} skipped: invalid recipient address")
            return
        if not cmd.items:
            report.record(f"{label} skipped: missing line items")
            return
        if self.invoice_client is None:
            report.record(f"{label} failed: invoice service is not configured")
            return

        to = cmd.to.strip()
        try:
            receipt = self.invoice_client.create(
                kind=cmd.kind,
                to=to,
                items=cmd.items,
                note=cmd.note,
                send_email=cmd.send_email,
            )
        except CollaboratorError as e:
            current_app.logger.warning("%s creation failed (workspace=%s): %s", label, self.workspace_id, e)
            report.record(f"{label} failed: {e}")
            return

        line = f"{label} ✅"
        if receipt.doc_no:
            line += f" {receipt.doc_no}"
        line += f" for {to}"
        if receipt.total is not None:
            line += f": total {self.money(to_cents(receipt.total))}"
        if receipt.sent:
            line += " (emailed)"
        report.record(line)
