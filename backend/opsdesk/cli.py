# Overview: Flask CLI command groups for bootstrap, workspace management, and the assistant.

# backend/opsdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create all tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Workspace management:
# - python -m flask workspaces create --name "Corner Shop" [--id shop-1] [--plan premium] [--timezone Africa/Lagos]
# - python -m flask workspaces list
# - python -m flask workspaces set-plan shop-1 --plan premium --status active
#
# Assistant:
# - python -m flask assistant ask shop-1 "I sold 2 rice for $4 each"
#   Interpret and execute, printing the reply.
# - python -m flask assistant parse "spent $15 on gas"
#   Interpret only; prints the commands as JSON.

import json

import click
from flask.cli import with_appcontext

from .extensions import db
from .services import assistant_service
from .services.tenant_service import (
    TenantAccessError,
    create_workspace,
    get_workspace,
    list_workspaces,
    require_workspace,
)


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create all tables. Safe to run repeatedly."""
    db.create_all()
    click.echo("PASS Schema ready.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('workspaces')
def workspaces_group():
    """Workspace (tenant) management."""


@workspaces_group.command('create')
@click.option('--name', required=True, help='Display name')
@click.option('--id', 'workspace_id', default=None, help='Explicit workspace id (default: random)')
@click.option('--plan', default='standard', show_default=True)
@click.option('--status', 'subscription_status', default=None, help='Subscription status (active, trialing, canceled, ...)')
@click.option('--timezone', default='UTC', show_default=True, help='IANA zone used for analytics periods')
@click.option('--reorder-threshold', type=int, default=None, help='Default reorder threshold for new products')
@with_appcontext
def create_workspace_cmd(name, workspace_id, plan, subscription_status, timezone, reorder_threshold):
    """Create a workspace."""
    if workspace_id and get_workspace(workspace_id) is not None:
        raise click.ClickException(f"Workspace {workspace_id} already exists")
    ws = create_workspace(
        name=name,
        workspace_id=workspace_id,
        plan=plan.strip().lower(),
        subscription_status=subscription_status.strip().lower() if subscription_status else None,
        timezone=timezone,
        default_reorder_threshold=reorder_threshold,
    )
    click.echo(f"PASS Created workspace {ws.id} ({ws.name})")


@workspaces_group.command('list')
@with_appcontext
def list_workspaces_cmd():
    """List all workspaces."""
    rows = list_workspaces()
    if not rows:
        click.echo("No workspaces found.")
        return
    for ws in rows:
        click.echo(f"{ws.id}  {ws.name}  plan={ws.plan}  status={ws.subscription_status or '-'}  tz={ws.timezone}")


@workspaces_group.command('set-plan')
@click.argument('workspace_id')
@click.option('--plan', default=None)
@click.option('--status', 'subscription_status', default=None)
@with_appcontext
def set_plan_cmd(workspace_id, plan, subscription_status):
    """Update a workspace's plan and/or subscription status."""
    try:
        ws = require_workspace(workspace_id)
    except TenantAccessError as e:
        raise click.ClickException(str(e))
    if plan:
        ws.plan = plan.strip().lower()
    if subscription_status:
        ws.subscription_status = subscription_status.strip().lower()
    db.session.commit()
    click.echo(f"PASS {ws.id}: plan={ws.plan} status={ws.subscription_status or '-'}")


@click.group('assistant')
def assistant_group():
    """Run the chat assistant from the command line."""


@assistant_group.command('ask')
@click.argument('workspace_id')
@click.argument('text')
@with_appcontext
def ask_cmd(workspace_id, text):
    """Interpret TEXT and execute it against WORKSPACE_ID."""
    try:
        report = assistant_service.handle_message(workspace_id, text)
    except TenantAccessError as e:
        raise click.ClickException(str(e))
    click.echo(report.reply())


@assistant_group.command('parse')
@click.argument('text')
@with_appcontext
def parse_cmd(text):
    """Interpret TEXT without executing; prints commands as JSON."""
    registry = assistant_service.collaborators()
    commands = assistant_service.interpret(text, registry.get("extractor"))
    click.echo(json.dumps([c.to_dict() for c in commands], indent=2, ensure_ascii=False))


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(workspaces_group)
    app.cli.add_command(assistant_group)
