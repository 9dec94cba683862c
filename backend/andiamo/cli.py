# Overview: Flask CLI command groups for bootstrap, admin accounts and order maintenance.

# backend/andiamo/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init
#   Idempotent: default payment options and site settings.
#
# Admin accounts:
# - python -m flask admins create --email admin@andiamo.tn --name "Admin" --password "Password123!" [--role super_admin]
# - python -m flask admins list
#
# Orders:
# - python -m flask orders reject-expired [--hours 24]
#   Cancel cash orders left unpaid past the timeout.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Admin
from .services import settings_service, cancellation_service
from .services.auth_service import create_admin, PasswordValidationError


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create default payment options and settings rows if missing."""
    click.echo("START Initializing Andiamo backend...")

    options = settings_service.ensure_default_payment_options()
    for option in options:
        state = "enabled" if option.enabled else "disabled"
        click.echo(f"PASS Payment option {option.option_type}: {state}")

    if settings_service.get_content(settings_service.SALES_SETTINGS_KEY) is None:
        settings_service.update_sales_settings(True)
        click.echo("PASS Ambassador sales enabled")
    else:
        click.echo("PASS Using existing sales settings")

    hours = settings_service.get_cash_payment_timeout_hours()
    click.echo(f"PASS Cash payment timeout: {hours}h")
    click.echo("DONE")


@click.group('admins')
def admins_group():
    """Admin account management."""


@admins_group.command('create')
@click.option('--email', prompt=True)
@click.option('--name', default=None)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', default='admin', type=click.Choice(['admin', 'super_admin']))
@with_appcontext
def create_admin_command(email, name, password, role):
    """Create an admin account (password must meet the strength policy)."""
    try:
        admin = create_admin(email, password, name=name, role=role)
    except PasswordValidationError as e:
        raise click.ClickException(f"Password validation failed: {e}")
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created admin {admin.email} (ID: {admin.id}, role: {admin.role})")


@admins_group.command('list')
@with_appcontext
def list_admins():
    admins = db.session.query(Admin).order_by(Admin.id).all()
    if not admins:
        click.echo("No admins.")
        return
    for admin in admins:
        status = "active" if admin.is_active else "inactive"
        click.echo(f"{admin.id:>4}  {admin.email:<40} {admin.role:<12} {status}")


@click.group('orders')
def orders_group():
    """Order maintenance."""


@orders_group.command('reject-expired')
@click.option('--hours', type=int, default=None, help='Override the configured timeout')
@with_appcontext
def reject_expired(hours):
    result = cancellation_service.check_and_cancel_timeouts(hours)
    click.echo(
        f"Checked {result['checked']} orders older than {result['timeout_hours']}h: "
        f"{result['cancelled']} cancelled, {result['skipped']} skipped, {result['errors']} errors"
    )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(admins_group)
    app.cli.add_command(orders_group)
