# Overview: Flask CLI command groups for bootstrap, account administration and maintenance.

# backend/salonbook/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py.
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables (development; production uses `flask db upgrade`).
# - python -m flask system create-admin --username admin --email admin@example.com --password "secret123"
#   Create a platform admin user.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Account management:
# - python -m flask accounts list
# - python -m flask accounts create --name "Studio Bella" --owner-username bella --owner-email bella@example.com --owner-password "secret123"
#
# Maintenance:
# - python -m flask maintenance cleanup-tokens --older-than-days 30
#   Delete expired or revoked login tokens older than the window.

import click
from flask.cli import with_appcontext

from .errors import BookingError
from .extensions import db
from .models import Client, User, ROLE_ADMIN
from .services import account_service, token_service
from .services.auth_service import create_user


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created.")


@system_group.command('create-admin')
@click.option('--username', prompt=True, help='Username')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_admin_cli(username, email, password):
    """Create a platform ADMIN user (no account)."""
    try:
        user = create_user(username=username, email=email, password=password, role=ROLE_ADMIN)
    except BookingError as e:
        db.session.rollback()
        raise click.ClickException(e.message)
    click.echo(f"PASS Created admin user: {user.username} (ID: {user.id})")


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


@click.group('accounts')
def accounts_group():
    """Tenant account management."""


@accounts_group.command('list')
@with_appcontext
def list_accounts_cli():
    """List all accounts."""
    accounts = account_service.list_accounts()

    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Business':<30} {'Plan':<12} {'Active':<8} {'Users':<7} {'Clients'}")
    click.echo("="*80)

    for account in accounts:
        user_count = db.session.query(User).filter_by(account_id=account.id).count()
        client_count = db.session.query(Client).filter_by(account_id=account.id).count()
        active_str = "Yes" if account.is_active else "No"

        click.echo(
            f"{account.id:<5} {account.business_name:<30} {account.subscription_plan:<12} "
            f"{active_str:<8} {user_count:<7} {client_count}"
        )

    click.echo("="*80 + "\n")


@accounts_group.command('create')
@click.option('--name', required=True, help='Business name')
@click.option('--owner-username', required=True, help='Owner username')
@click.option('--owner-email', required=True, help='Owner email')
@click.option('--owner-password', prompt=True, hide_input=True, confirmation_prompt=True, help='Owner password')
@click.option('--plan', default='Basic', show_default=True, help='Subscription plan')
@with_appcontext
def create_account_cli(name, owner_username, owner_email, owner_password, plan):
    """Create an account (tenant) together with its owner user."""
    try:
        account, owner = account_service.create_account_with_owner(
            business_name=name,
            owner_username=owner_username,
            owner_email=owner_email,
            owner_password=owner_password,
            subscription_plan=plan,
        )
    except BookingError as e:
        raise click.ClickException(e.message)

    click.echo(f"PASS Created account: {account.business_name} (ID: {account.id})")
    click.echo(f"PASS Owner user: {owner.username} (ID: {owner.id})")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-tokens')
@click.option('--older-than-days', type=int, default=30, show_default=True)
@with_appcontext
def cleanup_tokens_cli(older_than_days):
    """Delete expired or revoked login tokens."""
    deleted = token_service.cleanup_expired_tokens(older_than_days=older_than_days)
    click.echo(f"Deleted {deleted} expired or revoked tokens older than {older_than_days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(accounts_group)
    app.cli.add_command(maintenance_group)
