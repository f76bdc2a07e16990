# Overview: Pytest coverage for the Flask CLI command groups.

from datetime import timedelta

from salonbook.extensions import db
from salonbook.models import Account, SessionToken, User, ROLE_ADMIN, ROLE_OWNER
from salonbook.services import token_service
from salonbook.time_utils import utcnow


class TestSystemCommands:
    def test_create_admin(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "system", "create-admin",
            "--username", "root", "--email", "root@salonbook.test", "--password", "Password123",
        ])
        assert result.exit_code == 0, result.output
        assert "Created admin user: root" in result.output

        user = db.session.query(User).filter_by(username="root").one()
        assert user.role == ROLE_ADMIN
        assert user.account_id is None

    def test_create_admin_weak_password(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "system", "create-admin",
            "--username", "root", "--email", "root@salonbook.test", "--password", "weak",
        ])
        assert result.exit_code != 0
        assert "at least 8 characters" in result.output

    def test_init_db_is_idempotent(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["system", "init-db"])
        assert result.exit_code == 0
        assert "Database tables created" in result.output


class TestAccountCommands:
    def test_create_and_list(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "accounts", "create",
            "--name", "Studio Bella",
            "--owner-username", "bella",
            "--owner-email", "bella@bella.test",
            "--owner-password", "Password123",
            "--plan", "Premium",
        ])
        assert result.exit_code == 0, result.output

        account = db.session.query(Account).filter_by(business_name="Studio Bella").one()
        owner = db.session.query(User).filter_by(username="bella").one()
        assert owner.account_id == account.id
        assert owner.role == ROLE_OWNER

        listing = runner.invoke(args=["accounts", "list"])
        assert listing.exit_code == 0
        assert "Studio Bella" in listing.output
        assert "Premium" in listing.output

    def test_list_empty(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["accounts", "list"])
        assert "No accounts found." in result.output

    def test_duplicate_owner_fails(self, app, tenant_a):
        result = app.test_cli_runner().invoke(args=[
            "accounts", "create",
            "--name", "Copycat",
            "--owner-username", "owner_a",
            "--owner-email", "copy@cat.test",
            "--owner-password", "Password123",
        ])
        assert result.exit_code != 0
        assert "already exists" in result.output


class TestMaintenanceCommands:
    def test_cleanup_tokens(self, app, tenant_a):
        _, owner = tenant_a
        record, plaintext = token_service.create_token(owner)
        record.created_at = utcnow() - timedelta(days=60)
        db.session.commit()
        token_service.revoke_token(plaintext)

        result = app.test_cli_runner().invoke(args=["maintenance", "cleanup-tokens", "--older-than-days", "30"])

        assert result.exit_code == 0
        assert "Deleted 1 expired or revoked tokens" in result.output
        assert db.session.query(SessionToken).count() == 0
