# Overview: Pytest coverage for passwords, users, bearer tokens and account administration.

from datetime import timedelta

import pytest

from salonbook.errors import ConflictError, NotFoundError, ValidationError
from salonbook.extensions import db
from salonbook.models import (
    Account,
    Appointment,
    Client,
    Payment,
    Sale,
    SecurityEvent,
    Service,
    SessionRecord,
    SessionToken,
    Staff,
    User,
    WorkingHours,
    ROLE_ADMIN,
    ROLE_EMPLOYEE,
    ROLE_OWNER,
)
from salonbook.services import (
    account_service,
    appointment_service,
    auth_service,
    catalog_service,
    employee_service,
    sale_service,
    security_service,
    session_service,
    token_service,
)
from salonbook.services.account_service import AccountPatch
from salonbook.services.catalog_service import WorkingHoursEntry
from salonbook.time_utils import utcnow


class TestPasswords:
    @pytest.mark.parametrize("password", ["short1", "allletters", "12345678", ""])
    def test_weak_passwords_rejected(self, db_session, password):
        with pytest.raises(ValidationError):
            auth_service.validate_password_strength(password)

    def test_hash_and_verify(self, db_session):
        hashed = auth_service.hash_password("Password123")
        assert hashed != "Password123"
        assert auth_service.verify_password("Password123", hashed)
        assert not auth_service.verify_password("Password124", hashed)

    def test_malformed_hash_never_matches(self, db_session):
        assert auth_service.verify_password("Password123", "not-a-bcrypt-hash") is False


class TestUsers:
    def test_owner_requires_account(self, db_session):
        with pytest.raises(ValidationError):
            auth_service.create_user("lonely", "lonely@x.test", "Password123", ROLE_OWNER)

    def test_admin_cannot_have_account(self, account_a):
        with pytest.raises(ValidationError):
            auth_service.create_user("adm", "adm@x.test", "Password123", ROLE_ADMIN, account_id=account_a.id)

    def test_unknown_account(self, db_session):
        with pytest.raises(NotFoundError):
            auth_service.create_user("emp", "emp@x.test", "Password123", ROLE_EMPLOYEE, account_id=4242)

    def test_duplicate_username(self, tenant_a):
        account, _ = tenant_a
        with pytest.raises(ConflictError):
            auth_service.create_user("owner_a", "new@x.test", "Password123", ROLE_EMPLOYEE, account_id=account.id)

    def test_invalid_role(self, account_a):
        with pytest.raises(ValidationError):
            auth_service.create_user("x", "x@x.test", "Password123", "CASHIER", account_id=account_a.id)

    def test_authenticate_by_username_or_email(self, tenant_a):
        _, owner = tenant_a
        assert auth_service.authenticate("owner_a", "Password123").id == owner.id
        assert auth_service.authenticate("owner_a@studio-a.test", "Password123").id == owner.id
        assert auth_service.authenticate("owner_a", "wrong-pass1") is None
        assert owner.last_login_at is not None

    def test_inactive_account_cannot_authenticate(self, tenant_a):
        account, _ = tenant_a
        account_service.update_account(account.id, AccountPatch(is_active=False))
        assert auth_service.authenticate("owner_a", "Password123") is None


class TestTokens:
    def test_issue_and_validate(self, tenant_a):
        account, owner = tenant_a
        record, plaintext = token_service.create_token(owner)

        assert len(plaintext) == 64
        assert record.token_hash == token_service.hash_token(plaintext)
        assert record.token_hash != plaintext

        context = token_service.validate_token(plaintext)
        assert context.user.id == owner.id
        assert context.account_id == account.id

    def test_unknown_token(self, db_session):
        assert token_service.validate_token("f" * 64) is None
        assert token_service.validate_token("") is None

    def test_expired_token(self, tenant_a):
        _, owner = tenant_a
        record, plaintext = token_service.create_token(owner)
        record.expires_at = utcnow() - timedelta(minutes=1)
        db.session.commit()
        assert token_service.validate_token(plaintext) is None

    def test_idle_token_is_revoked(self, app, tenant_a):
        _, owner = tenant_a
        record, plaintext = token_service.create_token(owner)
        idle = app.config["SESSION_IDLE_TIMEOUT_MINUTES"]
        record.last_used_at = utcnow() - timedelta(minutes=idle + 1)
        db.session.commit()

        assert token_service.validate_token(plaintext) is None
        db.session.refresh(record)
        assert record.is_revoked is True
        assert record.revoked_reason == "Idle timeout"

    def test_deactivated_user(self, tenant_a):
        _, owner = tenant_a
        _, plaintext = token_service.create_token(owner)
        owner.is_active = False
        db.session.commit()
        assert token_service.validate_token(plaintext) is None

    def test_inactive_user_cannot_get_token(self, tenant_a):
        _, owner = tenant_a
        owner.is_active = False
        db.session.commit()
        with pytest.raises(ValidationError):
            token_service.create_token(owner)

    def test_revoke(self, tenant_a):
        _, owner = tenant_a
        _, plaintext = token_service.create_token(owner)
        assert token_service.revoke_token(plaintext) is True
        assert token_service.revoke_token(plaintext) is False
        assert token_service.validate_token(plaintext) is None

    def test_revoke_all(self, tenant_a):
        _, owner = tenant_a
        _, first = token_service.create_token(owner)
        _, second = token_service.create_token(owner)
        assert token_service.revoke_all_user_tokens(owner.id) == 2
        assert token_service.validate_token(first) is None
        assert token_service.validate_token(second) is None

    def test_cleanup(self, tenant_a):
        _, owner = tenant_a
        old_revoked, old_plain = token_service.create_token(owner)
        old_revoked.created_at = utcnow() - timedelta(days=45)
        db.session.commit()
        token_service.revoke_token(old_plain)

        recent_revoked, recent_plain = token_service.create_token(owner)
        token_service.revoke_token(recent_plain)
        _, active_plain = token_service.create_token(owner)

        assert token_service.cleanup_expired_tokens(older_than_days=30) == 1
        assert db.session.query(SessionToken).count() == 2
        assert token_service.validate_token(active_plain) is not None


class TestAccounts:
    def test_create_with_owner(self, db_session):
        account, owner = account_service.create_account_with_owner(
            business_name="Nail Bar",
            owner_username="nails",
            owner_email="nails@nailbar.test",
            owner_password="Password123",
            subscription_plan="Premium",
        )
        assert owner.account_id == account.id
        assert owner.role == ROLE_OWNER
        assert account.subscription_plan == "Premium"
        assert [a.id for a in account_service.list_accounts()] == [account.id]

    def test_failed_owner_leaves_no_account(self, tenant_a):
        before = len(account_service.list_accounts())
        with pytest.raises(ConflictError):
            account_service.create_account_with_owner(
                business_name="Copycat",
                owner_username="owner_a",
                owner_email="copy@cat.test",
                owner_password="Password123",
            )
        assert len(account_service.list_accounts()) == before

    def test_weak_owner_password_leaves_no_account(self, db_session):
        with pytest.raises(ValidationError):
            account_service.create_account_with_owner(
                business_name="Weak",
                owner_username="weak",
                owner_email="weak@x.test",
                owner_password="short",
            )
        assert account_service.list_accounts() == []
        assert db.session.query(User).count() == 0

    def test_deactivation_revokes_tokens(self, tenant_a):
        account, owner = tenant_a
        _, plaintext = token_service.create_token(owner)

        updated = account_service.update_account(account.id, AccountPatch(is_active=False))

        assert updated.is_active is False
        assert token_service.validate_token(plaintext) is None

    def test_unknown_account(self, db_session):
        with pytest.raises(NotFoundError):
            account_service.get_account(4242)

    def test_delete_account_removes_tenant_data(self, tenant_a, client_a, service_a, staff_a, tenant_b, client_b, service_b):
        account, owner = tenant_a
        account_id, owner_id = account.id, owner.id
        sale = sale_service.create_sale(account_id, client_a.id, service_a.id)
        sale_service.create_payment(sale.id, account_id, 10000, "Cash")
        session_service.use_session(sale.id, account_id, staff_id=staff_a.id)
        appointment_service.create_appointment(
            account_id, customer_name="Ayşe Yılmaz", service_id=service_a.id, appointment_date=utcnow(), staff_id=staff_a.id
        )
        catalog_service.set_working_hours(staff_a.id, account_id, [WorkingHoursEntry(1, "09:00", "17:00")])
        employee = employee_service.create_employee(
            account_id, username="elif", email="elif@studio-a.test", password="Password123"
        )
        token_service.create_token(owner)
        security_service.log_security_event(
            user_id=employee.user_id, event_type="LOGIN_FAILED", success=False, account_id=account_id
        )
        foreign_sale = sale_service.create_sale(tenant_b[0].id, client_b.id, service_b.id)

        account_service.delete_account(account_id)

        assert db.session.query(Account).filter_by(id=account_id).count() == 0
        assert db.session.query(User).filter_by(account_id=account_id).count() == 0
        for model in (Appointment, Staff, Client, Service):
            assert db.session.query(model).filter_by(account_id=account_id).count() == 0
        assert db.session.query(Sale).count() == 1
        assert db.session.query(Payment).count() == 0
        assert db.session.query(SessionRecord).count() == 0
        assert db.session.query(WorkingHours).count() == 0
        assert db.session.query(SessionToken).filter_by(user_id=owner_id).count() == 0
        assert db.session.get(Sale, foreign_sale.id) is not None

        events = db.session.query(SecurityEvent).filter_by(event_type="LOGIN_FAILED").all()
        assert len(events) == 1
        assert events[0].account_id is None
        assert events[0].user_id is None

    def test_delete_unknown_account(self, db_session):
        with pytest.raises(NotFoundError):
            account_service.delete_account(4242)


class TestLoginHttp:
    def test_login_returns_token_and_user(self, client, tenant_a):
        resp = client.post("/api/auth/login", json={"username": "owner_a", "password": "Password123"})
        assert resp.status_code == 200
        assert len(resp.json["token"]) == 64
        assert resp.json["user"]["role"] == ROLE_OWNER
        assert resp.json["expires_at"].endswith("Z")

    def test_login_wrong_password(self, client, tenant_a):
        resp = client.post("/api/auth/login", json={"username": "owner_a", "password": "nope12345"})
        assert resp.status_code == 401

    def test_login_missing_fields(self, client, db_session):
        resp = client.post("/api/auth/login", json={"username": "owner_a"})
        assert resp.status_code == 400
