# Overview: Platform administration of tenant accounts and their owner users.

from __future__ import annotations

from dataclasses import dataclass

from ..extensions import db
from ..errors import NotFoundError, ValidationError
from ..models import (
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
    ROLE_OWNER,
)
from .auth_service import create_user
from .token_service import revoke_all_user_tokens


@dataclass
class AccountPatch:
    """Fields left as None are not changed."""
    business_name: str | None = None
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    subscription_plan: str | None = None
    is_active: bool | None = None


def create_account_with_owner(
    *,
    business_name: str,
    owner_username: str,
    owner_email: str,
    owner_password: str,
    contact_person: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    subscription_plan: str | None = None,
) -> tuple[Account, User]:
    """
    Create an account and its OWNER user in one transaction.

    If the owner cannot be created (duplicate username, weak password) the
    account is not created either.
    """
    if not business_name:
        raise ValidationError("business_name is required")

    account = Account(
        business_name=business_name,
        contact_person=contact_person,
        email=email,
        phone=phone,
        subscription_plan=subscription_plan or "Basic",
    )
    try:
        db.session.add(account)
        db.session.flush()
        owner = create_user(
            username=owner_username,
            email=owner_email,
            password=owner_password,
            role=ROLE_OWNER,
            account_id=account.id,
            phone=phone,
            commit=False,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return account, owner


def list_accounts() -> list[Account]:
    return db.session.query(Account).order_by(Account.created_at.desc(), Account.id.desc()).all()


def get_account(account_id: int) -> Account:
    account = db.session.get(Account, account_id)
    if account is None:
        raise NotFoundError("Account not found")
    return account


def update_account(account_id: int, patch: AccountPatch) -> Account:
    """
    Apply a partial update. Deactivating an account revokes the tokens of
    all its users so they are signed out immediately.
    """
    account = get_account(account_id)

    if patch.business_name is not None:
        if not patch.business_name:
            raise ValidationError("business_name cannot be blank")
        account.business_name = patch.business_name
    if patch.contact_person is not None:
        account.contact_person = patch.contact_person
    if patch.email is not None:
        account.email = patch.email
    if patch.phone is not None:
        account.phone = patch.phone
    if patch.subscription_plan is not None:
        account.subscription_plan = patch.subscription_plan

    deactivated = patch.is_active is False and account.is_active
    if patch.is_active is not None:
        account.is_active = patch.is_active

    db.session.commit()

    if deactivated:
        for user in account.users:
            revoke_all_user_tokens(user.id, reason="Account deactivated")

    return account


def delete_account(account_id: int) -> None:
    """
    Permanently delete an account, its users and all of its records.

    Rows are removed children first in a single transaction. Security events
    are kept: their account and user references are cleared.
    """
    get_account(account_id)

    client_ids = db.select(Client.id).where(Client.account_id == account_id)
    sale_ids = db.select(Sale.id).where(Sale.client_id.in_(client_ids))
    staff_ids = db.select(Staff.id).where(Staff.account_id == account_id)
    user_ids = db.select(User.id).where(User.account_id == account_id)

    try:
        for model, criterion in (
            (SessionRecord, SessionRecord.sale_id.in_(sale_ids)),
            (Payment, Payment.sale_id.in_(sale_ids)),
            (Sale, Sale.client_id.in_(client_ids)),
            (Appointment, Appointment.account_id == account_id),
            (WorkingHours, WorkingHours.staff_id.in_(staff_ids)),
            (Staff, Staff.account_id == account_id),
            (Client, Client.account_id == account_id),
            (Service, Service.account_id == account_id),
            (SessionToken, SessionToken.user_id.in_(user_ids)),
        ):
            db.session.query(model).filter(criterion).delete(synchronize_session=False)

        db.session.query(SecurityEvent).filter(SecurityEvent.user_id.in_(user_ids)).update(
            {SecurityEvent.user_id: None}, synchronize_session=False
        )
        db.session.query(SecurityEvent).filter(SecurityEvent.account_id == account_id).update(
            {SecurityEvent.account_id: None}, synchronize_session=False
        )

        db.session.query(User).filter(User.account_id == account_id).delete(synchronize_session=False)
        db.session.query(Account).filter(Account.id == account_id).delete(synchronize_session=False)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
