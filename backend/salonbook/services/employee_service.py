# Overview: Owner-managed employee logins; an EMPLOYEE user paired with its staff record.

"""
Employee Service

An employee is a User with role EMPLOYEE plus the Staff record that points
at it through Staff.user_id. Both are created, updated and removed together
and are addressed by the staff id.

Removal is a soft delete: the user and the staff record are deactivated and
the user's tokens revoked. Session records and appointments keep their staff
reference and the audit trail keeps its user reference.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..extensions import db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Staff, User, ROLE_EMPLOYEE
from .auth_service import create_user, hash_password
from .security_service import EVENT_USER_DEACTIVATED, log_security_event
from .tenant_service import require_staff_in_account
from .token_service import revoke_all_user_tokens

DEFAULT_STAFF_ROLE = "Staff"


@dataclass
class EmployeePatch:
    """Fields left as None are not changed."""
    username: str | None = None
    email: str | None = None
    phone: str | None = None
    password: str | None = None
    full_name: str | None = None


def create_employee(
    account_id: int,
    *,
    username: str,
    email: str,
    password: str,
    phone: str | None = None,
    full_name: str | None = None,
    staff_role: str | None = None,
) -> Staff:
    """
    Create the EMPLOYEE user and its staff record in one transaction.

    full_name defaults to the username.
    """
    try:
        user = create_user(
            username=username,
            email=email,
            password=password,
            role=ROLE_EMPLOYEE,
            account_id=account_id,
            phone=phone,
            commit=False,
        )
        staff = Staff(
            account_id=account_id,
            user_id=user.id,
            full_name=full_name or username,
            role=staff_role or DEFAULT_STAFF_ROLE,
            email=email,
            phone=phone,
            is_active=True,
        )
        db.session.add(staff)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return staff


def _employee_query(account_id: int):
    return (
        db.session.query(Staff)
        .join(User, Staff.user_id == User.id)
        .filter(
            Staff.account_id == account_id,
            User.role == ROLE_EMPLOYEE,
            User.is_active.is_(True),
        )
    )


def list_employees(account_id: int) -> list[Staff]:
    return _employee_query(account_id).order_by(Staff.full_name, Staff.id).all()


def get_employee(staff_id: int, account_id: int) -> Staff:
    """Staff of another account -> ForbiddenError; staff without an active login -> NotFoundError."""
    staff = require_staff_in_account(staff_id, account_id)
    user = staff.user
    if user is None or user.role != ROLE_EMPLOYEE or not user.is_active:
        raise NotFoundError("Employee not found")
    return staff


def _check_identity_free(user: User, username: str | None, email: str | None) -> None:
    clauses = []
    if username is not None and username != user.username:
        clauses.append(User.username == username)
    if email is not None and email != user.email:
        clauses.append(User.email == email)
    if not clauses:
        return
    taken = db.session.query(User.id).filter(User.id != user.id, db.or_(*clauses)).first()
    if taken:
        raise ConflictError("Username or email already exists")


def update_employee(staff_id: int, account_id: int, patch: EmployeePatch) -> Staff:
    """
    Apply a partial update to the login and mirror email and phone onto the
    staff record. A new password is strength-checked and re-hashed.
    """
    staff = get_employee(staff_id, account_id)
    user = staff.user

    if patch.username is not None and not patch.username:
        raise ValidationError("username cannot be blank")
    if patch.email is not None and not patch.email:
        raise ValidationError("email cannot be blank")
    _check_identity_free(user, patch.username, patch.email)

    try:
        if patch.username is not None:
            user.username = patch.username
        if patch.email is not None:
            user.email = patch.email
            staff.email = patch.email
        if patch.phone is not None:
            user.phone = patch.phone
            staff.phone = patch.phone
        if patch.full_name is not None:
            staff.full_name = patch.full_name
        if patch.password is not None:
            user.password_hash = hash_password(patch.password)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return staff


def delete_employee(staff_id: int, account_id: int) -> None:
    staff = get_employee(staff_id, account_id)
    user = staff.user

    user.is_active = False
    staff.is_active = False
    db.session.commit()

    revoked = revoke_all_user_tokens(user.id, reason="Employee removed")
    log_security_event(
        user_id=user.id,
        event_type=EVENT_USER_DEACTIVATED,
        success=True,
        reason=f"Employee {user.username} removed, {revoked} tokens revoked",
        account_id=account_id,
    )
