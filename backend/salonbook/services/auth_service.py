# Overview: Service-layer operations for auth; password hashing, user creation and credential checks.

"""
Authentication Service

Users are platform ADMINs (no account) or OWNER/EMPLOYEE users that belong to
exactly one account. Usernames and emails are globally unique so that login
needs no tenant hint.

SECURITY NOTES:
- Passwords hashed with bcrypt (rounds from BCRYPT_ROUNDS config)
- Minimum 8 characters, at least one letter and one digit
- Bearer tokens are managed separately (see token_service.py)
- Users of a deactivated account cannot authenticate
"""

from __future__ import annotations

import re

import bcrypt
from flask import current_app

from ..extensions import db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Account, User, ROLE_ADMIN, VALID_ROLES
from salonbook.time_utils import utcnow


def validate_password_strength(password: str) -> None:
    """
    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit

    Raises ValidationError if requirements not met.
    """
    if not password or len(password) < 8:
        raise ValidationError("Password must be at least 8 characters long")

    if not re.search(r"[A-Za-z]", password):
        raise ValidationError("Password must contain at least one letter")

    if not re.search(r"\d", password):
        raise ValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """Validate strength, then hash with bcrypt."""
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt comparison; malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_user(
    username: str,
    email: str,
    password: str,
    role: str,
    account_id: int | None = None,
    phone: str | None = None,
    *,
    commit: bool = True,
) -> User:
    """
    Create a user with a bcrypt password hash.

    ADMIN users must not have an account; OWNER and EMPLOYEE users must
    belong to an existing, active account.

    commit=False only flushes, for callers that create the user as part of a
    larger unit of work (account + owner).
    """
    if role not in VALID_ROLES:
        raise ValidationError(f"Invalid role. Must be one of {', '.join(VALID_ROLES)}")

    if role == ROLE_ADMIN:
        if account_id is not None:
            raise ValidationError("Admin users cannot belong to an account")
    else:
        if account_id is None:
            raise ValidationError("account_id is required for this role")
        account = db.session.get(Account, account_id)
        if account is None:
            raise NotFoundError("Account not found")
        if not account.is_active:
            raise ValidationError("Account is not active")

    existing = db.session.query(User).filter(
        db.or_(User.username == username, User.email == email)
    ).first()
    if existing:
        raise ConflictError("Username or email already exists")

    user = User(
        account_id=account_id,
        username=username,
        email=email,
        phone=phone,
        password_hash=hash_password(password),
        role=role,
    )

    db.session.add(user)
    if commit:
        db.session.commit()
    else:
        db.session.flush()
    return user


def authenticate(identifier: str, password: str) -> User | None:
    """
    Authenticate by username or email.

    Returns the User if the credentials are valid, the user is active and
    (for tenant users) the account is active; otherwise None.
    Updates last_login_at on success.
    """
    user = db.session.query(User).filter(
        db.or_(User.username == identifier, User.email == identifier),
        User.is_active.is_(True),
    ).first()

    if not user:
        return None

    if user.account_id is not None:
        account = db.session.get(Account, user.account_id)
        if account is None or not account.is_active:
            return None

    if not verify_password(password, user.password_hash):
        return None

    user.last_login_at = utcnow()
    db.session.commit()
    return user
