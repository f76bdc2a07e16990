# Overview: Bearer token lifecycle; issue, validate, revoke and purge login tokens.

"""
Session Token Management

Tokens are 32 random bytes (64 hex chars) handed to the client once; only the
SHA-256 digest is stored. Each token captures the user's account_id at login,
which stays the tenant context for the token's lifetime.

Timeouts come from config:
- SESSION_TOKEN_TTL_HOURS       absolute lifetime
- SESSION_IDLE_TIMEOUT_MINUTES  inactivity window (token auto-revoked)
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..errors import ValidationError
from ..models import Account, SessionToken, User
from salonbook.time_utils import utcnow


@dataclass
class TokenContext:
    """Result of a successful validate_token call."""
    user: User
    token: SessionToken
    account_id: int | None


def generate_token() -> str:
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _absolute_ttl() -> timedelta:
    return timedelta(hours=current_app.config.get("SESSION_TOKEN_TTL_HOURS", 24))


def _idle_timeout() -> timedelta:
    return timedelta(minutes=current_app.config.get("SESSION_IDLE_TIMEOUT_MINUTES", 120))


def create_token(
    user: User,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """
    Issue a token for an authenticated user.

    Returns (token_record, plaintext_token). Only the record is persisted.
    """
    if not user.is_active:
        raise ValidationError("User is not active")

    plaintext = generate_token()
    now = utcnow()

    record = SessionToken(
        user_id=user.id,
        account_id=user.account_id,
        token_hash=hash_token(plaintext),
        created_at=now,
        last_used_at=now,
        expires_at=now + _absolute_ttl(),
        user_agent=user_agent,
        ip_address=ip_address,
        is_revoked=False,
    )
    db.session.add(record)
    db.session.commit()
    return record, plaintext


def _revoke(record: SessionToken, reason: str) -> None:
    record.is_revoked = True
    record.revoked_at = utcnow()
    record.revoked_reason = reason
    db.session.commit()


def validate_token(token: str) -> TokenContext | None:
    """
    Resolve a plaintext token.

    Returns None if the token is unknown, revoked, expired, idle too long,
    or its user/account has been deactivated. Idle and deactivation cases
    revoke the token. Refreshes last_used_at on success.
    """
    if not token:
        return None

    record = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()
    if not record:
        return None

    now = utcnow()
    if record.expires_at < now:
        return None

    if now - record.last_used_at > _idle_timeout():
        _revoke(record, "Idle timeout")
        return None

    user = record.user
    if not user or not user.is_active:
        _revoke(record, "User account deactivated")
        return None

    if record.account_id is not None:
        account = db.session.get(Account, record.account_id)
        if account is None or not account.is_active:
            _revoke(record, "Account deactivated")
            return None

    record.last_used_at = now
    db.session.commit()

    return TokenContext(user=user, token=record, account_id=record.account_id)


def revoke_token(token: str, reason: str = "User logout") -> bool:
    """Returns True if an active token was revoked."""
    record = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()
    if not record:
        return False
    _revoke(record, reason)
    return True


def revoke_all_user_tokens(user_id: int, reason: str = "Revoke all sessions") -> int:
    now = utcnow()
    records = db.session.query(SessionToken).filter_by(user_id=user_id, is_revoked=False).all()
    for record in records:
        record.is_revoked = True
        record.revoked_at = now
        record.revoked_reason = reason
    db.session.commit()
    return len(records)


def cleanup_expired_tokens(older_than_days: int = 30) -> int:
    """
    Delete expired or revoked tokens created more than `older_than_days` ago.

    Returns the number of rows deleted.
    """
    now = utcnow()
    cutoff = now - timedelta(days=older_than_days)

    deleted = db.session.query(SessionToken).filter(
        db.or_(
            SessionToken.expires_at < now,
            SessionToken.is_revoked.is_(True),
        ),
        SessionToken.created_at < cutoff,
    ).delete(synchronize_session=False)

    db.session.commit()
    return deleted
