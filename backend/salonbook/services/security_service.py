# Overview: Append-only security audit trail (cross-tenant denials, login failures).

from __future__ import annotations

from flask import has_request_context, request

from ..extensions import db
from ..models import SecurityEvent
from salonbook.time_utils import utcnow

EVENT_CROSS_TENANT_DENIED = "CROSS_TENANT_ACCESS_DENIED"
EVENT_LOGIN_FAILED = "LOGIN_FAILED"
EVENT_LOGIN_SUCCESS = "LOGIN_SUCCESS"
EVENT_LOGOUT = "LOGOUT"
EVENT_ROLE_DENIED = "ROLE_DENIED"
EVENT_USER_DEACTIVATED = "USER_DEACTIVATED"


def log_security_event(
    user_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    account_id: int | None = None,
    commit: bool = True,
) -> SecurityEvent:
    """
    Log security event to audit trail with tenant context.

    When called inside a request, the path, method, client IP and user agent
    are captured from it unless resource/action are given explicitly.

    commit=False leaves the event pending in the current transaction, for
    callers that are about to commit or roll back themselves.
    """
    ip_address = None
    user_agent = None
    if has_request_context():
        resource = resource or request.path
        action = action or request.method
        ip_address = request.remote_addr
        user_agent = request.headers.get("User-Agent")

    event = SecurityEvent(
        user_id=user_id,
        account_id=account_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow(),
    )

    db.session.add(event)
    if commit:
        db.session.commit()
    return event


def list_security_events(account_id: int | None = None, limit: int = 100) -> list[SecurityEvent]:
    query = db.session.query(SecurityEvent)
    if account_id is not None:
        query = query.filter(SecurityEvent.account_id == account_id)
    return query.order_by(SecurityEvent.occurred_at.desc(), SecurityEvent.id.desc()).limit(limit).all()
