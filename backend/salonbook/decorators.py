# Overview: Request authentication and role decorators for API routes.

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps

from flask import g, jsonify, request

from .models import ROLE_ADMIN
from .services import token_service
from .services.security_service import EVENT_ROLE_DENIED, log_security_event


@dataclass(frozen=True)
class Principal:
    """Who is calling: resolved once per request by require_auth."""
    user_id: int
    role: str
    account_id: int | None


def require_auth(f):
    """
    Require a valid bearer token and establish the request principal.

    Sets:
    - g.principal: Principal(user_id, role, account_id)
    - g.current_user: the authenticated User
    - g.token: the SessionToken record

    Returns 401 if the header is missing or the token is invalid, expired,
    revoked, or belongs to a deactivated user/account.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"success": False, "message": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1].strip()
        context = token_service.validate_token(token)

        if not context:
            return jsonify({"success": False, "message": "Invalid or expired token"}), 401

        g.current_user = context.user
        g.token = context.token
        g.principal = Principal(
            user_id=context.user.id,
            role=context.user.role,
            account_id=context.account_id,
        )
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """
    Require the principal to hold one of `roles`. Use below @require_auth.

    Tenant roles must also carry an account; a tenant-role token without one
    is treated as unauthenticated.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            principal = getattr(g, "principal", None)
            if principal is None:
                return jsonify({"success": False, "message": "Authentication required"}), 401
            if principal.role != ROLE_ADMIN and principal.account_id is None:
                return jsonify({"success": False, "message": "Invalid session: missing account context"}), 401

            if principal.role not in roles:
                log_security_event(
                    user_id=principal.user_id,
                    event_type=EVENT_ROLE_DENIED,
                    success=False,
                    reason=f"Role {principal.role} not in {', '.join(roles)}",
                    account_id=principal.account_id,
                )
                return jsonify({"success": False, "message": "Access denied"}), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def current_account_id() -> int:
    """Account of the calling tenant user (after @require_role(OWNER/EMPLOYEE))."""
    return g.principal.account_id
