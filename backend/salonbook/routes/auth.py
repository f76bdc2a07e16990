# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/salonbook/routes/auth.py
"""
Authentication API routes

Login with username or email and password; the response carries a bearer
token for the Authorization header of every other call. There is no
self-registration: accounts and their owners are created by a platform
admin.
"""

from flask import Blueprint, g, request

from ..decorators import require_auth
from ..errors import AuthenticationError, BookingError, ValidationError
from ..responses import error_response, internal_error, ok
from ..services import auth_service, token_service
from ..services.security_service import (
    EVENT_LOGIN_FAILED,
    EVENT_LOGIN_SUCCESS,
    EVENT_LOGOUT,
    log_security_event,
)
from ..validation import payload_dict


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Request body:
    {
        "username": "owner1",   (or "email")
        "password": "secret123"
    }

    Returns:
        200: {success, token, expires_at, user}
        400: missing fields
        401: invalid credentials or inactive user/account
    """
    try:
        data = payload_dict(request.get_json(silent=True))
        identifier = data.get("username") or data.get("email")
        password = data.get("password")

        if not identifier or not password:
            return error_response(ValidationError("username/email and password required"))

        user = auth_service.authenticate(identifier, password)
        if not user:
            log_security_event(
                user_id=None,
                event_type=EVENT_LOGIN_FAILED,
                success=False,
                reason=f"Invalid credentials for {identifier}",
            )
            return error_response(AuthenticationError("Invalid credentials"))

        record, token = token_service.create_token(
            user,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )
        log_security_event(
            user_id=user.id,
            event_type=EVENT_LOGIN_SUCCESS,
            success=True,
            account_id=user.account_id,
        )

        return ok(
            token=token,
            expires_at=record.to_dict()["expires_at"],
            user=user.to_dict(),
        )
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Login failed")


@auth_bp.post("/logout")
@require_auth
def logout_route():
    try:
        token = request.headers["Authorization"].split(" ", 1)[1].strip()
        token_service.revoke_token(token)
        log_security_event(
            user_id=g.principal.user_id,
            event_type=EVENT_LOGOUT,
            success=True,
            account_id=g.principal.account_id,
        )
        return ok(message="Logged out")
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Logout failed")


@auth_bp.get("/me")
@require_auth
def me_route():
    user = g.current_user
    data = user.to_dict()
    data["account"] = user.account.to_dict() if user.account else None
    return ok(user=data)
