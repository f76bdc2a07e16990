# Overview: Flask API routes for platform account administration (ADMIN only).

from flask import Blueprint, request

from ..decorators import require_auth, require_role
from ..errors import BookingError
from ..models import ROLE_ADMIN
from ..responses import error_response, internal_error, ok
from ..services import account_service, security_service
from ..services.account_service import AccountPatch
from ..validation import optional_bool, optional_int, optional_str, payload_dict, require_str


admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.post("/accounts")
@require_auth
@require_role(ROLE_ADMIN)
def create_account_route():
    """
    Create an account together with its OWNER user.

    Request body:
    {
        "business_name": "Studio Bella",
        "contact_person": "Bella Rossi",        (optional)
        "email": "info@bella.example",          (optional)
        "phone": "+90 555 000 0000",            (optional)
        "subscription_plan": "Basic",           (optional)
        "owner_username": "bella",
        "owner_email": "bella@bella.example",
        "owner_password": "secret123"
    }
    """
    try:
        data = payload_dict(request.get_json(silent=True))
        account, owner = account_service.create_account_with_owner(
            business_name=require_str(data, "business_name", max_length=200),
            contact_person=optional_str(data, "contact_person", max_length=120),
            email=optional_str(data, "email", max_length=255),
            phone=optional_str(data, "phone", max_length=32),
            subscription_plan=optional_str(data, "subscription_plan", max_length=32),
            owner_username=require_str(data, "owner_username", max_length=64),
            owner_email=require_str(data, "owner_email", max_length=255),
            owner_password=require_str(data, "owner_password"),
        )
        return ok(201, account=account.to_dict(), owner=owner.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to create account")


@admin_bp.get("/accounts")
@require_auth
@require_role(ROLE_ADMIN)
def list_accounts_route():
    try:
        accounts = account_service.list_accounts()
        return ok(accounts=[a.to_dict() for a in accounts])
    except Exception:
        return internal_error("Failed to list accounts")


@admin_bp.get("/accounts/<int:account_id>")
@require_auth
@require_role(ROLE_ADMIN)
def get_account_route(account_id: int):
    try:
        account = account_service.get_account(account_id)
        data = account.to_dict()
        data["users"] = [u.to_dict() for u in account.users]
        return ok(account=data)
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to load account")


@admin_bp.patch("/accounts/<int:account_id>")
@require_auth
@require_role(ROLE_ADMIN)
def update_account_route(account_id: int):
    try:
        data = payload_dict(request.get_json(silent=True))
        patch = AccountPatch(
            business_name=optional_str(data, "business_name", max_length=200),
            contact_person=optional_str(data, "contact_person", max_length=120),
            email=optional_str(data, "email", max_length=255),
            phone=optional_str(data, "phone", max_length=32),
            subscription_plan=optional_str(data, "subscription_plan", max_length=32),
            is_active=optional_bool(data, "is_active"),
        )
        account = account_service.update_account(account_id, patch)
        return ok(account=account.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to update account")


@admin_bp.delete("/accounts/<int:account_id>")
@require_auth
@require_role(ROLE_ADMIN)
def delete_account_route(account_id: int):
    """Delete the account with its users and every record it owns."""
    try:
        account_service.delete_account(account_id)
        return ok(message="Account deleted")
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to delete account")


@admin_bp.get("/security-events")
@require_auth
@require_role(ROLE_ADMIN)
def list_security_events_route():
    """
    Query params (all optional):
        account_id   only events of that account
        limit        max rows, default 100
    """
    try:
        args = request.args
        events = security_service.list_security_events(
            account_id=optional_int(args, "account_id", minimum=1),
            limit=optional_int(args, "limit", minimum=1) or 100,
        )
        return ok(events=[e.to_dict() for e in events])
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to list security events")
