# Overview: Flask API routes for the sale ledger, payments and session use.

# backend/salonbook/routes/sales.py
"""
Sale Ledger API

- POST   /api/sales                      create a package sale
- GET    /api/sales                      all sales of the account, newest first
- GET    /api/sales/<id>                 sale with client, service and payments
- PATCH  /api/sales/<id>                 correct sale_date / remaining_sessions
- DELETE /api/sales/<id>                 delete with payments and sessions
- POST   /api/sales/<id>/payments        record a payment
- GET    /api/sales/<id>/payments        payments + total price/paid/remaining
- POST   /api/sales/<id>/use-session     consume one session
"""

from flask import Blueprint, request

from ..decorators import current_account_id, require_auth, require_role
from ..errors import BookingError
from ..models import PAYMENT_METHODS, ROLE_OWNER
from ..responses import error_response, internal_error, ok
from ..services import sale_service, session_service
from ..services.sale_service import SalePatch
from ..validation import (
    optional_datetime,
    optional_int,
    optional_str,
    payload_dict,
    require_choice,
    require_int,
    require_positive_cents,
)


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
@require_auth
@require_role(ROLE_OWNER)
def create_sale_route():
    """
    Request body:
    {
        "client_id": 7,
        "service_id": 3,
        "remaining_sessions": 5,             (optional, default: service session_count)
        "sale_date": "2026-04-01T09:00:00Z"  (optional, default: now)
    }
    """
    try:
        data = payload_dict(request.get_json(silent=True))
        sale = sale_service.create_sale(
            current_account_id(),
            client_id=require_int(data, "client_id", minimum=1),
            service_id=require_int(data, "service_id", minimum=1),
            remaining_sessions=optional_int(data, "remaining_sessions", minimum=0),
            sale_date=optional_datetime(data, "sale_date"),
        )
        return ok(201, sale=sale.to_dict(include_payments=True))
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to create sale")


@sales_bp.get("")
@require_auth
@require_role(ROLE_OWNER)
def list_sales_route():
    try:
        sales = sale_service.list_sales_for_account(current_account_id())
        return ok(sales=[s.to_dict(include_payments=True) for s in sales])
    except Exception:
        return internal_error("Failed to list sales")


@sales_bp.get("/<int:sale_id>")
@require_auth
@require_role(ROLE_OWNER)
def get_sale_route(sale_id: int):
    try:
        sale = sale_service.get_sale(sale_id, current_account_id())
        return ok(sale=sale.to_dict(include_payments=True))
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to load sale")


@sales_bp.patch("/<int:sale_id>")
@require_auth
@require_role(ROLE_OWNER)
def update_sale_route(sale_id: int):
    """Administrative correction: {"sale_date"?, "remaining_sessions"?}."""
    try:
        data = payload_dict(request.get_json(silent=True))
        patch = SalePatch(
            sale_date=optional_datetime(data, "sale_date"),
            remaining_sessions=optional_int(data, "remaining_sessions", minimum=0),
        )
        sale = sale_service.update_sale(sale_id, current_account_id(), patch)
        return ok(sale=sale.to_dict(include_payments=True))
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to update sale")


@sales_bp.delete("/<int:sale_id>")
@require_auth
@require_role(ROLE_OWNER)
def delete_sale_route(sale_id: int):
    try:
        sale_service.delete_sale(sale_id, current_account_id())
        return ok(message="Sale deleted")
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to delete sale")


# =============================================================================
# PAYMENTS
# =============================================================================

@sales_bp.post("/<int:sale_id>/payments")
@require_auth
@require_role(ROLE_OWNER)
def create_payment_route(sale_id: int):
    """
    Request body:
    {
        "amount_paid_cents": 10000,
        "payment_method": "Cash",      (Cash | CreditCard | Transfer | Other)
        "notes": "deposit"             (optional)
    }
    """
    try:
        data = payload_dict(request.get_json(silent=True))
        payment = sale_service.create_payment(
            sale_id,
            current_account_id(),
            amount_paid_cents=require_positive_cents(data, "amount_paid_cents"),
            payment_method=require_choice(data.get("payment_method"), "payment_method", PAYMENT_METHODS),
            notes=optional_str(data, "notes"),
            payment_date=optional_datetime(data, "payment_date"),
        )
        return ok(201, payment=payment.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to create payment")


@sales_bp.get("/<int:sale_id>/payments")
@require_auth
@require_role(ROLE_OWNER)
def list_payments_route(sale_id: int):
    try:
        summary = sale_service.get_sale_payments(sale_id, current_account_id())
        return ok(**summary.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to load sale payments")


# =============================================================================
# SESSION USE
# =============================================================================

@sales_bp.post("/<int:sale_id>/use-session")
@require_auth
@require_role(ROLE_OWNER)
def use_session_route(sale_id: int):
    """
    Request body (all optional):
    {
        "staff_id": 2,
        "session_date": "2026-04-10T15:00:00Z",
        "notes": "..."
    }

    Returns:
        200: {remaining_sessions, sale, session}
        400: no sessions remaining
        404: sale not found
    """
    try:
        data = payload_dict(request.get_json(silent=True))
        usage = session_service.use_session(
            sale_id,
            current_account_id(),
            staff_id=optional_int(data, "staff_id", minimum=1),
            session_date=optional_datetime(data, "session_date"),
            notes=optional_str(data, "notes"),
        )
        return ok(message="Session used", **usage.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to use session")
