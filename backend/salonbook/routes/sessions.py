# Overview: Flask API route for querying session records of the account.

from flask import Blueprint, request

from ..decorators import current_account_id, require_auth, require_role
from ..errors import BookingError
from ..models import ROLE_OWNER, SESSION_STATUSES
from ..responses import error_response, internal_error, ok
from ..services import session_service
from ..services.session_service import SessionFilters
from ..validation import optional_datetime, optional_int, require_choice


sessions_bp = Blueprint("sessions", __name__, url_prefix="/api/sessions")


@sessions_bp.get("")
@require_auth
@require_role(ROLE_OWNER)
def list_sessions_route():
    """
    Query params (all optional):
        start_date, end_date   inclusive ISO-8601 bounds on session_date
        staff_id, sale_id, service_id
        status                 Scheduled | Completed | Missed
    """
    try:
        args = request.args
        status = args.get("status") or None
        if status is not None:
            require_choice(status, "status", SESSION_STATUSES)

        filters = SessionFilters(
            start_date=optional_datetime(args, "start_date"),
            end_date=optional_datetime(args, "end_date"),
            staff_id=optional_int(args, "staff_id"),
            status=status,
            sale_id=optional_int(args, "sale_id"),
            service_id=optional_int(args, "service_id"),
        )
        records = session_service.get_all_sessions(current_account_id(), filters)
        return ok(sessions=[r.to_detail_dict() for r in records])
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to list sessions")
