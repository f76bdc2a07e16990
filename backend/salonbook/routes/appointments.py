# Overview: Flask API routes for appointments; status changes run the completion coordinator.

from flask import Blueprint, request

from ..decorators import current_account_id, require_auth, require_role
from ..errors import BookingError, ValidationError
from ..models import APPOINTMENT_STATUSES, ROLE_OWNER
from ..responses import error_response, internal_error, ok
from ..services import appointment_service
from ..services.appointment_service import AppointmentPatch
from ..validation import (
    optional_datetime,
    optional_int,
    optional_str,
    payload_dict,
    require_choice,
    require_datetime,
    require_int,
    require_str,
)


appointments_bp = Blueprint("appointments", __name__, url_prefix="/api/appointments")


@appointments_bp.post("")
@require_auth
@require_role(ROLE_OWNER)
def create_appointment_route():
    """
    Request body:
    {
        "customer_name": "Ayse Yilmaz",
        "service_id": 3,
        "appointment_date": "2026-05-01T10:00:00Z",
        "client_id": 7,        (optional, links the booking to a client)
        "staff_id": 2,         (optional)
        "notes": "...",        (optional)
        "status": "Planned"    (optional)
    }

    Returns:
        201: appointment created
        400: invalid input, or the customer already has as many upcoming
             bookings for the service as sessions left
        403/404: service, staff or client not in this account
    """
    try:
        data = payload_dict(request.get_json(silent=True))
        status = data.get("status")
        if status is not None:
            require_choice(status, "status", APPOINTMENT_STATUSES)

        appointment = appointment_service.create_appointment(
            current_account_id(),
            customer_name=require_str(data, "customer_name", max_length=200),
            service_id=require_int(data, "service_id", minimum=1),
            appointment_date=require_datetime(data, "appointment_date"),
            staff_id=optional_int(data, "staff_id", minimum=1),
            client_id=optional_int(data, "client_id", minimum=1),
            notes=optional_str(data, "notes"),
            status=status,
        )
        return ok(201, message="Appointment created", appointment=appointment.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to create appointment")


@appointments_bp.get("")
@require_auth
@require_role(ROLE_OWNER)
def list_appointments_route():
    """
    Query params (all optional):
        date=YYYY-MM-DD   appointments on that day
        status=Planned    exact status
        upcoming=1        Planned appointments from now on
    """
    try:
        args = request.args
        day = optional_datetime(args, "date")
        status = args.get("status") or None
        if status is not None:
            require_choice(status, "status", APPOINTMENT_STATUSES)
        upcoming = args.get("upcoming") in {"1", "true"}

        appointments = appointment_service.list_appointments(
            current_account_id(),
            day=day,
            status=status,
            upcoming=upcoming,
        )
        return ok(appointments=[a.to_dict() for a in appointments])
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to list appointments")


@appointments_bp.get("/<int:appointment_id>")
@require_auth
@require_role(ROLE_OWNER)
def get_appointment_route(appointment_id: int):
    try:
        appointment = appointment_service.get_appointment(appointment_id, current_account_id())
        return ok(appointment=appointment.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to load appointment")


@appointments_bp.patch("/<int:appointment_id>")
@require_auth
@require_role(ROLE_OWNER)
def update_appointment_route(appointment_id: int):
    """Edits booking fields. Use PATCH /<id>/status to change the status."""
    try:
        data = payload_dict(request.get_json(silent=True))
        if "status" in data:
            raise ValidationError("Use the status endpoint to change an appointment's status")

        patch = AppointmentPatch(
            customer_name=optional_str(data, "customer_name", max_length=200),
            client_id=optional_int(data, "client_id", minimum=1),
            service_id=optional_int(data, "service_id", minimum=1),
            staff_id=optional_int(data, "staff_id", minimum=1),
            appointment_date=optional_datetime(data, "appointment_date"),
            notes=optional_str(data, "notes"),
        )
        appointment = appointment_service.update_appointment(appointment_id, current_account_id(), patch)
        return ok(appointment=appointment.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to update appointment")


@appointments_bp.delete("/<int:appointment_id>")
@require_auth
@require_role(ROLE_OWNER)
def delete_appointment_route(appointment_id: int):
    try:
        appointment_service.delete_appointment(appointment_id, current_account_id())
        return ok(message="Appointment deleted")
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to delete appointment")


@appointments_bp.patch("/<int:appointment_id>/status")
@require_auth
@require_role(ROLE_OWNER)
def update_appointment_status_route(appointment_id: int):
    """
    Request body: {"status": "Completed"}

    Moving to Completed consumes one session of the customer's matching
    package. The response says whether that happened; a failed consumption
    does not fail the request.
    """
    try:
        data = payload_dict(request.get_json(silent=True))
        status = require_choice(data.get("status"), "status", APPOINTMENT_STATUSES)

        result = appointment_service.update_appointment_status(appointment_id, current_account_id(), status)
        return ok(**result.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to update appointment status")
