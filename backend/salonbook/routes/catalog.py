# Overview: Flask API routes for an account's services, clients and staff.

from flask import Blueprint, request

from ..decorators import current_account_id, require_auth, require_role
from ..errors import BookingError, ValidationError
from ..models import ROLE_OWNER
from ..responses import error_response, internal_error, ok
from ..services import catalog_service, sale_service
from ..services.catalog_service import ClientPatch, ServicePatch, StaffPatch, WorkingHoursEntry
from ..validation import (
    optional_bool,
    optional_cents,
    optional_int,
    optional_str,
    payload_dict,
    require_int,
    require_positive_cents,
    require_str,
)


services_bp = Blueprint("services", __name__, url_prefix="/api/services")
clients_bp = Blueprint("clients", __name__, url_prefix="/api/clients")
staff_bp = Blueprint("staff", __name__, url_prefix="/api/staff")


# =============================================================================
# SERVICES
# =============================================================================

@services_bp.post("")
@require_auth
@require_role(ROLE_OWNER)
def create_service_route():
    """
    Request body:
    {
        "service_name": "Laser hair removal",
        "price_cents": 50000,
        "session_count": 5,          (optional, default 1)
        "duration_minutes": 45,      (optional, default 60)
        "description": "..."         (optional)
    }
    """
    try:
        data = payload_dict(request.get_json(silent=True))
        service = catalog_service.create_service(
            current_account_id(),
            service_name=require_str(data, "service_name", max_length=200),
            price_cents=require_positive_cents(data, "price_cents"),
            description=optional_str(data, "description"),
            duration_minutes=optional_int(data, "duration_minutes", minimum=1),
            session_count=optional_int(data, "session_count", minimum=1),
        )
        return ok(201, service=service.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to create service")


@services_bp.get("")
@require_auth
@require_role(ROLE_OWNER)
def list_services_route():
    try:
        services = catalog_service.list_services(current_account_id())
        return ok(services=[s.to_dict() for s in services])
    except Exception:
        return internal_error("Failed to list services")


@services_bp.get("/<int:service_id>")
@require_auth
@require_role(ROLE_OWNER)
def get_service_route(service_id: int):
    try:
        service = catalog_service.get_service(service_id, current_account_id())
        return ok(service=service.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to load service")


@services_bp.patch("/<int:service_id>")
@require_auth
@require_role(ROLE_OWNER)
def update_service_route(service_id: int):
    try:
        data = payload_dict(request.get_json(silent=True))
        patch = ServicePatch(
            service_name=optional_str(data, "service_name", max_length=200),
            description=optional_str(data, "description"),
            price_cents=optional_cents(data, "price_cents"),
            duration_minutes=optional_int(data, "duration_minutes", minimum=1),
            session_count=optional_int(data, "session_count", minimum=1),
        )
        service = catalog_service.update_service(service_id, current_account_id(), patch)
        return ok(service=service.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to update service")


@services_bp.delete("/<int:service_id>")
@require_auth
@require_role(ROLE_OWNER)
def delete_service_route(service_id: int):
    try:
        catalog_service.delete_service(service_id, current_account_id())
        return ok(message="Service deleted")
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to delete service")


# =============================================================================
# CLIENTS
# =============================================================================

@clients_bp.post("")
@require_auth
@require_role(ROLE_OWNER)
def create_client_route():
    """
    Request body:
    {
        "first_name": "Ayse",
        "last_name": "Yilmaz",
        "email": "ayse@example.com",
        "phone": "+90 555 111 2233",
        "notes": "..."               (optional)
    }

    Email and phone are unique within the account (409 on conflict).
    """
    try:
        data = payload_dict(request.get_json(silent=True))
        client = catalog_service.create_client(
            current_account_id(),
            first_name=require_str(data, "first_name", max_length=100),
            last_name=require_str(data, "last_name", max_length=100),
            email=require_str(data, "email", max_length=255),
            phone=require_str(data, "phone", max_length=32),
            notes=optional_str(data, "notes"),
        )
        return ok(201, client=client.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to create client")


@clients_bp.get("")
@require_auth
@require_role(ROLE_OWNER)
def list_clients_route():
    """?q=<fragment> searches first and last names."""
    try:
        fragment = (request.args.get("q") or "").strip()
        if fragment:
            clients = catalog_service.search_clients_by_name(current_account_id(), fragment)
        else:
            clients = catalog_service.list_clients(current_account_id())
        return ok(clients=[c.to_dict() for c in clients])
    except Exception:
        return internal_error("Failed to list clients")


@clients_bp.get("/<int:client_id>")
@require_auth
@require_role(ROLE_OWNER)
def get_client_route(client_id: int):
    try:
        client = catalog_service.get_client(client_id, current_account_id())
        return ok(client=client.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to load client")


@clients_bp.patch("/<int:client_id>")
@require_auth
@require_role(ROLE_OWNER)
def update_client_route(client_id: int):
    try:
        data = payload_dict(request.get_json(silent=True))
        patch = ClientPatch(
            first_name=optional_str(data, "first_name", max_length=100),
            last_name=optional_str(data, "last_name", max_length=100),
            email=optional_str(data, "email", max_length=255),
            phone=optional_str(data, "phone", max_length=32),
            notes=optional_str(data, "notes"),
        )
        client = catalog_service.update_client(client_id, current_account_id(), patch)
        return ok(client=client.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to update client")


@clients_bp.get("/<int:client_id>/sales")
@require_auth
@require_role(ROLE_OWNER)
def list_client_sales_route(client_id: int):
    try:
        sales = sale_service.list_sales_for_client(client_id, current_account_id())
        return ok(sales=[s.to_dict(include_payments=True) for s in sales])
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to list client sales")


@clients_bp.get("/<int:client_id>/remaining-sessions")
@require_auth
@require_role(ROLE_OWNER)
def client_remaining_sessions_route(client_id: int):
    try:
        rows = sale_service.get_remaining_sessions_for_client(client_id, current_account_id())
        return ok(remaining_sessions=rows)
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to load remaining sessions")


# =============================================================================
# STAFF
# =============================================================================

@staff_bp.post("")
@require_auth
@require_role(ROLE_OWNER)
def create_staff_route():
    try:
        data = payload_dict(request.get_json(silent=True))
        staff = catalog_service.create_staff(
            current_account_id(),
            full_name=require_str(data, "full_name", max_length=200),
            role=optional_str(data, "role", max_length=64),
            email=optional_str(data, "email", max_length=255),
            phone=optional_str(data, "phone", max_length=32),
            is_active=optional_bool(data, "is_active"),
        )
        return ok(201, staff=staff.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to create staff")


@staff_bp.get("")
@require_auth
@require_role(ROLE_OWNER)
def list_staff_route():
    """?active=1 lists active staff only."""
    try:
        active_only = request.args.get("active") in {"1", "true"}
        staff = catalog_service.list_staff(current_account_id(), active_only=active_only)
        return ok(staff=[s.to_dict() for s in staff])
    except Exception:
        return internal_error("Failed to list staff")


@staff_bp.get("/<int:staff_id>")
@require_auth
@require_role(ROLE_OWNER)
def get_staff_route(staff_id: int):
    try:
        staff = catalog_service.get_staff(staff_id, current_account_id())
        return ok(staff=staff.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to load staff")


@staff_bp.patch("/<int:staff_id>")
@require_auth
@require_role(ROLE_OWNER)
def update_staff_route(staff_id: int):
    try:
        data = payload_dict(request.get_json(silent=True))
        patch = StaffPatch(
            full_name=optional_str(data, "full_name", max_length=200),
            role=optional_str(data, "role", max_length=64),
            email=optional_str(data, "email", max_length=255),
            phone=optional_str(data, "phone", max_length=32),
            is_active=optional_bool(data, "is_active"),
        )
        staff = catalog_service.update_staff(staff_id, current_account_id(), patch)
        return ok(staff=staff.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to update staff")


@staff_bp.put("/<int:staff_id>/working-hours")
@require_auth
@require_role(ROLE_OWNER)
def set_working_hours_route(staff_id: int):
    """
    Replace the staff member's weekly schedule.

    Request body:
    {
        "working_hours": [
            {"day_of_week": 1, "start_time": "09:00", "end_time": "17:00", "is_working": true},
            {"day_of_week": 0, "start_time": "00:00", "end_time": "00:00", "is_working": false}
        ]
    }
    day_of_week: 0 = Sunday .. 6 = Saturday
    """
    try:
        data = payload_dict(request.get_json(silent=True))
        rows = data.get("working_hours")
        if not isinstance(rows, list):
            raise ValidationError("working_hours must be a list")

        entries = []
        for row in rows:
            row = payload_dict(row)
            is_working = optional_bool(row, "is_working")
            entries.append(WorkingHoursEntry(
                day_of_week=require_int(row, "day_of_week", minimum=0),
                start_time=require_str(row, "start_time", max_length=5),
                end_time=require_str(row, "end_time", max_length=5),
                is_working=True if is_working is None else is_working,
            ))

        staff = catalog_service.set_working_hours(staff_id, current_account_id(), entries)
        return ok(staff=staff.to_dict())
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to set working hours")
