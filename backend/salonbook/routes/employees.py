# Overview: Flask API routes for owner-managed employee logins.

from flask import Blueprint, request

from ..decorators import current_account_id, require_auth, require_role
from ..errors import BookingError
from ..models import ROLE_OWNER
from ..responses import error_response, internal_error, ok
from ..services import employee_service
from ..services.employee_service import EmployeePatch
from ..validation import optional_str, payload_dict, require_str


employees_bp = Blueprint("employees", __name__, url_prefix="/api/employees")


def _employee_dict(staff) -> dict:
    data = staff.to_dict()
    data["user"] = staff.user.to_dict()
    return data


@employees_bp.post("")
@require_auth
@require_role(ROLE_OWNER)
def create_employee_route():
    """
    Create an EMPLOYEE login and its staff record.

    Request body:
    {
        "username": "elif",
        "email": "elif@studio.example",
        "password": "secret123",
        "phone": "+90 555 000 0001",     (optional)
        "full_name": "Elif Kaya",        (optional, defaults to username)
        "role": "Therapist"              (optional staff role, default "Staff")
    }
    """
    try:
        data = payload_dict(request.get_json(silent=True))
        staff = employee_service.create_employee(
            current_account_id(),
            username=require_str(data, "username", max_length=64),
            email=require_str(data, "email", max_length=255),
            password=require_str(data, "password"),
            phone=optional_str(data, "phone", max_length=32),
            full_name=optional_str(data, "full_name", max_length=200),
            staff_role=optional_str(data, "role", max_length=64),
        )
        return ok(201, employee=_employee_dict(staff))
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to create employee")


@employees_bp.get("")
@require_auth
@require_role(ROLE_OWNER)
def list_employees_route():
    try:
        employees = employee_service.list_employees(current_account_id())
        return ok(employees=[_employee_dict(s) for s in employees])
    except Exception:
        return internal_error("Failed to list employees")


@employees_bp.get("/<int:staff_id>")
@require_auth
@require_role(ROLE_OWNER)
def get_employee_route(staff_id: int):
    try:
        staff = employee_service.get_employee(staff_id, current_account_id())
        return ok(employee=_employee_dict(staff))
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to load employee")


@employees_bp.patch("/<int:staff_id>")
@require_auth
@require_role(ROLE_OWNER)
def update_employee_route(staff_id: int):
    try:
        data = payload_dict(request.get_json(silent=True))
        patch = EmployeePatch(
            username=optional_str(data, "username", max_length=64),
            email=optional_str(data, "email", max_length=255),
            phone=optional_str(data, "phone", max_length=32),
            password=optional_str(data, "password"),
            full_name=optional_str(data, "full_name", max_length=200),
        )
        staff = employee_service.update_employee(staff_id, current_account_id(), patch)
        return ok(employee=_employee_dict(staff))
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to update employee")


@employees_bp.delete("/<int:staff_id>")
@require_auth
@require_role(ROLE_OWNER)
def delete_employee_route(staff_id: int):
    try:
        employee_service.delete_employee(staff_id, current_account_id())
        return ok(message="Employee removed")
    except BookingError as e:
        return error_response(e)
    except Exception:
        return internal_error("Failed to delete employee")
