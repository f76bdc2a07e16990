# Overview: Appointment management and the completion coordinator that consumes package sessions.

"""
Appointments and the Appointment-Completion Coordinator

An appointment links to the paying customer in one of two ways:

1. client_id set: the client is known exactly.
2. client_id empty (legacy or walk-in bookings): candidate clients are found
   by taking the first-name token of customer_name (everything before the
   last space) and matching it, case-sensitively, as a substring of the
   first or last name of the account's clients, in id order.

The same candidate list drives two checks:

- booking capacity: a new Planned appointment is rejected when the customer
  already has as many upcoming Planned appointments for the service as the
  largest remaining_sessions among their open sales of that service. No
  client or no open sale means no limit.
- completion: when an appointment moves to Completed, the first open sale
  of the appointment's service (candidates in order, each candidate's sales
  newest first) gets one session consumed. The status change is committed
  first and is never undone; a failed consumption is reported back, not
  raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from flask import current_app

from ..extensions import db
from ..errors import CapacityExceededError, ValidationError
from ..models import (
    Appointment,
    Client,
    APPOINTMENT_COMPLETED,
    APPOINTMENT_PLANNED,
    APPOINTMENT_STATUSES,
)
from salonbook.time_utils import day_bounds, utcnow
from .catalog_service import search_clients_by_name
from .sale_service import find_active_sales
from .session_service import SessionUsage, use_session
from .tenant_service import (
    require_appointment_in_account,
    require_client_in_account,
    require_service_in_account,
    require_staff_in_account,
)


@dataclass
class AppointmentPatch:
    """Fields left as None are not changed. Status changes go through update_appointment_status."""
    customer_name: str | None = None
    client_id: int | None = None
    service_id: int | None = None
    staff_id: int | None = None
    appointment_date: datetime | None = None
    notes: str | None = None


@dataclass
class CompletionResult:
    appointment: Appointment
    session_consumed: bool = False
    usage: SessionUsage | None = None
    consumption_error: str | None = None

    @property
    def message(self) -> str:
        if self.usage is not None:
            return "Appointment status updated and one session was used"
        if self.consumption_error:
            return f"Appointment status updated but the session could not be recorded: {self.consumption_error}"
        if self.appointment.status == APPOINTMENT_COMPLETED:
            return "Appointment status updated; no package with remaining sessions was found"
        return "Appointment status updated"

    def to_dict(self) -> dict:
        data = {
            "appointment": self.appointment.to_dict(),
            "session_consumed": self.session_consumed,
            "message": self.message,
        }
        if self.usage is not None:
            data["sale_id"] = self.usage.sale.id
            data["remaining_sessions"] = self.usage.sale.remaining_sessions
            data["session"] = self.usage.session.to_dict()
        if self.consumption_error:
            data["consumption_error"] = self.consumption_error
        return data


# =============================================================================
# CUSTOMER MATCHING
# =============================================================================

def first_name_token(customer_name: str) -> str:
    """'Ayse Nur Yilmaz' -> 'Ayse Nur'; a single word is returned whole."""
    name = (customer_name or "").strip()
    if " " not in name:
        return name
    return name.rsplit(" ", 1)[0]


def candidate_clients(account_id: int, customer_name: str, client_id: int | None = None) -> list[Client]:
    if client_id is not None:
        return [require_client_in_account(client_id, account_id)]
    return search_clients_by_name(account_id, first_name_token(customer_name))


def _count_upcoming_planned(
    account_id: int,
    customer_name: str,
    service_id: int,
    client_id: int | None,
) -> int:
    query = db.session.query(Appointment).filter(
        Appointment.account_id == account_id,
        Appointment.service_id == service_id,
        Appointment.status == APPOINTMENT_PLANNED,
        Appointment.appointment_date >= utcnow(),
    )
    if client_id is not None:
        query = query.filter(
            db.or_(
                Appointment.client_id == client_id,
                db.and_(Appointment.client_id.is_(None), Appointment.customer_name == customer_name),
            )
        )
    else:
        query = query.filter(Appointment.customer_name == customer_name)
    return query.count()


def check_booking_capacity(
    account_id: int,
    customer_name: str,
    service_id: int,
    client_id: int | None = None,
) -> None:
    """Raise CapacityExceededError if one more Planned booking would exceed the open sessions."""
    max_remaining = 0
    for client in candidate_clients(account_id, customer_name, client_id):
        for sale in find_active_sales(client.id, service_id):
            max_remaining = max(max_remaining, sale.remaining_sessions)

    if max_remaining <= 0:
        return

    planned = _count_upcoming_planned(account_id, customer_name, service_id, client_id)
    if planned >= max_remaining:
        raise CapacityExceededError(max_remaining, planned)


# =============================================================================
# APPOINTMENTS
# =============================================================================

def create_appointment(
    account_id: int,
    *,
    customer_name: str,
    service_id: int,
    appointment_date: datetime,
    staff_id: int | None = None,
    client_id: int | None = None,
    notes: str | None = None,
    status: str | None = None,
) -> Appointment:
    status = status or APPOINTMENT_PLANNED
    if status not in APPOINTMENT_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of {', '.join(APPOINTMENT_STATUSES)}")
    if not customer_name or not customer_name.strip():
        raise ValidationError("customer_name is required")

    service = require_service_in_account(service_id, account_id)
    if staff_id is not None:
        require_staff_in_account(staff_id, account_id)
    if client_id is not None:
        require_client_in_account(client_id, account_id)

    if status == APPOINTMENT_PLANNED:
        check_booking_capacity(account_id, customer_name.strip(), service.id, client_id)

    appointment = Appointment(
        account_id=account_id,
        customer_name=customer_name.strip(),
        client_id=client_id,
        service_id=service.id,
        staff_id=staff_id,
        appointment_date=appointment_date,
        status=status,
        notes=notes,
    )
    db.session.add(appointment)
    db.session.commit()
    return appointment


def get_appointment(appointment_id: int, account_id: int) -> Appointment:
    return require_appointment_in_account(appointment_id, account_id)


def list_appointments(
    account_id: int,
    *,
    day: datetime | None = None,
    status: str | None = None,
    upcoming: bool = False,
) -> list[Appointment]:
    """
    Appointments of the account in date order.

    day restricts to that UTC day; upcoming restricts to Planned appointments
    from now on.
    """
    query = db.session.query(Appointment).filter(Appointment.account_id == account_id)

    if day is not None:
        start, end = day_bounds(day)
        query = query.filter(Appointment.appointment_date >= start, Appointment.appointment_date < end)
    if status is not None:
        if status not in APPOINTMENT_STATUSES:
            raise ValidationError(f"Invalid status. Must be one of {', '.join(APPOINTMENT_STATUSES)}")
        query = query.filter(Appointment.status == status)
    if upcoming:
        query = query.filter(
            Appointment.appointment_date >= utcnow(),
            Appointment.status == APPOINTMENT_PLANNED,
        )

    return query.order_by(Appointment.appointment_date.asc(), Appointment.id.asc()).all()


def update_appointment(appointment_id: int, account_id: int, patch: AppointmentPatch) -> Appointment:
    appointment = require_appointment_in_account(appointment_id, account_id)

    if patch.service_id is not None:
        require_service_in_account(patch.service_id, account_id)
    if patch.staff_id is not None:
        require_staff_in_account(patch.staff_id, account_id)
    if patch.client_id is not None:
        require_client_in_account(patch.client_id, account_id)

    if patch.customer_name is not None:
        if not patch.customer_name.strip():
            raise ValidationError("customer_name cannot be blank")
        appointment.customer_name = patch.customer_name.strip()
    if patch.client_id is not None:
        appointment.client_id = patch.client_id
    if patch.service_id is not None:
        appointment.service_id = patch.service_id
    if patch.staff_id is not None:
        appointment.staff_id = patch.staff_id
    if patch.appointment_date is not None:
        appointment.appointment_date = patch.appointment_date
    if patch.notes is not None:
        appointment.notes = patch.notes

    db.session.commit()
    return appointment


def delete_appointment(appointment_id: int, account_id: int) -> None:
    appointment = require_appointment_in_account(appointment_id, account_id)
    db.session.delete(appointment)
    db.session.commit()


# =============================================================================
# COMPLETION COORDINATOR
# =============================================================================

def _consume_for_appointment(appointment: Appointment, account_id: int) -> SessionUsage | None:
    """Consume one session of the first matching open sale; None if there is none."""
    candidates = candidate_clients(account_id, appointment.customer_name, appointment.client_id)
    for client in candidates:
        sales = find_active_sales(client.id, appointment.service_id)
        if sales:
            return use_session(sales[0].id, account_id, staff_id=appointment.staff_id)
    return None


def update_appointment_status(appointment_id: int, account_id: int, status: str) -> CompletionResult:
    """
    Change an appointment's status.

    Only a transition into Completed consumes a session; re-saving an already
    Completed appointment does not. Consumption failures are logged and
    returned in the result; the status change stays committed.
    """
    if status not in APPOINTMENT_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of {', '.join(APPOINTMENT_STATUSES)}")

    appointment = require_appointment_in_account(appointment_id, account_id)
    previous = appointment.status
    appointment.status = status
    db.session.commit()

    result = CompletionResult(appointment=appointment)
    if status != APPOINTMENT_COMPLETED or previous == APPOINTMENT_COMPLETED:
        return result

    try:
        usage = _consume_for_appointment(appointment, account_id)
    except Exception as exc:
        db.session.rollback()
        current_app.logger.warning(
            "Appointment %s completed but session consumption failed",
            appointment.id,
            exc_info=True,
        )
        result.consumption_error = getattr(exc, "message", None) or str(exc)
        return result

    if usage is not None:
        result.usage = usage
        result.session_consumed = True
    return result
