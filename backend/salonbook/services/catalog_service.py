# Overview: Reference records of an account; services, clients and staff.

from __future__ import annotations

import re
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import ConflictError, ValidationError
from ..models import Appointment, Client, Sale, Service, Staff, WorkingHours
from .tenant_service import (
    require_client_in_account,
    require_service_in_account,
    require_staff_in_account,
)


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

@dataclass
class ServicePatch:
    service_name: str | None = None
    description: str | None = None
    price_cents: int | None = None
    duration_minutes: int | None = None
    session_count: int | None = None


def create_service(
    account_id: int,
    *,
    service_name: str,
    price_cents: int,
    description: str | None = None,
    duration_minutes: int | None = None,
    session_count: int | None = None,
) -> Service:
    if duration_minutes is not None and duration_minutes <= 0:
        raise ValidationError("duration_minutes must be greater than 0")
    if session_count is not None and session_count <= 0:
        raise ValidationError("session_count must be greater than 0")

    service = Service(
        account_id=account_id,
        service_name=service_name,
        description=description,
        price_cents=price_cents,
        duration_minutes=duration_minutes or 60,
        session_count=session_count or 1,
    )
    db.session.add(service)
    db.session.commit()
    return service


def list_services(account_id: int) -> list[Service]:
    return (
        db.session.query(Service)
        .filter(Service.account_id == account_id)
        .order_by(Service.service_name, Service.id)
        .all()
    )


def get_service(service_id: int, account_id: int) -> Service:
    return require_service_in_account(service_id, account_id)


def update_service(service_id: int, account_id: int, patch: ServicePatch) -> Service:
    service = require_service_in_account(service_id, account_id)

    if patch.service_name is not None:
        service.service_name = patch.service_name
    if patch.description is not None:
        service.description = patch.description
    if patch.price_cents is not None:
        service.price_cents = patch.price_cents
    if patch.duration_minutes is not None:
        if patch.duration_minutes <= 0:
            raise ValidationError("duration_minutes must be greater than 0")
        service.duration_minutes = patch.duration_minutes
    if patch.session_count is not None:
        # Existing sales keep their own remaining_sessions.
        if patch.session_count <= 0:
            raise ValidationError("session_count must be greater than 0")
        service.session_count = patch.session_count

    db.session.commit()
    return service


def delete_service(service_id: int, account_id: int) -> None:
    """Services referenced by sales or appointments cannot be deleted."""
    service = require_service_in_account(service_id, account_id)

    in_use = (
        db.session.query(Sale.id).filter(Sale.service_id == service.id).first()
        or db.session.query(Appointment.id).filter(Appointment.service_id == service.id).first()
    )
    if in_use:
        raise ConflictError("Service is referenced by sales or appointments")

    db.session.delete(service)
    db.session.commit()


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------

@dataclass
class ClientPatch:
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    notes: str | None = None


def _check_client_unique(account_id: int, email: str | None, phone: str | None, exclude_id: int | None = None) -> None:
    query = db.session.query(Client).filter(Client.account_id == account_id)
    if exclude_id is not None:
        query = query.filter(Client.id != exclude_id)

    if email and query.filter(Client.email == email).first():
        raise ConflictError("A client with this email already exists")
    if phone and query.filter(Client.phone == phone).first():
        raise ConflictError("A client with this phone number already exists")


def _commit_client() -> None:
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("A client with this email or phone already exists")


def create_client(
    account_id: int,
    *,
    first_name: str,
    last_name: str,
    email: str,
    phone: str,
    notes: str | None = None,
) -> Client:
    _check_client_unique(account_id, email, phone)

    client = Client(
        account_id=account_id,
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        notes=notes,
    )
    db.session.add(client)
    _commit_client()
    return client


def list_clients(account_id: int) -> list[Client]:
    return (
        db.session.query(Client)
        .filter(Client.account_id == account_id)
        .order_by(Client.created_at.desc(), Client.id.desc())
        .all()
    )


def get_client(client_id: int, account_id: int) -> Client:
    return require_client_in_account(client_id, account_id)


def update_client(client_id: int, account_id: int, patch: ClientPatch) -> Client:
    client = require_client_in_account(client_id, account_id)
    _check_client_unique(account_id, patch.email, patch.phone, exclude_id=client.id)

    if patch.first_name is not None:
        client.first_name = patch.first_name
    if patch.last_name is not None:
        client.last_name = patch.last_name
    if patch.email is not None:
        client.email = patch.email
    if patch.phone is not None:
        client.phone = patch.phone
    if patch.notes is not None:
        client.notes = patch.notes

    _commit_client()
    return client


def search_clients_by_name(account_id: int, fragment: str) -> list[Client]:
    """
    Clients whose first or last name contains `fragment`, ordered by id.

    Matching is case-sensitive and done in Python so that it behaves the same
    on every database backend (SQLite LIKE is case-insensitive for ASCII).
    """
    if not fragment:
        return []
    clients = (
        db.session.query(Client)
        .filter(Client.account_id == account_id)
        .order_by(Client.id)
        .all()
    )
    return [c for c in clients if fragment in c.first_name or fragment in c.last_name]


# ---------------------------------------------------------------------------
# Staff
# ---------------------------------------------------------------------------

@dataclass
class StaffPatch:
    full_name: str | None = None
    role: str | None = None
    email: str | None = None
    phone: str | None = None
    is_active: bool | None = None


def create_staff(
    account_id: int,
    *,
    full_name: str,
    role: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    is_active: bool | None = None,
    user_id: int | None = None,
) -> Staff:
    staff = Staff(
        account_id=account_id,
        user_id=user_id,
        full_name=full_name,
        role=role,
        email=email,
        phone=phone,
        is_active=True if is_active is None else is_active,
    )
    db.session.add(staff)
    db.session.commit()
    return staff


def list_staff(account_id: int, active_only: bool = False) -> list[Staff]:
    query = db.session.query(Staff).filter(Staff.account_id == account_id)
    if active_only:
        query = query.filter(Staff.is_active.is_(True))
    return query.order_by(Staff.full_name, Staff.id).all()


def get_staff(staff_id: int, account_id: int) -> Staff:
    return require_staff_in_account(staff_id, account_id)


def update_staff(staff_id: int, account_id: int, patch: StaffPatch) -> Staff:
    staff = require_staff_in_account(staff_id, account_id)

    if patch.full_name is not None:
        staff.full_name = patch.full_name
    if patch.role is not None:
        staff.role = patch.role
    if patch.email is not None:
        staff.email = patch.email
    if patch.phone is not None:
        staff.phone = patch.phone
    if patch.is_active is not None:
        staff.is_active = patch.is_active

    db.session.commit()
    return staff


# ---------------------------------------------------------------------------
# Working hours
# ---------------------------------------------------------------------------

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


@dataclass
class WorkingHoursEntry:
    day_of_week: int
    start_time: str
    end_time: str
    is_working: bool = True


def _check_working_hours(hours: list[WorkingHoursEntry]) -> None:
    seen: set[int] = set()
    for entry in hours:
        if not 0 <= entry.day_of_week <= 6:
            raise ValidationError("day_of_week must be between 0 (Sunday) and 6 (Saturday)")
        if entry.day_of_week in seen:
            raise ValidationError(f"day_of_week {entry.day_of_week} is listed more than once")
        seen.add(entry.day_of_week)

        for value in (entry.start_time, entry.end_time):
            if not isinstance(value, str) or not _HHMM.match(value):
                raise ValidationError("start_time and end_time must be HH:MM")
        # Zero-padded HH:MM strings compare in clock order.
        if entry.is_working and entry.start_time >= entry.end_time:
            raise ValidationError("start_time must be before end_time")


def set_working_hours(staff_id: int, account_id: int, hours: list[WorkingHoursEntry]) -> Staff:
    """
    Replace the whole weekly schedule of a staff member.

    Every entry is validated before anything is written; days missing from
    `hours` end up with no row.
    """
    staff = require_staff_in_account(staff_id, account_id)
    _check_working_hours(hours)

    try:
        staff.working_hours = []
        db.session.flush()
        staff.working_hours = [
            WorkingHours(
                day_of_week=entry.day_of_week,
                start_time=entry.start_time,
                end_time=entry.end_time,
                is_working=entry.is_working,
            )
            for entry in hours
        ]
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return staff
