# Overview: Tenant scoping helpers; resolve a record by id and enforce account ownership.

"""
Multi-Tenant Service: record resolution with account ownership checks.

Every record id that arrives from a caller is resolved through one of the
require_*_in_account helpers before it is read or mutated. Policy is uniform:

- the id does not resolve to a record        -> NotFoundError (404)
- the record belongs to a different account  -> ForbiddenError (403)

Clients, services, staff and appointments carry account_id directly. Sales
are scoped transitively through their client (sale -> client -> account), and
payments and session records through their sale.

Denials are written to the security_events audit trail.

USAGE:
    from salonbook.services.tenant_service import require_sale_in_account

    sale = require_sale_in_account(sale_id, account_id)
"""

from __future__ import annotations

from flask import g, has_request_context

from ..extensions import db
from ..errors import ForbiddenError, NotFoundError
from ..models import Appointment, Client, Sale, Service, Staff
from .security_service import EVENT_CROSS_TENANT_DENIED, log_security_event


def _current_user_id() -> int | None:
    if not has_request_context():
        return None
    principal = getattr(g, "principal", None)
    return principal.user_id if principal else None


def _deny(kind: str, record_id: int, owner_account_id: int, account_id: int) -> None:
    log_security_event(
        user_id=_current_user_id(),
        event_type=EVENT_CROSS_TENANT_DENIED,
        success=False,
        reason=f"{kind} {record_id} belongs to account {owner_account_id}, not {account_id}",
        account_id=account_id,
    )
    raise ForbiddenError(f"{kind} does not belong to your account")


def _require_direct(model, kind: str, record_id: int, account_id: int):
    record = db.session.get(model, record_id)
    if record is None:
        raise NotFoundError(f"{kind} not found")
    if record.account_id != account_id:
        _deny(kind, record_id, record.account_id, account_id)
    return record


def require_client_in_account(client_id: int, account_id: int) -> Client:
    return _require_direct(Client, "Client", client_id, account_id)


def require_service_in_account(service_id: int, account_id: int) -> Service:
    return _require_direct(Service, "Service", service_id, account_id)


def require_staff_in_account(staff_id: int, account_id: int) -> Staff:
    return _require_direct(Staff, "Staff", staff_id, account_id)


def require_appointment_in_account(appointment_id: int, account_id: int) -> Appointment:
    return _require_direct(Appointment, "Appointment", appointment_id, account_id)


def require_sale_in_account(sale_id: int, account_id: int) -> Sale:
    """Resolve a sale and check its client's account (sales have no account_id)."""
    sale = db.session.get(Sale, sale_id)
    if sale is None:
        raise NotFoundError("Sale not found")
    owner_account_id = sale.client.account_id
    if owner_account_id != account_id:
        _deny("Sale", sale_id, owner_account_id, account_id)
    return sale
