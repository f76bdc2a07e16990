# Overview: Session recorder; consume one session of a sale and query session records.

"""
Session Recorder

use_session is the only code path that decrements Sale.remaining_sessions.
The decrement is a single conditional UPDATE (remaining_sessions > 0) issued
in the same transaction that inserts the SessionRecord, so:

- two concurrent calls against a sale with one session left cannot both win;
  the loser sees rowcount 0 and gets NoSessionsRemainingError
- if inserting the record fails, the decrement is rolled back with it

Staff attribution is best effort: an unknown staff id, or one that belongs to
another account, is dropped (recorded as NULL) with a warning in the log.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from flask import current_app

from ..extensions import db
from ..errors import NoSessionsRemainingError, ValidationError
from ..models import Client, Sale, SessionRecord, Staff, SESSION_COMPLETED, SESSION_STATUSES
from salonbook.time_utils import utcnow
from .concurrency import conditional_decrement, run_with_retry
from .tenant_service import require_sale_in_account


@dataclass
class SessionUsage:
    sale: Sale
    session: SessionRecord

    def to_dict(self) -> dict:
        return {
            "remaining_sessions": self.sale.remaining_sessions,
            "sale": self.sale.to_dict(),
            "session": self.session.to_dict(),
        }


@dataclass
class SessionFilters:
    start_date: datetime | None = None
    end_date: datetime | None = None
    staff_id: int | None = None
    status: str | None = None
    sale_id: int | None = None
    service_id: int | None = None


def _resolve_staff_id(staff_id: int | None, account_id: int) -> int | None:
    if staff_id is None:
        return None
    staff = db.session.get(Staff, staff_id)
    if staff is None:
        current_app.logger.warning(
            "Staff %s not found; recording session without staff", staff_id
        )
        return None
    if staff.account_id != account_id:
        current_app.logger.warning(
            "Staff %s belongs to account %s, not %s; recording session without staff",
            staff_id, staff.account_id, account_id,
        )
        return None
    return staff.id


def _build_session_record(
    sale_id: int,
    staff_id: int | None,
    session_date: datetime,
    notes: str,
) -> SessionRecord:
    return SessionRecord(
        sale_id=sale_id,
        staff_id=staff_id,
        session_date=session_date,
        status=SESSION_COMPLETED,
        notes=notes,
    )


def use_session(
    sale_id: int,
    account_id: int,
    staff_id: int | None = None,
    session_date: datetime | None = None,
    notes: str | None = None,
) -> SessionUsage:
    """
    Consume one session of a sale.

    Raises NotFoundError / ForbiddenError for an unknown or foreign sale and
    NoSessionsRemainingError when the counter is already 0. On any failure
    the transaction is rolled back: no record is written and the counter is
    unchanged.
    """
    sale = require_sale_in_account(sale_id, account_id)
    resolved_staff_id = _resolve_staff_id(staff_id, account_id)
    when = session_date or utcnow()
    note = notes or current_app.config.get("DEFAULT_SESSION_NOTE", "Session completed")

    def _op():
        try:
            updated = conditional_decrement(Sale, sale.id, Sale.remaining_sessions)
            if updated != 1:
                raise NoSessionsRemainingError(sale.id)

            record = _build_session_record(sale.id, resolved_staff_id, when, note)
            db.session.add(record)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return record

    record = run_with_retry(_op)

    # The UPDATE bypassed the identity map; reload the counter and version.
    db.session.refresh(sale)
    return SessionUsage(sale=sale, session=record)


def get_all_sessions(account_id: int, filters: SessionFilters | None = None) -> list[SessionRecord]:
    """
    Session records of the account, newest first.

    Date bounds are inclusive. service_id filters through the sale's service.
    """
    filters = filters or SessionFilters()
    if filters.status is not None and filters.status not in SESSION_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of {', '.join(SESSION_STATUSES)}")

    query = (
        db.session.query(SessionRecord)
        .join(Sale, SessionRecord.sale_id == Sale.id)
        .join(Client, Sale.client_id == Client.id)
        .filter(Client.account_id == account_id)
    )

    if filters.start_date is not None:
        query = query.filter(SessionRecord.session_date >= filters.start_date)
    if filters.end_date is not None:
        query = query.filter(SessionRecord.session_date <= filters.end_date)
    if filters.staff_id is not None:
        query = query.filter(SessionRecord.staff_id == filters.staff_id)
    if filters.status is not None:
        query = query.filter(SessionRecord.status == filters.status)
    if filters.sale_id is not None:
        query = query.filter(SessionRecord.sale_id == filters.sale_id)
    if filters.service_id is not None:
        query = query.filter(Sale.service_id == filters.service_id)

    return query.order_by(SessionRecord.session_date.desc(), SessionRecord.id.desc()).all()
