# Overview: Read-only dashboard aggregates for an account.

"""
Dashboard Aggregator

Read-only; recomputed on every call, nothing cached.

- appointment counts by status over the trailing 30 days (from the start of
  the day 30 days ago, future appointments included)
- total clients and clients created today
- all-time and today's revenue: sum of payments joined payment -> sale ->
  client -> account
- per-month appointment status counts from January to the current month

Each payment and appointment row is counted once per figure.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import func

from ..extensions import db
from ..models import (
    Appointment,
    Client,
    Payment,
    Sale,
    APPOINTMENT_CANCELLED,
    APPOINTMENT_COMPLETED,
    APPOINTMENT_PLANNED,
)
from salonbook.time_utils import month_bounds, start_of_day, utcnow

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

TRAILING_WINDOW_DAYS = 30


def _status_counts(account_id: int, start: datetime) -> dict[str, int]:
    rows = (
        db.session.query(Appointment.status, func.count(Appointment.id))
        .filter(Appointment.account_id == account_id, Appointment.appointment_date >= start)
        .group_by(Appointment.status)
        .all()
    )
    return {status: count for status, count in rows}


def _revenue_cents(account_id: int, since: datetime | None = None) -> int:
    query = (
        db.session.query(func.coalesce(func.sum(Payment.amount_paid_cents), 0))
        .join(Sale, Payment.sale_id == Sale.id)
        .join(Client, Sale.client_id == Client.id)
        .filter(Client.account_id == account_id)
    )
    if since is not None:
        query = query.filter(Payment.payment_date >= since)
    return int(query.scalar() or 0)


def _monthly_breakdown(account_id: int, now: datetime) -> list[dict]:
    """One query for the year so far, bucketed by month in Python."""
    year_start, _ = month_bounds(now.year, 1)
    _, month_end = month_bounds(now.year, now.month)

    rows = (
        db.session.query(Appointment.appointment_date, Appointment.status)
        .filter(
            Appointment.account_id == account_id,
            Appointment.appointment_date >= year_start,
            Appointment.appointment_date < month_end,
        )
        .all()
    )

    buckets = [
        {"name": MONTH_NAMES[i], "completed": 0, "pending": 0, "cancelled": 0}
        for i in range(now.month)
    ]
    keys = {
        APPOINTMENT_COMPLETED: "completed",
        APPOINTMENT_PLANNED: "pending",
        APPOINTMENT_CANCELLED: "cancelled",
    }
    for appointment_date, status in rows:
        index = appointment_date.month - 1
        if status not in keys:
            continue
        buckets[index][keys[status]] += 1
    return buckets


def get_dashboard_stats(account_id: int, now: datetime | None = None) -> dict:
    now = now or utcnow()
    today = start_of_day(now)
    window_start = today - timedelta(days=TRAILING_WINDOW_DAYS)

    counts = _status_counts(account_id, window_start)

    total_customers = (
        db.session.query(func.count(Client.id)).filter(Client.account_id == account_id).scalar()
    )
    new_customers_today = (
        db.session.query(func.count(Client.id))
        .filter(Client.account_id == account_id, Client.created_at >= today)
        .scalar()
    )

    return {
        "total_appointments": sum(counts.values()),
        "completed_appointments": counts.get(APPOINTMENT_COMPLETED, 0),
        "cancelled_appointments": counts.get(APPOINTMENT_CANCELLED, 0),
        "pending_appointments": counts.get(APPOINTMENT_PLANNED, 0),
        "total_customers": int(total_customers or 0),
        "new_customers_today": int(new_customers_today or 0),
        "total_revenue_cents": _revenue_cents(account_id),
        "today_revenue_cents": _revenue_cents(account_id, since=today),
        "monthly_appointments": _monthly_breakdown(account_id, now),
    }
