# Overview: Sale ledger; service packages, their remaining-session counters and payments.

"""
Sale Ledger

A sale is a purchased service package. Its remaining_sessions counter starts
at the service's session_count (or an explicit override) and is decremented
only by session_service.use_session. update_sale is the administrative
correction path and may set any non-negative value.

Payments are appended against a sale and never edited. The outstanding
amount is always derived:

    remaining_amount = service price - sum(payments)

and may be negative (overpaid). Nothing blocks over- or under-payment.

All operations take the caller's account_id; sales are scoped through their
client (sale -> client -> account).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from ..errors import ConflictError, ValidationError
from ..models import Client, Payment, Sale, Service, PAYMENT_METHODS
from salonbook.time_utils import to_utc_z, utcnow
from .tenant_service import (
    require_client_in_account,
    require_sale_in_account,
    require_service_in_account,
)


@dataclass
class SalePatch:
    """Administrative correction; None means unchanged."""
    sale_date: datetime | None = None
    remaining_sessions: int | None = None


@dataclass
class PaymentSummary:
    sale: Sale
    payments: list[Payment] = field(default_factory=list)
    total_price_cents: int = 0
    total_paid_cents: int = 0

    @property
    def remaining_amount_cents(self) -> int:
        return self.total_price_cents - self.total_paid_cents

    def to_dict(self) -> dict:
        return {
            "sale_id": self.sale.id,
            "payments": [p.to_dict() for p in self.payments],
            "total_price_cents": self.total_price_cents,
            "total_paid_cents": self.total_paid_cents,
            "remaining_amount_cents": self.remaining_amount_cents,
        }


# =============================================================================
# SALES
# =============================================================================

def create_sale(
    account_id: int,
    client_id: int,
    service_id: int,
    remaining_sessions: int | None = None,
    sale_date: datetime | None = None,
) -> Sale:
    """
    Record a package sale for a client.

    Both the client and the service must belong to account_id. When
    remaining_sessions is omitted it is taken from the service's
    session_count.
    """
    client = require_client_in_account(client_id, account_id)
    service = require_service_in_account(service_id, account_id)

    if remaining_sessions is None:
        remaining_sessions = service.session_count
    if remaining_sessions < 0:
        raise ValidationError("remaining_sessions must be >= 0")

    sale = Sale(
        client_id=client.id,
        service_id=service.id,
        sale_date=sale_date or utcnow(),
        remaining_sessions=remaining_sessions,
    )
    db.session.add(sale)
    db.session.commit()
    return sale


def get_sale(sale_id: int, account_id: int) -> Sale:
    """Sale with its payments, client and service reachable for display."""
    return require_sale_in_account(sale_id, account_id)


def list_sales_for_account(account_id: int) -> list[Sale]:
    """Newest first."""
    return (
        db.session.query(Sale)
        .join(Client, Sale.client_id == Client.id)
        .filter(Client.account_id == account_id)
        .order_by(Sale.sale_date.desc(), Sale.id.desc())
        .all()
    )


def list_sales_for_client(client_id: int, account_id: int) -> list[Sale]:
    client = require_client_in_account(client_id, account_id)
    return (
        db.session.query(Sale)
        .filter(Sale.client_id == client.id)
        .order_by(Sale.sale_date.desc(), Sale.id.desc())
        .all()
    )


def find_active_sales(client_id: int, service_id: int) -> list[Sale]:
    """
    Sales of `service_id` to `client_id` that still have sessions left,
    newest first. Callers are responsible for tenant checks on client_id.
    """
    return (
        db.session.query(Sale)
        .filter(
            Sale.client_id == client_id,
            Sale.service_id == service_id,
            Sale.remaining_sessions > 0,
        )
        .order_by(Sale.sale_date.desc(), Sale.id.desc())
        .all()
    )


def update_sale(sale_id: int, account_id: int, patch: SalePatch) -> Sale:
    """
    Administrative correction of sale_date and/or remaining_sessions.

    Uses the sale's version counter: if a session was consumed between the
    read and this write, ConflictError is raised and nothing is changed.
    """
    sale = require_sale_in_account(sale_id, account_id)

    if patch.remaining_sessions is not None:
        if patch.remaining_sessions < 0:
            raise ValidationError("remaining_sessions must be >= 0")
        sale.remaining_sessions = patch.remaining_sessions
    if patch.sale_date is not None:
        sale.sale_date = patch.sale_date

    try:
        db.session.commit()
    except StaleDataError:
        db.session.rollback()
        raise ConflictError("Sale was modified concurrently, reload and retry")
    return sale


def delete_sale(sale_id: int, account_id: int) -> None:
    """
    Delete a sale together with its payments and session records.

    The three deletes are flushed and committed as one transaction; on any
    failure everything is rolled back and the sale stays intact. A session
    consumed after the sale was loaded fails the versioned DELETE and is
    reported as ConflictError.
    """
    sale = require_sale_in_account(sale_id, account_id)
    try:
        db.session.delete(sale)
        db.session.commit()
    except StaleDataError:
        db.session.rollback()
        raise ConflictError("Sale was modified concurrently, reload and retry")
    except Exception:
        db.session.rollback()
        raise


# =============================================================================
# PAYMENTS
# =============================================================================

def create_payment(
    sale_id: int,
    account_id: int,
    amount_paid_cents: int,
    payment_method: str,
    notes: str | None = None,
    payment_date: datetime | None = None,
) -> Payment:
    """Append a payment. The sale itself is not modified."""
    if amount_paid_cents is None or amount_paid_cents <= 0:
        raise ValidationError("amount_paid_cents must be greater than 0")
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError(f"Invalid payment_method. Must be one of {', '.join(PAYMENT_METHODS)}")

    sale = require_sale_in_account(sale_id, account_id)

    payment = Payment(
        sale_id=sale.id,
        amount_paid_cents=amount_paid_cents,
        payment_method=payment_method,
        notes=notes,
        payment_date=payment_date or utcnow(),
    )
    db.session.add(payment)
    db.session.commit()
    return payment


def get_sale_payments(sale_id: int, account_id: int) -> PaymentSummary:
    """Payments of a sale plus price, total paid and remaining amount."""
    sale = require_sale_in_account(sale_id, account_id)

    payments = (
        db.session.query(Payment)
        .filter(Payment.sale_id == sale.id)
        .order_by(Payment.payment_date.desc(), Payment.id.desc())
        .all()
    )
    total_paid = (
        db.session.query(func.coalesce(func.sum(Payment.amount_paid_cents), 0))
        .filter(Payment.sale_id == sale.id)
        .scalar()
    )

    return PaymentSummary(
        sale=sale,
        payments=payments,
        total_price_cents=sale.service.price_cents,
        total_paid_cents=int(total_paid or 0),
    )


def get_remaining_sessions_for_client(client_id: int, account_id: int) -> list[dict]:
    """Open packages of a client: sales with remaining_sessions > 0."""
    client = require_client_in_account(client_id, account_id)

    rows = (
        db.session.query(Sale, Service.service_name)
        .join(Service, Sale.service_id == Service.id)
        .filter(Sale.client_id == client.id, Sale.remaining_sessions > 0)
        .order_by(Sale.sale_date.desc(), Sale.id.desc())
        .all()
    )
    return [
        {
            "sale_id": sale.id,
            "service_id": sale.service_id,
            "service_name": service_name,
            "remaining_sessions": sale.remaining_sessions,
            "sale_date": to_utc_z(sale.sale_date),
        }
        for sale, service_name in rows
    ]
