from __future__ import annotations

from ..extensions import db
from salonbook.time_utils import to_utc_z, utcnow

PAYMENT_CASH = "Cash"
PAYMENT_CREDIT_CARD = "CreditCard"
PAYMENT_TRANSFER = "Transfer"
PAYMENT_OTHER = "Other"

PAYMENT_METHODS = (PAYMENT_CASH, PAYMENT_CREDIT_CARD, PAYMENT_TRANSFER, PAYMENT_OTHER)

SESSION_SCHEDULED = "Scheduled"
SESSION_COMPLETED = "Completed"
SESSION_MISSED = "Missed"

SESSION_STATUSES = (SESSION_SCHEDULED, SESSION_COMPLETED, SESSION_MISSED)


class Sale(db.Model):
    """
    A purchased service package.

    remaining_sessions starts at the service's session_count (or an explicit
    override) and is only decremented by session consumption, one per
    session record. The check constraint keeps the counter non-negative at
    the storage level as well.

    Tenant scope is transitive: sale -> client -> account.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint("remaining_sessions >= 0", name="ck_sales_remaining_sessions_non_negative"),
        db.Index("ix_sales_client_service", "client_id", "service_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id"), nullable=False, index=True)
    service_id = db.Column(db.Integer, db.ForeignKey("services.id"), nullable=False, index=True)

    sale_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    remaining_sessions = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    client = db.relationship("Client", backref=db.backref("sales", lazy=True))
    service = db.relationship("Service")
    payments = db.relationship(
        "Payment",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="Payment.payment_date",
        lazy=True,
    )
    session_records = db.relationship(
        "SessionRecord",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SessionRecord.session_date",
        lazy=True,
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def total_paid_cents(self) -> int:
        return sum(p.amount_paid_cents for p in self.payments)

    @property
    def remaining_amount_cents(self) -> int:
        """Price minus payments so far; negative when overpaid."""
        return self.service.price_cents - self.total_paid_cents

    def to_dict(self, include_payments: bool = False) -> dict:
        data = {
            "id": self.id,
            "client_id": self.client_id,
            "service_id": self.service_id,
            "sale_date": to_utc_z(self.sale_date),
            "remaining_sessions": self.remaining_sessions,
            "created_at": to_utc_z(self.created_at),
            "version_id": self.version_id,
        }
        if include_payments:
            data["client"] = self.client.to_dict() if self.client else None
            data["service"] = self.service.to_dict() if self.service else None
            data["payments"] = [p.to_dict() for p in self.payments]
            data["total_paid_cents"] = self.total_paid_cents
            data["remaining_amount_cents"] = self.remaining_amount_cents
        return data


class Payment(db.Model):
    """
    Payment applied to a sale.

    Payments may sum to less than, exactly, or more than the service price;
    the remaining amount is derived, never stored. Payments are never updated
    and are removed only together with their sale.
    """
    __tablename__ = "payments"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)

    amount_paid_cents = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(db.String(16), nullable=False, index=True)
    notes = db.Column(db.Text, nullable=True)

    payment_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    sale = db.relationship("Sale", back_populates="payments")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "amount_paid_cents": self.amount_paid_cents,
            "payment_method": self.payment_method,
            "notes": self.notes,
            "payment_date": to_utc_z(self.payment_date),
        }


class SessionRecord(db.Model):
    """
    Evidence that one session of a sale's package was used.

    Written in the same transaction as the sale decrement. staff_id is
    nullable: an unknown or foreign staff id is dropped, not rejected.
    """
    __tablename__ = "session_records"
    __table_args__ = (
        db.Index("ix_session_records_sale_date", "sale_id", "session_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=True, index=True)

    session_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    status = db.Column(db.String(16), nullable=False, default=SESSION_COMPLETED, index=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    sale = db.relationship("Sale", back_populates="session_records")
    staff = db.relationship("Staff")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "staff_id": self.staff_id,
            "session_date": to_utc_z(self.session_date),
            "status": self.status,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }

    def to_detail_dict(self) -> dict:
        """Session with staff, client and service summaries for listings."""
        client = self.sale.client
        service = self.sale.service
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "session_date": to_utc_z(self.session_date),
            "status": self.status,
            "notes": self.notes,
            "staff_id": self.staff_id,
            "staff": self.staff.to_summary() if self.staff else None,
            "client": {
                "id": client.id,
                "full_name": client.full_name,
                "phone": client.phone,
            },
            "service": {
                "id": service.id,
                "name": service.service_name,
            },
        }
