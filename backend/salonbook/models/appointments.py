from __future__ import annotations

from ..extensions import db
from salonbook.time_utils import to_utc_z, utcnow

APPOINTMENT_PLANNED = "Planned"
APPOINTMENT_COMPLETED = "Completed"
APPOINTMENT_CANCELLED = "Cancelled"

APPOINTMENT_STATUSES = (APPOINTMENT_PLANNED, APPOINTMENT_COMPLETED, APPOINTMENT_CANCELLED)


class Appointment(db.Model):
    """
    A scheduled customer visit.

    customer_name is free text. client_id is the explicit link to a Client;
    when it is absent, session consumption falls back to matching the name
    against the account's clients (legacy and walk-in bookings).
    """
    __tablename__ = "appointments"
    __table_args__ = (
        db.Index("ix_appointments_account_date", "account_id", "appointment_date"),
        db.Index("ix_appointments_account_status", "account_id", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=False)

    customer_name = db.Column(db.String(200), nullable=False, index=True)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id"), nullable=True, index=True)
    service_id = db.Column(db.Integer, db.ForeignKey("services.id"), nullable=False, index=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=True, index=True)

    appointment_date = db.Column(db.DateTime(timezone=True), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=APPOINTMENT_PLANNED)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now(), onupdate=utcnow)

    client = db.relationship("Client", backref=db.backref("appointments", lazy=True))
    service = db.relationship("Service")
    staff = db.relationship("Staff")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "customer_name": self.customer_name,
            "client_id": self.client_id,
            "service_id": self.service_id,
            "service_name": self.service.service_name if self.service else None,
            "staff_id": self.staff_id,
            "staff": self.staff.to_summary() if self.staff else None,
            "appointment_date": to_utc_z(self.appointment_date),
            "status": self.status,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
