from __future__ import annotations

from ..extensions import db
from salonbook.time_utils import to_utc_z, utcnow


class Service(db.Model):
    """
    A bookable service offered by an account.

    session_count is the package size: a sale of this service starts with
    that many remaining sessions unless overridden.
    """
    __tablename__ = "services"
    __table_args__ = (
        db.Index("ix_services_account_id", "account_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=False)

    service_name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price_cents = db.Column(db.Integer, nullable=False)
    duration_minutes = db.Column(db.Integer, nullable=False, default=60)
    session_count = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    account = db.relationship("Account", backref=db.backref("services", lazy=True))

    def __repr__(self) -> str:
        return f"<Service id={self.id} name={self.service_name!r} account_id={self.account_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "service_name": self.service_name,
            "description": self.description,
            "price_cents": self.price_cents,
            "duration_minutes": self.duration_minutes,
            "session_count": self.session_count,
            "created_at": to_utc_z(self.created_at),
        }


class Client(db.Model):
    """Customer of an account. Email and phone are unique within the account."""
    __tablename__ = "clients"
    __table_args__ = (
        db.UniqueConstraint("account_id", "email", name="uq_clients_account_email"),
        db.UniqueConstraint("account_id", "phone", name="uq_clients_account_phone"),
        db.Index("ix_clients_account_id", "account_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=False)

    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now(), index=True)

    account = db.relationship("Account", backref=db.backref("clients", lazy=True))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Client id={self.id} name={self.full_name!r} account_id={self.account_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }


class Staff(db.Model):
    """Staff member of an account; optionally linked to an EMPLOYEE login."""
    __tablename__ = "staff"
    __table_args__ = (
        db.Index("ix_staff_account_id", "account_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    full_name = db.Column(db.String(200), nullable=False)
    role = db.Column(db.String(64), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    account = db.relationship("Account", backref=db.backref("staff", lazy=True))
    user = db.relationship("User", backref=db.backref("staff_profile", lazy=True))
    working_hours = db.relationship(
        "WorkingHours",
        back_populates="staff",
        cascade="all, delete-orphan",
        order_by="WorkingHours.day_of_week",
        lazy=True,
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "user_id": self.user_id,
            "full_name": self.full_name,
            "role": self.role,
            "email": self.email,
            "phone": self.phone,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "working_hours": [h.to_dict() for h in self.working_hours],
        }

    def to_summary(self) -> dict:
        return {"id": self.id, "full_name": self.full_name, "role": self.role}


class WorkingHours(db.Model):
    """
    Weekly schedule row of a staff member, one per weekday.

    day_of_week: 0 = Sunday .. 6 = Saturday. Times are "HH:MM" wall-clock
    strings; rows with is_working False are days off.
    """
    __tablename__ = "working_hours"
    __table_args__ = (
        db.UniqueConstraint("staff_id", "day_of_week", name="uq_working_hours_staff_day"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False, index=True)

    day_of_week = db.Column(db.Integer, nullable=False)
    start_time = db.Column(db.String(5), nullable=False)
    end_time = db.Column(db.String(5), nullable=False)
    is_working = db.Column(db.Boolean, nullable=False, default=True)

    staff = db.relationship("Staff", back_populates="working_hours")

    def to_dict(self) -> dict:
        return {
            "day_of_week": self.day_of_week,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "is_working": self.is_working,
        }
