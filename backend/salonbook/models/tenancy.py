from __future__ import annotations

from ..extensions import db
from salonbook.time_utils import to_utc_z, utcnow


class Account(db.Model):
    """
    Multi-tenant root: every business using the platform is an Account.

    Accounts are created by a platform admin together with their owner user.
    Clients, services, staff and appointments carry account_id directly;
    sales, payments and session records are scoped through their client.
    """
    __tablename__ = "accounts"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    business_name = db.Column(db.String(200), nullable=False)
    contact_person = db.Column(db.String(120), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    subscription_plan = db.Column(db.String(32), nullable=False, default="Basic")

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Account id={self.id} business_name={self.business_name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_name": self.business_name,
            "contact_person": self.contact_person,
            "email": self.email,
            "phone": self.phone,
            "subscription_plan": self.subscription_plan,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
