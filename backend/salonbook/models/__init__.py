from .tenancy import Account
from .auth import User, SessionToken, ROLE_ADMIN, ROLE_OWNER, ROLE_EMPLOYEE, VALID_ROLES
from .security import SecurityEvent
from .catalog import Service, Client, Staff, WorkingHours
from .appointments import (
    Appointment,
    APPOINTMENT_PLANNED,
    APPOINTMENT_COMPLETED,
    APPOINTMENT_CANCELLED,
    APPOINTMENT_STATUSES,
)
from .sales import (
    Sale,
    Payment,
    SessionRecord,
    PAYMENT_METHODS,
    PAYMENT_CASH,
    PAYMENT_CREDIT_CARD,
    PAYMENT_TRANSFER,
    PAYMENT_OTHER,
    SESSION_STATUSES,
    SESSION_SCHEDULED,
    SESSION_COMPLETED,
    SESSION_MISSED,
)

__all__ = [
    'Account',
    'User', 'SessionToken', 'ROLE_ADMIN', 'ROLE_OWNER', 'ROLE_EMPLOYEE', 'VALID_ROLES',
    'SecurityEvent',
    'Service', 'Client', 'Staff', 'WorkingHours',
    'Appointment', 'APPOINTMENT_PLANNED', 'APPOINTMENT_COMPLETED', 'APPOINTMENT_CANCELLED',
    'APPOINTMENT_STATUSES',
    'Sale', 'Payment', 'SessionRecord',
    'PAYMENT_METHODS', 'PAYMENT_CASH', 'PAYMENT_CREDIT_CARD', 'PAYMENT_TRANSFER', 'PAYMENT_OTHER',
    'SESSION_STATUSES', 'SESSION_SCHEDULED', 'SESSION_COMPLETED', 'SESSION_MISSED',
]
