"""
Database Models
Import all models here for Alembic migrations
"""

from app.models.conference import Conference
from app.models.registration import RegistrationHeader, RegistrationDetail, PaymentProof
from app.models.reference import Lgu, Position, Bank, Contact

__all__ = [
    "Conference",
    "RegistrationHeader",
    "RegistrationDetail",
    "PaymentProof",
    "Lgu",
    "Position",
    "Bank",
    "Contact",
]
