"""
Conference and Reference Data Response Models
"""

from pydantic import BaseModel
from typing import Optional
from datetime import date


class ConferenceResponse(BaseModel):
    """Public conference (venue) info"""
    confcode: str
    name: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    venue: Optional[str] = None
    reg_limit: Optional[int] = None
    reg_alert_count: Optional[int] = None
    domain: Optional[str] = None
    prefix: Optional[str] = None
    on_maintenance: Optional[str] = None
    notification: Optional[str] = None

    class Config:
        from_attributes = True


class MaintenanceStatusResponse(BaseModel):
    onMaintenance: bool
    conference: Optional[dict] = None


class PositionResponse(BaseModel):
    name: str
    lvl: Optional[str] = None


class BankResponse(BaseModel):
    bank_name: str
    acct_no: str
    payee: Optional[str] = None


class ContactResponse(BaseModel):
    contact_no: str


class SessionPolicyResponse(BaseModel):
    """Client registration session timer policy, in seconds"""
    durationSeconds: int
    warningSeconds: int
    extensionSeconds: int
    maxExtensions: int
