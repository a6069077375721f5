"""
Payment Proof Request/Response Models
"""

from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class PaymentProofResponse(BaseModel):
    """A stored payment proof"""
    id: int
    regid: str
    confcode: str
    linenum: int
    payment_proof_url: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PaymentProofListResponse(BaseModel):
    paymentProofs: List[PaymentProofResponse]
    count: int
    limit: int


class PaymentProofUploadResponse(BaseModel):
    success: bool = True
    id: int
    linenum: int
    url: str
    message: str = "Payment proof uploaded successfully"


class PaymentProofDeleteResponse(BaseModel):
    success: bool = True
    message: str = "Payment proof deleted successfully"
