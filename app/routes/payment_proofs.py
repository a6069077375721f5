"""
Payment Proof Endpoints
Upload, list and delete proofs of payment for a registration
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from app.config import settings
from app.dependencies import get_payment_proof_service
from app.errors import ValidationError
from app.schemas.payment_proof import (
    PaymentProofListResponse,
    PaymentProofUploadResponse,
    PaymentProofDeleteResponse,
)
from app.services.storage_service import storage_service

router = APIRouter()


@router.post("/upload-payment-proof", response_model=PaymentProofUploadResponse)
async def upload_payment_proof(
    file: UploadFile = File(...),
    trans_id: str = Form(default="", alias="transId"),
    service=Depends(get_payment_proof_service)
):
    """Upload one payment proof (image or PDF, max 5MB)"""
    if not trans_id.strip():
        raise ValidationError("Registration ID is required", field="transId")

    # Read at most one byte past the limit
    content = await file.read(settings.MAX_UPLOAD_SIZE + 1)
    proof = await service.upload(trans_id, file.filename, content, file.content_type)
    return {
        "success": True,
        "id": proof["id"],
        "linenum": proof["linenum"],
        "url": proof["payment_proof_url"],
    }


@router.get("/get-payment-proofs", response_model=PaymentProofListResponse)
async def get_payment_proofs(
    trans_id: str = Query(default="", alias="transId"),
    service=Depends(get_payment_proof_service)
):
    """All proofs of a registration, oldest first"""
    return await service.list_proofs(trans_id)


@router.delete("/delete-payment-proof", response_model=PaymentProofDeleteResponse)
async def delete_payment_proof(
    proof_id: int = Query(..., alias="id"),
    trans_id: str = Query(default="", alias="transId"),
    service=Depends(get_payment_proof_service)
):
    await service.delete(trans_id, proof_id)
    return {"success": True}


@router.get("/verify-storage")
async def verify_storage():
    """Check that the payment proof bucket is reachable"""
    return await storage_service.bucket_status()
