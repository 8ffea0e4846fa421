"""Receipt upload routes."""

import uuid
from pathlib import Path

from fastapi import APIRouter, File, HTTPException, UploadFile, status
from pydantic import BaseModel

from app.core.config import settings
from app.core.deps import StudentManagerProfile

router = APIRouter(prefix="/uploads", tags=["Uploads"])


class UploadResponse(BaseModel):
    """Response for file upload."""
    url: str
    filename: str


@router.post("/receipt", response_model=UploadResponse)
async def upload_receipt(
    current_profile: StudentManagerProfile,
    file: UploadFile = File(...),
) -> UploadResponse:
    """
    Upload a payment receipt.

    - Validates file type and size
    - Saves under the receipts directory, one folder per uploader
    - Returns the URL to store in the payment's receipt_url
    """
    if file.content_type not in settings.ALLOWED_RECEIPT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file type. Allowed types: {', '.join(settings.ALLOWED_RECEIPT_TYPES)}",
        )

    content = await file.read()

    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large. Maximum size: {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB",
        )

    upload_dir = Path(settings.UPLOAD_DIR) / str(current_profile.id)
    upload_dir.mkdir(parents=True, exist_ok=True)

    file_ext = Path(file.filename).suffix if file.filename else ""
    unique_filename = f"{uuid.uuid4()}{file_ext}"
    (upload_dir / unique_filename).write_bytes(content)

    url = f"/{settings.UPLOAD_DIR}/{current_profile.id}/{unique_filename}"

    return UploadResponse(url=url, filename=unique_filename)
