"""Student payment routes.

A payment is reachable exactly when its student is.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import StudentManagerProfile
from app.models.profile import Profile
from app.models.student import StudentPayment
from app.schemas.payment import (
    PaymentCreate,
    PaymentListResponse,
    PaymentResponse,
    PaymentUpdate,
)
from app.services import payment as payment_service
from app.services import student as student_service

router = APIRouter(tags=["Payments"])


async def get_payment_or_404(db: AsyncSession, actor: Profile, payment_id: UUID) -> StudentPayment:
    payment = await payment_service.get_payment_by_id(db, actor, payment_id)
    if not payment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found",
        )
    return payment


@router.get("/students/{student_id}/payments", response_model=PaymentListResponse)
async def list_student_payments(
    student_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: StudentManagerProfile,
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(50, ge=1, le=200, description="Max number of records"),
) -> PaymentListResponse:
    """List a student's payments, newest first."""
    student = await student_service.get_student_by_id(db, current_profile, student_id)
    if not student:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found",
        )

    payments, total = await payment_service.get_payments(
        db, current_profile, student_id=student.id, skip=skip, limit=limit
    )
    return PaymentListResponse(
        items=[PaymentResponse.model_validate(p) for p in payments],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.post(
    "/students/{student_id}/payments",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_student_payment(
    student_id: UUID,
    payment_data: PaymentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: StudentManagerProfile,
) -> PaymentResponse:
    """Record a payment for a student."""
    student = await student_service.get_student_by_id(db, current_profile, student_id)
    if not student:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found",
        )

    payment = await payment_service.create_payment(db, student, payment_data)
    return PaymentResponse.model_validate(payment)


@router.get("/payments", response_model=PaymentListResponse)
async def list_payments(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: StudentManagerProfile,
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(50, ge=1, le=200, description="Max number of records"),
) -> PaymentListResponse:
    """List all payments of the students the actor manages."""
    payments, total = await payment_service.get_payments(
        db, current_profile, skip=skip, limit=limit
    )
    return PaymentListResponse(
        items=[PaymentResponse.model_validate(p) for p in payments],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/payments/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: StudentManagerProfile,
) -> PaymentResponse:
    """Get a payment by ID."""
    payment = await get_payment_or_404(db, current_profile, payment_id)
    return PaymentResponse.model_validate(payment)


@router.patch("/payments/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: UUID,
    payment_data: PaymentUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: StudentManagerProfile,
) -> PaymentResponse:
    """Update a payment."""
    payment = await get_payment_or_404(db, current_profile, payment_id)
    updated_payment = await payment_service.update_payment(db, payment, payment_data)
    return PaymentResponse.model_validate(updated_payment)


@router.delete("/payments/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment(
    payment_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: StudentManagerProfile,
) -> None:
    """Delete a payment."""
    payment = await get_payment_or_404(db, current_profile, payment_id)
    await payment_service.delete_payment(db, payment)
