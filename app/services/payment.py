"""Student payment service."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.row_security import Actor, payment_visibility
from app.models.student import Student, StudentPayment
from app.schemas.payment import PaymentCreate, PaymentUpdate


async def get_payment_by_id(db: AsyncSession, actor: Actor, payment_id: UUID) -> StudentPayment | None:
    """Get a payment the actor may see, by ID."""
    result = await db.execute(
        select(StudentPayment).where(StudentPayment.id == payment_id, payment_visibility(actor))
    )
    return result.scalar_one_or_none()


async def get_payments(
    db: AsyncSession,
    actor: Actor,
    *,
    student_id: UUID | None = None,
    skip: int = 0,
    limit: int = 50,
) -> tuple[list[StudentPayment], int]:
    """Get the payments visible to the actor, newest first."""
    visible = payment_visibility(actor)
    query = select(StudentPayment).where(visible)
    count_query = select(func.count()).select_from(StudentPayment).where(visible)

    if student_id is not None:
        query = query.where(StudentPayment.student_id == student_id)
        count_query = count_query.where(StudentPayment.student_id == student_id)

    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    query = query.order_by(
        StudentPayment.payment_date.desc(), StudentPayment.created_at.desc()
    ).offset(skip).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def create_payment(db: AsyncSession, student: Student, payment_data: PaymentCreate) -> StudentPayment:
    """Record a payment for a student."""
    payment = StudentPayment(
        student_id=student.id,
        payment_date=payment_data.payment_date,
        payment_type=payment_data.payment_type,
        amount=payment_data.amount,
        receipt_url=payment_data.receipt_url,
    )

    db.add(payment)
    await db.commit()
    await db.refresh(payment)
    return payment


async def update_payment(
    db: AsyncSession, payment: StudentPayment, payment_data: PaymentUpdate
) -> StudentPayment:
    """Update a payment."""
    update_data = payment_data.model_dump(exclude_unset=True)

    for field, value in update_data.items():
        setattr(payment, field, value)

    await db.commit()
    await db.refresh(payment)
    return payment


async def delete_payment(db: AsyncSession, payment: StudentPayment) -> None:
    """Delete a payment."""
    await db.delete(payment)
    await db.commit()
