"""Student payment schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.validators import reject_null


class PaymentCreate(BaseModel):
    """Schema for recording a student payment."""

    payment_date: date
    payment_type: str = Field(..., min_length=1, max_length=50, description="e.g. cash, card, transfer")
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    receipt_url: str = Field(..., min_length=1, max_length=500)


class PaymentUpdate(BaseModel):
    """Schema for updating a payment."""

    payment_date: date | None = None
    payment_type: str | None = Field(None, min_length=1, max_length=50)
    amount: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    receipt_url: str | None = Field(None, min_length=1, max_length=500)

    @field_validator("payment_date", "payment_type", "amount", "receipt_url")
    @classmethod
    def required_fields_not_null(cls, value):
        return reject_null(value)


class PaymentResponse(BaseModel):
    """Schema for payment response."""

    id: UUID
    student_id: UUID
    payment_date: date
    payment_type: str
    amount: Decimal
    receipt_url: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentListResponse(BaseModel):
    """Paginated list of payments."""

    items: list[PaymentResponse]
    total: int
    skip: int
    limit: int
