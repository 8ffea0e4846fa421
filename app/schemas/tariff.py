"""Tariff schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.validators import reject_null


class TariffPriceCreate(BaseModel):
    """Schema for adding a price option to a tariff."""

    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., gt=0, decimal_places=2)


class TariffPriceUpdate(BaseModel):
    """Schema for updating a price option."""

    name: str | None = Field(None, min_length=1, max_length=200)
    price: Decimal | None = Field(None, gt=0, decimal_places=2)

    @field_validator("name", "price")
    @classmethod
    def required_fields_not_null(cls, value):
        return reject_null(value)


class TariffPriceResponse(BaseModel):
    """Tariff price response schema."""

    id: UUID
    tariff_id: UUID
    name: str
    price: Decimal
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TariffCreate(BaseModel):
    """Schema for creating a tariff, optionally with its prices."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    prices: list[TariffPriceCreate] = Field(default_factory=list)


class TariffUpdate(BaseModel):
    """Schema for updating a tariff."""

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    is_active: bool | None = None

    @field_validator("name", "is_active")
    @classmethod
    def required_fields_not_null(cls, value):
        return reject_null(value)


class TariffResponse(BaseModel):
    """Tariff response schema."""

    id: UUID
    name: str
    description: str | None
    is_active: bool
    prices: list[TariffPriceResponse] = []
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
