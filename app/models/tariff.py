"""Tariff models."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import BaseModel


class Tariff(BaseModel):
    """Pricing plan a student is enrolled on."""

    __tablename__ = "tariffs"

    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        server_default="true",
    )

    # Relationships
    prices: Mapped[list["TariffPrice"]] = relationship(
        "TariffPrice",
        back_populates="tariff",
        cascade="all, delete-orphan",
        order_by="TariffPrice.price",
    )

    def __repr__(self) -> str:
        return f"<Tariff(id={self.id}, name={self.name})>"


class TariffPrice(BaseModel):
    """One price option of a tariff (e.g. monthly, per course)."""

    __tablename__ = "tariff_prices"

    tariff_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tariffs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Relationships
    tariff: Mapped["Tariff"] = relationship("Tariff", back_populates="prices")

    def __repr__(self) -> str:
        return f"<TariffPrice(id={self.id}, name={self.name}, price={self.price})>"
