"""Student and student payment models."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import BaseModel


class Student(BaseModel):
    """Student owned by exactly one sales manager."""

    __tablename__ = "students"

    manager_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    tariff_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tariffs.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    tariff_price_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tariff_prices.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    group_code: Mapped[str] = mapped_column(String(50), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)

    # Relationships
    manager: Mapped["Profile"] = relationship("Profile", back_populates="students")
    tariff: Mapped["Tariff"] = relationship("Tariff")
    tariff_price: Mapped["TariffPrice"] = relationship("TariffPrice")
    payments: Mapped[list["StudentPayment"]] = relationship(
        "StudentPayment",
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, code={self.student_code}, name={self.full_name})>"


class StudentPayment(BaseModel):
    """Payment made by a student. Access follows the parent student's ownership."""

    __tablename__ = "student_payments"

    student_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    payment_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    payment_type: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    receipt_url: Mapped[str] = mapped_column(String(500), nullable=False)

    # Relationships
    student: Mapped["Student"] = relationship("Student", back_populates="payments")

    def __repr__(self) -> str:
        return f"<StudentPayment(id={self.id}, amount={self.amount})>"
