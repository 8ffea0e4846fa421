"""Profile model."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.core.permissions import Role, is_admin, is_sales_staff


class Profile(Base):
    """Authorization record of an actor, keyed by the identity provider's user id."""

    __tablename__ = "profiles"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    role: Mapped[Role] = mapped_column(
        String(20),
        nullable=False,
        default=Role.TEACHER,
    )
    is_approved: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default="false",
        nullable=False,
    )
    sales_id: Mapped[str | None] = mapped_column(String(50), nullable=True)  # Only meaningful for sales
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # Relationships
    students: Mapped[list["Student"]] = relationship(
        "Student",
        back_populates="manager",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_admin(self) -> bool:
        """Check if the actor is a superadmin."""
        return is_admin(self.role)

    @property
    def is_sales_staff(self) -> bool:
        """Check if the actor may own students."""
        return is_sales_staff(self.role)

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, email={self.email}, role={self.role})>"
