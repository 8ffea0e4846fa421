"""Database configuration."""

from collections.abc import AsyncGenerator
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Uuid, event, func, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from app.core.config import settings

# Session variable the row-security policies read the acting identity from
ACTOR_SETTING = "app.current_user_id"
ACTOR_INFO_KEY = "actor_id"

_SET_ACTOR = text("select set_config(:name, :value, true)")

engine = create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class BaseModel(Base):
    """Base model with common fields: id, created_at."""

    __abstract__ = True

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting database session."""
    async with async_session_maker() as session:
        yield session


@event.listens_for(Session, "after_begin")
def _apply_actor(session: Session, transaction, connection) -> None:
    """Re-bind the acting identity at the start of every transaction."""
    actor_id = session.info.get(ACTOR_INFO_KEY)
    if actor_id is None or connection.dialect.name != "postgresql":
        return
    connection.execute(_SET_ACTOR, {"name": ACTOR_SETTING, "value": str(actor_id)})


async def bind_actor(db: AsyncSession, actor_id: UUID) -> None:
    """
    Bind the acting identity to a database session.

    PostgreSQL row-security policies read it through `current_setting`.
    The setting is transaction-local and is re-applied after each commit.
    Other dialects have no row security and skip the binding.
    """
    db.info[ACTOR_INFO_KEY] = actor_id
    if db.in_transaction() and db.bind.dialect.name == "postgresql":
        await db.execute(_SET_ACTOR, {"name": ACTOR_SETTING, "value": str(actor_id)})
