"""Tariff service."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.tariff import Tariff, TariffPrice
from app.schemas.tariff import TariffCreate, TariffPriceCreate, TariffPriceUpdate, TariffUpdate


async def get_tariff_by_id(db: AsyncSession, tariff_id: UUID) -> Tariff | None:
    """Get tariff by ID with its prices."""
    result = await db.execute(
        select(Tariff).options(selectinload(Tariff.prices)).where(Tariff.id == tariff_id)
    )
    return result.scalar_one_or_none()


async def get_tariff_by_name(db: AsyncSession, name: str) -> Tariff | None:
    """Get tariff by name."""
    result = await db.execute(select(Tariff).where(Tariff.name == name))
    return result.scalar_one_or_none()


async def get_tariffs(db: AsyncSession, *, is_active: bool | None = None) -> list[Tariff]:
    """Get all tariffs with their prices."""
    query = select(Tariff).options(selectinload(Tariff.prices))
    if is_active is not None:
        query = query.where(Tariff.is_active == is_active)
    result = await db.execute(query.order_by(Tariff.name))
    return list(result.scalars().all())


async def create_tariff(db: AsyncSession, tariff_data: TariffCreate) -> Tariff:
    """Create a tariff together with its initial prices."""
    tariff = Tariff(
        name=tariff_data.name,
        description=tariff_data.description,
        prices=[TariffPrice(name=p.name, price=p.price) for p in tariff_data.prices],
    )

    db.add(tariff)
    await db.commit()
    return await get_tariff_by_id(db, tariff.id)


async def update_tariff(db: AsyncSession, tariff: Tariff, tariff_data: TariffUpdate) -> Tariff:
    """Update a tariff."""
    update_data = tariff_data.model_dump(exclude_unset=True)

    for field, value in update_data.items():
        setattr(tariff, field, value)

    await db.commit()
    return await get_tariff_by_id(db, tariff.id)


async def delete_tariff(db: AsyncSession, tariff: Tariff) -> None:
    """Delete a tariff. Fails while students are enrolled on it."""
    await db.delete(tariff)
    await db.commit()


async def get_price_by_id(db: AsyncSession, price_id: UUID) -> TariffPrice | None:
    """Get tariff price by ID."""
    result = await db.execute(select(TariffPrice).where(TariffPrice.id == price_id))
    return result.scalar_one_or_none()


async def add_price(db: AsyncSession, tariff: Tariff, price_data: TariffPriceCreate) -> TariffPrice:
    """Add a price option to a tariff."""
    price = TariffPrice(tariff_id=tariff.id, name=price_data.name, price=price_data.price)

    db.add(price)
    await db.commit()
    await db.refresh(price)
    return price


async def update_price(
    db: AsyncSession, price: TariffPrice, price_data: TariffPriceUpdate
) -> TariffPrice:
    """Update a price option."""
    update_data = price_data.model_dump(exclude_unset=True)

    for field, value in update_data.items():
        setattr(price, field, value)

    await db.commit()
    await db.refresh(price)
    return price


async def delete_price(db: AsyncSession, price: TariffPrice) -> None:
    """Delete a price option. Fails while students are enrolled on it."""
    await db.delete(price)
    await db.commit()
