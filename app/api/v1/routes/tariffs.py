"""Tariff routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import AdminProfile, ApprovedProfile
from app.models.tariff import Tariff
from app.schemas.tariff import (
    TariffCreate,
    TariffPriceCreate,
    TariffPriceResponse,
    TariffPriceUpdate,
    TariffResponse,
    TariffUpdate,
)
from app.services import tariff as tariff_service

router = APIRouter(prefix="/tariffs", tags=["Tariffs"])


# ============== Helper Functions ==============


async def get_tariff_or_404(db: AsyncSession, tariff_id: UUID) -> Tariff:
    tariff = await tariff_service.get_tariff_by_id(db, tariff_id)
    if not tariff:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tariff not found",
        )
    return tariff


# ============== Endpoints ==============


@router.get("", response_model=list[TariffResponse])
async def list_tariffs(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: ApprovedProfile,
    is_active: bool | None = Query(None, description="Filter by active status"),
) -> list[TariffResponse]:
    """List tariffs with their prices. Any approved actor."""
    tariffs = await tariff_service.get_tariffs(db, is_active=is_active)
    return [TariffResponse.model_validate(t) for t in tariffs]


@router.post("", response_model=TariffResponse, status_code=status.HTTP_201_CREATED)
async def create_tariff(
    tariff_data: TariffCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: AdminProfile,
) -> TariffResponse:
    """Create a tariff. Superadmin only."""
    if await tariff_service.get_tariff_by_name(db, tariff_data.name):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Tariff with this name already exists",
        )

    tariff = await tariff_service.create_tariff(db, tariff_data)
    return TariffResponse.model_validate(tariff)


@router.get("/{tariff_id}", response_model=TariffResponse)
async def get_tariff(
    tariff_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: ApprovedProfile,
) -> TariffResponse:
    """Get a tariff by ID."""
    tariff = await get_tariff_or_404(db, tariff_id)
    return TariffResponse.model_validate(tariff)


@router.patch("/{tariff_id}", response_model=TariffResponse)
async def update_tariff(
    tariff_id: UUID,
    tariff_data: TariffUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: AdminProfile,
) -> TariffResponse:
    """Update a tariff. Superadmin only."""
    tariff = await get_tariff_or_404(db, tariff_id)

    if tariff_data.name and tariff_data.name != tariff.name:
        if await tariff_service.get_tariff_by_name(db, tariff_data.name):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Tariff with this name already exists",
            )

    updated_tariff = await tariff_service.update_tariff(db, tariff, tariff_data)
    return TariffResponse.model_validate(updated_tariff)


@router.delete("/{tariff_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tariff(
    tariff_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: AdminProfile,
) -> None:
    """Delete a tariff. Superadmin only; refused while students are enrolled on it."""
    tariff = await get_tariff_or_404(db, tariff_id)

    try:
        await tariff_service.delete_tariff(db, tariff)
    except IntegrityError as exc:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Tariff is in use by students",
        ) from exc


@router.post(
    "/{tariff_id}/prices",
    response_model=TariffPriceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_tariff_price(
    tariff_id: UUID,
    price_data: TariffPriceCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: AdminProfile,
) -> TariffPriceResponse:
    """Add a price option to a tariff. Superadmin only."""
    tariff = await get_tariff_or_404(db, tariff_id)
    price = await tariff_service.add_price(db, tariff, price_data)
    return TariffPriceResponse.model_validate(price)


@router.patch("/{tariff_id}/prices/{price_id}", response_model=TariffPriceResponse)
async def update_tariff_price(
    tariff_id: UUID,
    price_id: UUID,
    price_data: TariffPriceUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: AdminProfile,
) -> TariffPriceResponse:
    """Update a price option. Superadmin only."""
    price = await tariff_service.get_price_by_id(db, price_id)
    if not price or price.tariff_id != tariff_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tariff price not found",
        )

    updated_price = await tariff_service.update_price(db, price, price_data)
    return TariffPriceResponse.model_validate(updated_price)


@router.delete("/{tariff_id}/prices/{price_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tariff_price(
    tariff_id: UUID,
    price_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: AdminProfile,
) -> None:
    """Delete a price option. Superadmin only; refused while students use it."""
    price = await tariff_service.get_price_by_id(db, price_id)
    if not price or price.tariff_id != tariff_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tariff price not found",
        )

    try:
        await tariff_service.delete_price(db, price)
    except IntegrityError as exc:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Tariff price is in use by students",
        ) from exc
