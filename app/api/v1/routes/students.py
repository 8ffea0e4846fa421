"""Student routes.

Students belong to one sales manager. Sales staff work with their own
students only; a superadmin works with all of them. Students outside
the actor's reach answer 404 so their existence is not revealed.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import StudentManagerProfile
from app.core.row_security import can_assign_manager, can_own_students
from app.models.profile import Profile
from app.models.student import Student
from app.schemas.student import (
    StudentCreate,
    StudentListResponse,
    StudentResponse,
    StudentUpdate,
)
from app.services import profile as profile_service
from app.services import student as student_service
from app.services import tariff as tariff_service

router = APIRouter(prefix="/students", tags=["Students"])


# ============== Helper Functions ==============


async def get_student_or_404(db: AsyncSession, actor: Profile, student_id: UUID) -> Student:
    student = await student_service.get_student_by_id(db, actor, student_id)
    if not student:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found",
        )
    return student


async def check_manager(db: AsyncSession, actor: Profile, manager_id: UUID) -> None:
    """Verify the actor may assign `manager_id` and that it is a sales manager."""
    if not can_assign_manager(actor, manager_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only manage your own students",
        )

    manager = await profile_service.get_profile_by_id(db, manager_id)
    if not manager or not can_own_students(manager):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Manager must be a sales staff member",
        )


async def check_tariff_price(db: AsyncSession, tariff_id: UUID, tariff_price_id: UUID) -> None:
    """Verify the price option belongs to the tariff."""
    price = await tariff_service.get_price_by_id(db, tariff_price_id)
    if not price or price.tariff_id != tariff_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Tariff price does not belong to the tariff",
        )


# ============== Endpoints ==============


@router.get("", response_model=StudentListResponse)
async def list_students(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: StudentManagerProfile,
    manager_id: UUID | None = Query(None, description="Filter by manager ID"),
    tariff_id: UUID | None = Query(None, description="Filter by tariff ID"),
    group_code: str | None = Query(None, description="Filter by group code"),
    search: str | None = Query(None, description="Search by name, phone or code"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(20, ge=1, le=100, description="Max number of records"),
) -> StudentListResponse:
    """
    List students.

    - SUPERADMIN: All students, can filter by manager_id
    - Sales staff: Only their own students
    """
    students, total = await student_service.get_students(
        db,
        current_profile,
        manager_id=manager_id,
        tariff_id=tariff_id,
        group_code=group_code,
        search=search,
        skip=skip,
        limit=limit,
    )

    return StudentListResponse(
        items=[StudentResponse.model_validate(s) for s in students],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    student_data: StudentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: StudentManagerProfile,
) -> StudentResponse:
    """
    Create a new student.

    - Sales staff: The student is assigned to themselves
    - SUPERADMIN: Must name the sales manager in manager_id
    """
    manager_id = student_data.manager_id
    if manager_id is None:
        if not can_own_students(current_profile):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="manager_id is required",
            )
        manager_id = current_profile.id

    await check_manager(db, current_profile, manager_id)
    await check_tariff_price(db, student_data.tariff_id, student_data.tariff_price_id)

    if student_data.student_code:
        if await student_service.student_code_exists(db, student_data.student_code):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Student with this code already exists",
            )

    # A concurrent create can still take the same code between check and insert
    try:
        student = await student_service.create_student(
            db, current_profile, student_data, manager_id=manager_id
        )
    except IntegrityError as exc:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Student with this code already exists",
        ) from exc
    return StudentResponse.model_validate(student)


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: StudentManagerProfile,
) -> StudentResponse:
    """Get a student by ID."""
    student = await get_student_or_404(db, current_profile, student_id)
    return StudentResponse.model_validate(student)


@router.patch("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: UUID,
    student_data: StudentUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: StudentManagerProfile,
) -> StudentResponse:
    """
    Update a student.

    Reassigning to another manager is a superadmin action.
    """
    student = await get_student_or_404(db, current_profile, student_id)

    if student_data.manager_id is not None and student_data.manager_id != student.manager_id:
        await check_manager(db, current_profile, student_data.manager_id)

    if student_data.tariff_id is not None or student_data.tariff_price_id is not None:
        await check_tariff_price(
            db,
            student_data.tariff_id or student.tariff_id,
            student_data.tariff_price_id or student.tariff_price_id,
        )

    updated_student = await student_service.update_student(db, current_profile, student, student_data)
    return StudentResponse.model_validate(updated_student)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(
    student_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: StudentManagerProfile,
) -> None:
    """Delete a student together with their payments."""
    student = await get_student_or_404(db, current_profile, student_id)
    await student_service.delete_student(db, student)
