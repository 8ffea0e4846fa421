"""Student service.

Every query is narrowed to the rows the acting profile may see, in
addition to the database's own row-security policies.
"""

import re
from uuid import UUID

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.row_security import Actor, student_visibility
from app.models.student import Student
from app.schemas.student import StudentCreate, StudentUpdate


def format_student_code(prefix: str, number: int) -> str:
    """`AC` + number padded to at least three digits: AC001, AC042, AC1234."""
    return f"{prefix}{number:03d}"


async def next_student_code(db: AsyncSession, prefix: str | None = None) -> str:
    """
    Next free code after the highest existing `<prefix><digits>` code.

    On PostgreSQL the lookup runs in `app_next_student_code`, which sees every
    student regardless of row security; a manager only sees their own rows.
    """
    prefix = prefix or settings.STUDENT_CODE_PREFIX

    if db.bind.dialect.name == "postgresql":
        result = await db.execute(text("select app_next_student_code(:prefix)"), {"prefix": prefix})
        return result.scalar_one()

    pattern = re.compile(rf"^{re.escape(prefix)}([0-9]+)$")
    result = await db.execute(
        select(Student.student_code).where(Student.student_code.like(f"{prefix}%"))
    )
    numbers = [int(m.group(1)) for code in result.scalars() if (m := pattern.match(code))]
    return format_student_code(prefix, max(numbers, default=0) + 1)


async def get_student_by_id(db: AsyncSession, actor: Actor, student_id: UUID) -> Student | None:
    """Get a student the actor may see, by ID."""
    result = await db.execute(
        select(Student)
        .options(selectinload(Student.tariff), selectinload(Student.tariff_price))
        .where(Student.id == student_id, student_visibility(actor))
    )
    return result.scalar_one_or_none()


async def student_code_exists(db: AsyncSession, student_code: str) -> bool:
    """
    Whether any student, visible to the actor or not, already has this code.

    On PostgreSQL the lookup runs in `app_student_code_taken`, since row
    security hides other managers' students.
    """
    if db.bind.dialect.name == "postgresql":
        result = await db.execute(text("select app_student_code_taken(:code)"), {"code": student_code})
        return result.scalar_one()

    result = await db.execute(select(Student.id).where(Student.student_code == student_code))
    return result.first() is not None


async def get_students(
    db: AsyncSession,
    actor: Actor,
    *,
    manager_id: UUID | None = None,
    tariff_id: UUID | None = None,
    group_code: str | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Student], int]:
    """Get the students visible to the actor, with optional filters."""
    visible = student_visibility(actor)
    query = select(Student).where(visible)
    count_query = select(func.count()).select_from(Student).where(visible)

    if manager_id is not None:
        query = query.where(Student.manager_id == manager_id)
        count_query = count_query.where(Student.manager_id == manager_id)

    if tariff_id is not None:
        query = query.where(Student.tariff_id == tariff_id)
        count_query = count_query.where(Student.tariff_id == tariff_id)

    if group_code:
        query = query.where(Student.group_code == group_code)
        count_query = count_query.where(Student.group_code == group_code)

    if search:
        search_filter = (
            Student.full_name.ilike(f"%{search}%")
            | Student.phone.ilike(f"%{search}%")
            | Student.student_code.ilike(f"%{search}%")
        )
        query = query.where(search_filter)
        count_query = count_query.where(search_filter)

    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    query = (
        query.options(selectinload(Student.tariff), selectinload(Student.tariff_price))
        .order_by(Student.created_at.desc(), Student.student_code.desc())
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(query)
    students = list(result.scalars().all())

    return students, total


async def create_student(
    db: AsyncSession,
    actor: Actor,
    student_data: StudentCreate,
    *,
    manager_id: UUID,
) -> Student:
    """Create a new student owned by `manager_id`."""
    student_code = student_data.student_code or await next_student_code(db)

    student = Student(
        manager_id=manager_id,
        student_code=student_code,
        full_name=student_data.full_name,
        phone=student_data.phone,
        tariff_id=student_data.tariff_id,
        tariff_price_id=student_data.tariff_price_id,
        group_code=student_data.group_code,
        notes=student_data.notes,
    )

    db.add(student)
    await db.commit()
    return await get_student_by_id(db, actor, student.id)


async def update_student(
    db: AsyncSession, actor: Actor, student: Student, student_data: StudentUpdate
) -> Student:
    """Update a student."""
    update_data = student_data.model_dump(exclude_unset=True)

    for field, value in update_data.items():
        setattr(student, field, value)

    student_id = student.id
    await db.commit()
    db.expire(student)
    return await get_student_by_id(db, actor, student_id)


async def delete_student(db: AsyncSession, student: Student) -> None:
    """Delete a student and, through the cascade, their payments."""
    await db.delete(student)
    await db.commit()
