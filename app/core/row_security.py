"""Row ownership rules applied to queries.

The same rules are enforced by the database policies in
`app.models.policies`. These checks keep queries from asking for rows
the database would refuse anyway; they are not the security boundary.

An actor is anything with `id` and `role` attributes (a Profile or an
ActorSnapshot).
"""

from typing import Protocol
from uuid import UUID

from sqlalchemy import ColumnElement, false, select, true

from app.core.permissions import Role, is_admin, is_sales_staff
from app.models.student import Student, StudentPayment


class Actor(Protocol):
    id: UUID
    role: Role | str


def can_own_students(actor: Actor) -> bool:
    """Check if the actor may be assigned as a student's manager."""
    return is_sales_staff(actor.role)


def can_access_student(actor: Actor, manager_id: UUID) -> bool:
    """Owning sales manager or superadmin."""
    if is_admin(actor.role):
        return True
    return is_sales_staff(actor.role) and manager_id == actor.id


def can_assign_manager(actor: Actor, manager_id: UUID) -> bool:
    """Sales staff may only create students for themselves; superadmin for anyone."""
    return can_access_student(actor, manager_id)


def student_visibility(actor: Actor) -> ColumnElement[bool]:
    """WHERE clause selecting the students an actor may see."""
    if is_admin(actor.role):
        return true()
    if is_sales_staff(actor.role):
        return Student.manager_id == actor.id
    return false()


def payment_visibility(actor: Actor) -> ColumnElement[bool]:
    """WHERE clause selecting payments through their parent student's ownership."""
    visible_students = select(Student.id).where(student_visibility(actor))
    return StudentPayment.student_id.in_(visible_students)
