"""PostgreSQL row-security policies.

The database re-checks ownership and role rules on every row, using only
the identity bound with `app.core.database.bind_actor`. Role lists come
from the role groups so they cannot drift from the rest of the code.

Policies apply to the non-owner role the service connects as. Schema
setup and the CLI seeding run as the table owner, which bypasses them.
"""

from sqlalchemy import DDL, event

from app.core.database import ACTOR_SETTING
from app.core.permissions import Role, RoleGroup, roles_in
from app.models.profile import Profile
from app.models.student import Student, StudentPayment
from app.models.tariff import Tariff, TariffPrice


def sql_role_list(roles: frozenset[Role]) -> str:
    """Render roles as a SQL literal list, e.g. `'head_sales', 'sales'`."""
    return ", ".join(f"'{role.value}'" for role in sorted(roles, key=lambda r: r.value))


SALES_ROLES_SQL = sql_role_list(roles_in(RoleGroup.SALES_STAFF))
ADMIN_ROLES_SQL = sql_role_list(roles_in(RoleGroup.ADMIN))

ACTOR_FUNCTIONS = [
    f"""
    create or replace function app_actor_id() returns uuid
    language sql stable as $$
      select nullif(current_setting('{ACTOR_SETTING}', true), '')::uuid
    $$
    """,
    # security definer: reads profiles without re-entering the profiles policies
    f"""
    create or replace function app_actor_is_admin() returns boolean
    language sql stable security definer set search_path = public as $$
      select exists (
        select 1 from profiles
        where profiles.id = app_actor_id()
        and profiles.role in ({ADMIN_ROLES_SQL})
      )
    $$
    """,
]

# Codes are global; managers only see their own rows, so the lookup bypasses row security
STUDENT_CODE_FUNCTION = """
    create or replace function app_next_student_code(prefix text) returns text
    language sql volatile security definer set search_path = public as $$
      select prefix || lpad(next_number::text, greatest(3, length(next_number::text)), '0')
      from (
        select coalesce(max(substring(student_code from length(prefix) + 1)::integer), 0) + 1
          as next_number
        from students
        where student_code ~ ('^' || prefix || '[0-9]+$')
      ) as codes
    $$
"""

STUDENT_CODE_TAKEN_FUNCTION = """
    create or replace function app_student_code_taken(code text) returns boolean
    language sql stable security definer set search_path = public as $$
      select exists (select 1 from students where student_code = code)
    $$
"""

OWNING_MANAGER_SQL = f"""
    exists (
      select 1 from profiles
      where profiles.id = app_actor_id()
      and profiles.role in ({SALES_ROLES_SQL})
      and students.manager_id = profiles.id
    )
    or app_actor_is_admin()
"""

# students carries its own policies, so this subquery only sees owned students
PARENT_STUDENT_SQL = """
    exists (
      select 1 from students
      where students.id = student_payments.student_id
    )
"""

PROFILE_SELF_INSERT_SQL = f"""
    (id = app_actor_id() and is_approved = false and role not in ({ADMIN_ROLES_SQL}))
    or app_actor_is_admin()
"""


def table_policies(table: str, *, select: str, insert: str, update: str, delete: str) -> list[str]:
    """Statements enabling row security with one policy per operation."""
    return [
        f"alter table {table} enable row level security",
        f"create policy {table}_select on {table} for select using ({select})",
        f"create policy {table}_insert on {table} for insert with check ({insert})",
        f"create policy {table}_update on {table} for update using ({update}) with check ({update})",
        f"create policy {table}_delete on {table} for delete using ({delete})",
    ]


POLICIES: dict[str, list[str]] = {
    Profile.__tablename__: ACTOR_FUNCTIONS + table_policies(
        Profile.__tablename__,
        select="id = app_actor_id() or app_actor_is_admin()",
        insert=PROFILE_SELF_INSERT_SQL,
        update="app_actor_is_admin()",
        delete="app_actor_is_admin()",
    ),
    Tariff.__tablename__: table_policies(
        Tariff.__tablename__,
        select="app_actor_id() is not null",
        insert="app_actor_is_admin()",
        update="app_actor_is_admin()",
        delete="app_actor_is_admin()",
    ),
    TariffPrice.__tablename__: table_policies(
        TariffPrice.__tablename__,
        select="app_actor_id() is not null",
        insert="app_actor_is_admin()",
        update="app_actor_is_admin()",
        delete="app_actor_is_admin()",
    ),
    Student.__tablename__: [STUDENT_CODE_FUNCTION, STUDENT_CODE_TAKEN_FUNCTION] + table_policies(
        Student.__tablename__,
        select=OWNING_MANAGER_SQL,
        insert=OWNING_MANAGER_SQL,
        update=OWNING_MANAGER_SQL,
        delete=OWNING_MANAGER_SQL,
    ),
    StudentPayment.__tablename__: table_policies(
        StudentPayment.__tablename__,
        select=PARENT_STUDENT_SQL,
        insert=PARENT_STUDENT_SQL,
        update=PARENT_STUDENT_SQL,
        delete=PARENT_STUDENT_SQL,
    ),
}

_TABLES = {
    model.__tablename__: model.__table__
    for model in (Profile, Tariff, TariffPrice, Student, StudentPayment)
}

for _name, _statements in POLICIES.items():
    for _statement in _statements:
        event.listen(
            _TABLES[_name],
            "after_create",
            DDL(_statement).execute_if(dialect="postgresql"),
        )
