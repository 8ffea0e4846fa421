"""CLI commands for management tasks."""

import asyncio
import sys

from sqlalchemy import select

from app.core.database import async_session_maker
from app.core.errors import IdentityProviderError
from app.core.permissions import Role
from app.models.profile import Profile
from app.services import profile as profile_service
from app.services.identity import IdentityProvider


async def create_superadmin(email: str, password: str, full_name: str) -> None:
    """Create the first approved superadmin through the provider's admin API."""
    async with async_session_maker() as db:
        # Check if any superadmin exists
        result = await db.execute(
            select(Profile).where(Profile.role == Role.SUPERADMIN)
        )
        existing = result.scalars().first()

        if existing:
            print("Error: A superadmin already exists!")
            print(f"Superadmin: {existing.full_name} ({existing.email})")
            sys.exit(1)

        if await profile_service.get_profile_by_email(db, email):
            print(f"Error: Email {email} is already registered!")
            sys.exit(1)

        provider = IdentityProvider()
        try:
            identity = await provider.create_identity(
                email, password, {"full_name": full_name, "role": Role.SUPERADMIN.value}
            )
        except IdentityProviderError as exc:
            print(f"Error: Identity provider refused the account: {exc.message}")
            sys.exit(1)
        finally:
            await provider.aclose()

        profile = await profile_service.create_profile(
            db,
            identity,
            full_name=full_name,
            role=Role.SUPERADMIN,
            is_approved=True,
        )

        print("Superadmin created successfully!")
        print(f"  ID: {profile.id}")
        print(f"  Name: {profile.full_name}")
        print(f"  Email: {profile.email}")


def main() -> None:
    """CLI entry point."""
    if len(sys.argv) < 2:
        print("Usage: python -m app.cli <command>")
        print("Commands:")
        print("  create-superadmin <email> <password> <full_name>")
        sys.exit(1)

    command = sys.argv[1]

    if command == "create-superadmin":
        if len(sys.argv) != 5:
            print("Usage: python -m app.cli create-superadmin <email> <password> <full_name>")
            sys.exit(1)

        _, _, email, password, full_name = sys.argv
        asyncio.run(create_superadmin(email, password, full_name))
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
