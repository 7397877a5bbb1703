"""Seed tenant applications and an optional admin user.

Usage:
    python scripts/seed.py
    python scripts/seed.py --admin admin admin@example.com <password>
"""

import argparse
import asyncio
import sys

from authgate.core.exceptions import ConflictException
from authgate.database import AsyncSessionLocal, engine
from authgate.schemas.users import UserCreate
from authgate.services.application_service import ApplicationService
from authgate.services.user_service import UserService

APPLICATIONS = [
    ("AlgeniusNext", "dev-ez5m18whai32urhj.us.auth0.com"),
    ("PicchatBox", "dev-l088mznni36phook.us.auth0.com"),
    ("AIMetaAid", "dev-aimetaaid.au.auth0.com"),
]


async def seed_applications() -> None:
    """Insert the tenant applications that are missing."""
    service = ApplicationService()
    async with AsyncSessionLocal() as db:
        for app_name, domain in APPLICATIONS:
            if await service.get_by_name(db, app_name):
                print(f"- {app_name} already present")
                continue
            application = await service.create_application(db, app_name, domain)
            print(f"✓ {app_name} created (id={application['id']})")


async def seed_admin(username: str, email: str, password: str) -> None:
    """Create an admin user unless the username is taken."""
    service = UserService()
    async with AsyncSessionLocal() as db:
        if await service.get_by_username(db, username):
            print(f"- Admin user '{username}' already exists")
            return
        try:
            await service.create_user(
                db,
                UserCreate(username=username, email=email, password=password, role="admin"),
            )
            print(f"✓ Admin user '{username}' created")
        except ConflictException:
            print(f"- Email '{email}' is already in use")


async def main(args: argparse.Namespace) -> None:
    """Run the seeders."""
    try:
        await seed_applications()
        if args.admin:
            await seed_admin(*args.admin)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--admin",
        nargs=3,
        metavar=("USERNAME", "EMAIL", "PASSWORD"),
        help="also create an admin user",
    )

    try:
        asyncio.run(main(parser.parse_args()))
    except Exception as e:
        print(f"✗ Seeding failed: {e}", file=sys.stderr)
        sys.exit(1)
