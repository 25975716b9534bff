"""
Script to create an initial admin user with a password for local testing.

    python -m okr_server.scripts.create_local_admin --email me@example.com --password secret123
"""

import argparse
import asyncio

import structlog
from sqlmodel import select

from okr_server.core.auth import hash_password
from okr_server.core.config import get_settings
from okr_server.core.database import get_session_context, init_db
from okr_server.core.logging_config import configure_logging
from okr_server.models.organization import Organization
from okr_server.models.user import User
from okr_shared.schemas.common import Role

log = structlog.get_logger()


async def create_admin(email: str, password: str, org_name: str) -> None:
    email = email.lower()
    await init_db()

    async with get_session_context() as session:
        # 1. Ensure the organization exists
        result = await session.execute(select(Organization).where(Organization.name == org_name))
        org = result.scalars().first()
        if not org:
            org = Organization(name=org_name)
            session.add(org)
            await session.flush()
            log.info("org.created", org_id=str(org.id), name=org_name)

        # 2. Create or promote the user
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if not user:
            user = User(
                email=email,
                password_hash=hash_password(password),
                first_name="Local",
                last_name="Admin",
                role=Role.ADMIN.value,
                org_id=org.id,
            )
            session.add(user)
            log.info("admin.created", email=email, org_id=str(org.id))
        elif user.role != Role.ADMIN.value:
            user.role = Role.ADMIN.value
            session.add(user)
            log.info("admin.promoted", email=email, org_id=str(user.org_id))
        else:
            log.info("admin.exists", email=email)


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Create a local admin user.")
    parser.add_argument("--email", required=True, help="Email address for the user")
    parser.add_argument("--password", required=True, help="Password for the user")
    parser.add_argument(
        "--org-name", default="Default Organization", help="Organization to create or join"
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level, "text")
    asyncio.run(create_admin(args.email, args.password, args.org_name))


if __name__ == "__main__":
    main()
