import asyncio
import os

from sqlalchemy import select

from inventory_api.constants.roles import Role
from inventory_api.core.db import Database
from inventory_api.core.security import hash_password
from inventory_api.models.users.user_models import User


async def create_admin(database: Database, email: str, password: str) -> bool:
    """Creates the admin account unless the email is already taken."""
    email = email.lower()
    async with database.session() as session:
        exists = await session.scalar(select(User.id).where(User.email == email))
        if exists:
            return False

        session.add(
            User(
                first_name="Admin",
                email=email,
                password_hash=hash_password(password),
                role=Role.ADMIN.value,
            )
        )
        await session.commit()
    return True


async def main():
    database = Database()
    try:
        created = await create_admin(
            database,
            os.getenv("ADMIN_EMAIL", "admin@inventory.io"),
            os.getenv("ADMIN_PASSWORD", "Admin123"),
        )
    finally:
        await database.dispose()

    print("Admin user created!" if created else "Admin user already exists")


if __name__ == "__main__":
    asyncio.run(main())
