#!/usr/bin/env python3
"""Create an admin user for ContentFlow.

Registration never grants the admin role, so the first admin is created here.
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select
from database import async_session
from models.user import User, UserRole, UserStatus
from services.auth_service import AuthService


async def create_admin(email: str, password: str, first_name: str, last_name: str):
    """Create an admin user, or promote an existing account to admin."""
    email = email.lower().strip()
    async with async_session() as db:
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user is not None:
            if user.role == UserRole.ADMIN:
                print(f"User {email} is already an admin.")
                return
            user.role = UserRole.ADMIN
            user.status = UserStatus.ACTIVE
            await db.commit()
            print(f"Promoted {email} to admin.")
            return

        user = User(
            email=email,
            password_hash=AuthService.hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=UserRole.ADMIN,
            status=UserStatus.ACTIVE,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)

        print("Admin created successfully!")
        print(f"  Email: {email}")
        print(f"  ID: {user.id}")
        print(f"  Role: {user.role.value}")


if __name__ == "__main__":
    if len(sys.argv) not in (3, 5):
        print("Usage: python3 create_admin.py <email> <password> [<first_name> <last_name>]")
        print("Example: python3 create_admin.py admin@example.com 'Secret123' Ada Admin")
        sys.exit(1)

    email, password = sys.argv[1], sys.argv[2]
    first_name, last_name = (sys.argv[3], sys.argv[4]) if len(sys.argv) == 5 else ("Platform", "Admin")

    asyncio.run(create_admin(email, password, first_name, last_name))
