"""
Create (or promote) a dashboard administrator.

Run from backend/:
  python scripts/create_admin.py admin@example.com 'a-long-password'
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from fastapi_users.password import PasswordHelper
from sqlalchemy import select

from db.database import async_session_maker, create_db_and_tables, User


password_helper = PasswordHelper()


async def main(email: str, password: str) -> None:
    await create_db_and_tables()

    async with async_session_maker() as session:
        res = await session.execute(select(User).where(User.email == email))
        user = res.scalar_one_or_none()
        if user:
            user.is_superuser = True
            user.is_active = True
            user.hashed_password = password_helper.hash(password)
            action = "Updated"
        else:
            user = User(
                email=email,
                hashed_password=password_helper.hash(password),
                is_active=True,
                is_superuser=True,
                is_verified=True,
            )
            session.add(user)
            action = "Created"
        await session.commit()

    print(f"{action} admin user {email}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email")
    parser.add_argument("password")
    args = parser.parse_args()
    asyncio.run(main(args.email, args.password))
