import asyncio
import logging
import sys
from sqlmodel import select
from sqlalchemy.exc import DatabaseError
from src.db.main import async_session_maker, init_db
from src.auth.models import User
from src.utils.auth import generate_password_hash

logger = logging.getLogger("seed_users")


async def create_user(username: str, full_name: str, password: str):
    await init_db()
    username = username.lower()

    async with async_session_maker() as session:
        # Check if user already exists
        statement = select(User).where(User.username == username)
        result = await session.exec(statement)

        if result.first():
            logger.error("User with username '%s' already exists.", username)
            return

        new_user = User(
            username=username,
            full_name=full_name,
            password_hash=generate_password_hash(password),
        )

        session.add(new_user)
        try:
            await session.commit()
            await session.refresh(new_user)
            logger.info("Created user %s (%s), id %s", new_user.username, new_user.full_name, new_user.user_id)
        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to create user %s", username)

if __name__ == "__main__":
    if len(sys.argv) == 4:
        # python seed_users.py <username> <full_name> <password>
        asyncio.run(create_user(sys.argv[1], sys.argv[2], sys.argv[3]))
    else:
        print("Usage: python seed_users.py <username> <full_name> <password>")
        print("Example: python seed_users.py owner 'Shop Owner' mysecretpassword")
