# init_db.py
import asyncio
import os

from sqlalchemy.future import select

from database import AsyncSessionLocal, create_tables
from models.user_model import User
from utils.auth_utils import Hasher


async def seed_admin(email: str, password: str, name: str = "Admin User"):
    async with AsyncSessionLocal() as session:
        existing = await session.scalar(select(User).where(User.email == email.lower()))
        if existing:
            existing.is_admin = True
            existing.is_verified = True
            print(f"Promoted existing user {email} to admin.")
        else:
            session.add(User(
                name=name,
                email=email.lower(),
                hashed_password=Hasher.get_password_hash(password),
                is_admin=True,
                is_verified=True,
            ))
            print(f"Created admin user {email}.")
        await session.commit()


async def init_db():
    print("Creating database tables...")
    await create_tables()
    admin_email = os.getenv("ADMIN_EMAIL")
    admin_password = os.getenv("ADMIN_PASSWORD")
    if admin_email and admin_password:
        await seed_admin(admin_email, admin_password)
    print("✅ Database ready.")

if __name__ == "__main__":
    asyncio.run(init_db())
