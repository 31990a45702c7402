# reset_db.py
# Drops every CivicVoice table and recreates the empty schema. All data is lost.
import asyncio

from database import Base, create_tables, engine
from models import feedback_model, user_model  # noqa: F401


async def drop_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def reset():
    print(f"Dropping all tables on {engine.url.render_as_string(hide_password=True)}...")
    await drop_tables()
    await create_tables()
    print("✅ Empty schema recreated.")

if __name__ == "__main__":
    asyncio.run(reset())
