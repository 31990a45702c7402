import io
import os
import tempfile
import uuid
from pathlib import Path
from typing import AsyncIterator
from unittest.mock import AsyncMock, patch

# Environment must be in place before any app module reads core.config
TEST_DIR = Path(tempfile.mkdtemp(prefix="civicvoice-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DIR / 'test.db'}"
os.environ["UPLOAD_DIR"] = str(TEST_DIR / "uploads")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["MAIL_SUPPRESS_SEND"] = "true"

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from httpx import AsyncClient, ASGITransport
from PIL import Image


@pytest.fixture(scope="session")
def app():
    from main import app as fastapi_app
    return fastapi_app


@pytest_asyncio.fixture()
async def client(app) -> AsyncIterator[AsyncClient]:
    async with LifespanManager(app):
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
            yield ac


@pytest.fixture()
def sent_emails():
    """Capture verification emails instead of delivering them."""
    with patch("utils.email_service.EmailService.send_verification_email", new=AsyncMock(return_value=True)) as mock:
        yield mock


def unique_email(prefix: str = "citizen") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}@civicvoice.et"


def otp_for(sent_emails, email: str) -> str:
    # latest code wins; a resend replaces the earlier one
    for call in reversed(sent_emails.await_args_list):
        if call.args[0] == email:
            return call.args[1]
    raise AssertionError(f"no verification email sent to {email}")


async def register_and_activate(client, sent_emails, name="Test Citizen", password="Secret123"):
    email = unique_email()
    resp = await client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201
    resp = await client.post("/api/auth/activate", json={"email": email, "otp": otp_for(sent_emails, email)})
    assert resp.status_code == 200
    return email, resp.json()["token"]


async def create_admin(email: str, password: str = "Admin1234"):
    from database import AsyncSessionLocal
    from models.user_model import User
    from utils.auth_utils import Hasher

    async with AsyncSessionLocal() as session:
        session.add(User(
            name="Admin User",
            email=email,
            hashed_password=Hasher.get_password_hash(password),
            is_admin=True,
            is_verified=True,
        ))
        await session.commit()


@pytest_asyncio.fixture()
async def admin_token(client) -> str:
    email = unique_email("admin")
    await create_admin(email)
    resp = await client.post("/api/auth/signin", json={"email": email, "password": "Admin1234"})
    assert resp.status_code == 200
    return resp.json()["token"]


def png_bytes(size=(8, 8), color=(16, 185, 129)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def feedback_form(**overrides):
    form = {
        "name": "Hana Bekele",
        "email": unique_email("hana"),
        "service": "Healthcare",
        "rating": "4",
        "comment": "The clinic queue moved quickly and staff were helpful.",
        "region": "Addis Ababa",
        "priority": "high",
    }
    form.update(overrides)
    return {k: v for k, v in form.items() if v is not None}
