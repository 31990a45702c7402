import logging
from datetime import datetime, timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.future import select

from database import AsyncSessionLocal
from models.user_model import User
from reset_db import reset
from utils.auth_utils import (
    Hasher, create_user_token, decode_access_token, generate_otp, otp_matches, token_claims
)
from utils.email_service import EmailService
from utils.file_utils import CHUNK_SIZE, _read_upload, remove_upload, upload_path


def test_generate_otp_is_six_digits_with_expiry():
    code, expires_at = generate_otp()
    assert len(code) == 6 and code.isdigit()
    assert timedelta(minutes=9) < expires_at - datetime.utcnow() <= timedelta(minutes=10)


def test_otp_matches():
    assert otp_matches("123456", "123456")
    assert not otp_matches("123456", "654321")
    assert not otp_matches(None, "123456")
    assert not otp_matches("", "")


def test_password_hash_round_trip():
    hashed = Hasher.get_password_hash("Secret123")
    assert hashed != "Secret123"
    assert Hasher.verify_password("Secret123", hashed)
    assert not Hasher.verify_password("secret123", hashed)


def test_token_claims_shape():
    user = SimpleNamespace(id=7, email="abel@x.com", name="Abel", is_admin=True, avatar="/uploads/a.png")
    assert token_claims(user) == {
        "sub": "7", "id": "7", "email": "abel@x.com", "name": "Abel",
        "isAdmin": True, "avatar": "/uploads/a.png",
    }
    claims = decode_access_token(create_user_token(user))
    assert claims["sub"] == "7"
    assert "exp" in claims


@pytest.mark.asyncio
async def test_email_failure_is_logged_not_raised(caplog):
    with patch("utils.email_service.FastMail.send_message", new=AsyncMock(side_effect=OSError("no route"))):
        with caplog.at_level(logging.ERROR, logger="utils.email_service"):
            sent = await EmailService.send_verification_email("abel@x.com", "123456", "Abel")
    assert sent is False
    assert "no route" in caplog.text


@pytest.mark.asyncio
async def test_suppressed_delivery_logs_code(caplog):
    with patch("utils.email_service.FastMail.send_message", new=AsyncMock()) as send:
        with caplog.at_level(logging.INFO, logger="utils.email_service"):
            sent = await EmailService.send_verification_email("abel@x.com", "654321", "Abel")
    assert sent is True
    send.assert_awaited_once()
    assert "654321" in caplog.text


@pytest.mark.asyncio
async def test_reset_db_recreates_empty_schema(client):
    async with AsyncSessionLocal() as session:
        session.add(User(name="Gone Soon", email="gone@civicvoice.et", hashed_password="x"))
        await session.commit()

    await reset()

    async with AsyncSessionLocal() as session:
        assert await session.scalar(select(func.count(User.id))) == 0
    health = await client.get("/health")
    assert health.json()["database"] == "connected"


class EndlessUpload:
    filename = "endless.bin"

    def __init__(self):
        self.bytes_read = 0

    async def read(self, size=-1):
        assert size > 0, "upload must be read in bounded chunks"
        self.bytes_read += size
        return b"\0" * size


@pytest.mark.asyncio
async def test_read_upload_stops_at_size_limit():
    upload = EndlessUpload()
    with patch("utils.file_utils.MAX_UPLOAD_BYTES", 100_000):
        with pytest.raises(HTTPException) as exc_info:
            await _read_upload(upload)
    assert exc_info.value.status_code == 413
    assert upload.bytes_read <= 100_000 + CHUNK_SIZE


def test_remove_upload_only_touches_upload_dir(tmp_path):
    kept = tmp_path / "keep.txt"
    kept.write_text("x")
    stored = upload_path() / "avatar-test-remove.png"
    stored.write_bytes(b"x")

    assert remove_upload("/uploads/avatar-test-remove.png")
    assert not stored.exists()
    assert not remove_upload("/uploads/avatar-test-remove.png")
    assert not remove_upload(str(kept))
    assert not remove_upload("/uploads/../" + kept.name)
    assert kept.exists()
