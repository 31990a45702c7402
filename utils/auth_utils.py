# utils/auth_utils.py

import secrets
import string
from datetime import datetime, timedelta, timezone

from passlib.context import CryptContext
from jose import jwt
from core.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES, OTP_EXPIRE_MINUTES

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

OTP_LENGTH = 6


class Hasher:
    @staticmethod
    def get_password_hash(password: str) -> str:
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return pwd_context.verify(plain_password, hashed_password)


def generate_otp() -> tuple[str, datetime]:
    """Return a fresh numeric OTP and the naive UTC time it stops being valid."""
    code = "".join(secrets.choice(string.digits) for _ in range(OTP_LENGTH))
    expires_at = datetime.utcnow() + timedelta(minutes=OTP_EXPIRE_MINUTES)
    return code, expires_at


def otp_matches(stored: str | None, submitted: str) -> bool:
    if not stored:
        return False
    return secrets.compare_digest(stored, submitted)


def token_claims(user) -> dict:
    user_id = str(user.id)
    return {
        "sub": user_id,
        "id": user_id,
        "email": user.email,
        "name": user.name,
        "isAdmin": bool(user.is_admin),
        "avatar": user.avatar,
    }


def create_access_token(data: dict, expires_delta: timedelta = None) -> str:
    to_encode = dict(data)
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_user_token(user) -> str:
    return create_access_token(token_claims(user))


def decode_access_token(token: str) -> dict:
    """Verify signature and expiry. Raises jose.JWTError on any failure."""
    return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
