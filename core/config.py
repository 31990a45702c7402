# core/config.py

import os
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()


def _env_bool(key: str, default: bool = False) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


APP_NAME = "CivicVoice"
APP_DEBUG = _env_bool("APP_DEBUG")

SECRET_KEY = os.getenv("JWT_SECRET", "change-me-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
OTP_EXPIRE_MINUTES = int(os.getenv("OTP_EXPIRE_MINUTES", "10"))

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./civicvoice.db")

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(15 * 1024 * 1024)))

ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:8080",
    "http://localhost:4173",
]
if os.getenv("FRONTEND_ORIGIN"):
    ALLOWED_ORIGINS.append(os.getenv("FRONTEND_ORIGIN"))

MAIL_USERNAME = os.getenv("MAIL_USERNAME", "")
MAIL_PASSWORD = os.getenv("MAIL_PASSWORD", "")
MAIL_FROM = os.getenv("MAIL_FROM", "no-reply@civicvoice.et")
MAIL_FROM_NAME = os.getenv("MAIL_FROM_NAME", APP_NAME)
MAIL_PORT = int(os.getenv("MAIL_PORT", "2525"))
MAIL_SERVER = os.getenv("MAIL_SERVER", "localhost")
MAIL_STARTTLS = _env_bool("MAIL_STARTTLS", True)
MAIL_SSL_TLS = _env_bool("MAIL_SSL_TLS")
MAIL_SUPPRESS_SEND = _env_bool("MAIL_SUPPRESS_SEND")
SUPPORT_EMAIL = os.getenv("SUPPORT_EMAIL", MAIL_FROM)
