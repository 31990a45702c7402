# utils/email_service.py

import logging

from fastapi_mail import FastMail, MessageSchema, ConnectionConfig, MessageType
from pydantic import BaseModel

from core import config

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    MAIL_USERNAME: str
    MAIL_PASSWORD: str
    MAIL_FROM: str
    MAIL_FROM_NAME: str
    MAIL_PORT: int
    MAIL_SERVER: str
    MAIL_STARTTLS: bool
    MAIL_SSL_TLS: bool
    USE_CREDENTIALS: bool = True
    VALIDATE_CERTS: bool = True
    SUPPRESS_SEND: int = 0


settings = Settings(
    MAIL_USERNAME=config.MAIL_USERNAME,
    MAIL_PASSWORD=config.MAIL_PASSWORD,
    MAIL_FROM=config.MAIL_FROM,
    MAIL_FROM_NAME=config.MAIL_FROM_NAME,
    MAIL_PORT=config.MAIL_PORT,
    MAIL_SERVER=config.MAIL_SERVER,
    MAIL_STARTTLS=config.MAIL_STARTTLS,
    MAIL_SSL_TLS=config.MAIL_SSL_TLS,
    USE_CREDENTIALS=bool(config.MAIL_USERNAME),
    SUPPRESS_SEND=int(config.MAIL_SUPPRESS_SEND),
)

conf = ConnectionConfig(**settings.model_dump())

OTP_TEMPLATE = """
<div style="font-family:Arial;text-align:center;padding:40px;background:#f0fdf4;">
  <h2 style="color:#10b981;">Welcome to CivicVoice, {name}!</h2>
  <p style="font-size:18px;">Your verification code is</p>
  <h1 style="font-size:50px;letter-spacing:12px;color:#166534;"><b>{code}</b></h1>
  <p>Valid for {minutes} minutes</p>
</div>
"""


class EmailService:
    @staticmethod
    async def send_message(message: MessageSchema) -> bool:
        """Deliver a message. Failures are logged and reported as False, never raised."""
        try:
            fm = FastMail(conf)
            await fm.send_message(message)
        except Exception as e:
            logger.error(f"Email delivery to {message.recipients} failed: {e}")
            return False
        return True

    @staticmethod
    async def send_verification_email(email: str, code: str, name: str = "") -> bool:
        if settings.SUPPRESS_SEND:
            # Offline mode: surface the code in the log so activation can proceed
            logger.info(f"Email delivery suppressed; verification code for {email} is {code}")

        message = MessageSchema(
            subject="Your CivicVoice Verification Code",
            recipients=[email],
            body=OTP_TEMPLATE.format(name=name or "citizen", code=code, minutes=config.OTP_EXPIRE_MINUTES),
            subtype=MessageType.html,
        )
        sent = await EmailService.send_message(message)
        if sent:
            logger.info(f"Verification code sent to {email}")
        return sent

    @staticmethod
    async def send_contact_message(name: str, email: str, subject: str, body: str) -> bool:
        message = MessageSchema(
            subject=f"[CivicVoice contact] {subject}",
            recipients=[config.SUPPORT_EMAIL],
            body=f"From: {name} <{email}>\n\n{body}",
            subtype=MessageType.plain,
        )
        return await EmailService.send_message(message)
