import logging
from datetime import datetime

from fastapi import BackgroundTasks, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.user_model import User
from schemas.user_schema import UserCreate, UserLogin, OTPVerify
from utils.auth_utils import Hasher, create_user_token, generate_otp, otp_matches
from utils.email_service import EmailService

logger = logging.getLogger(__name__)

INVALID_OTP = "Invalid email or verification code"
INVALID_CREDENTIALS = "Invalid credentials"


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str):
        return await self.db.scalar(select(User).where(User.email == email.lower()))

    async def get_by_id(self, user_id: int):
        return await self.db.get(User, user_id)

    async def create_user(self, user_data: UserCreate, background_tasks: BackgroundTasks = None):
        email = str(user_data.email).lower()
        if await self.get_by_email(email):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

        otp, otp_expires_at = generate_otp()
        new_user = User(
            name=user_data.name,
            email=email,
            hashed_password=Hasher.get_password_hash(user_data.password),
            is_admin=False,
            is_verified=False,
            otp=otp,
            otp_expires_at=otp_expires_at,
        )
        self.db.add(new_user)
        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent registration won the unique index on email
            await self.db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
        logger.info(f"Registered user {new_user.id} <{email}>, awaiting activation")

        await self._send_code(new_user, otp, background_tasks)
        return new_user

    async def resend_otp(self, email: str, background_tasks: BackgroundTasks = None):
        """Issue a fresh code for an account still awaiting activation.

        Unknown and already-activated emails are ignored silently so the
        caller cannot tell registered addresses apart.
        """
        user = await self.get_by_email(email)
        if not user or user.is_verified:
            logger.info(f"Verification code resend ignored for <{email.lower()}>")
            return

        otp, otp_expires_at = generate_otp()
        user.otp = otp
        user.otp_expires_at = otp_expires_at
        self.db.add(user)
        await self.db.commit()
        logger.info(f"Issued new verification code for user {user.id}")

        await self._send_code(user, otp, background_tasks)

    async def _send_code(self, user: User, otp: str, background_tasks: BackgroundTasks = None):
        if background_tasks is not None:
            background_tasks.add_task(EmailService.send_verification_email, user.email, otp, user.name)
        else:
            await EmailService.send_verification_email(user.email, otp, user.name)

    async def verify_otp(self, data: OTPVerify):
        user = await self.get_by_email(str(data.email))
        if not user or not otp_matches(user.otp, data.otp):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_OTP)
        if user.otp_expires_at and user.otp_expires_at < datetime.utcnow():
            logger.info(f"Expired verification code presented for user {user.id}")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_OTP)

        user.is_verified = True
        user.otp = None
        user.otp_expires_at = None
        self.db.add(user)
        await self.db.commit()
        logger.info(f"User {user.id} activated")
        return user, create_user_token(user)

    async def authenticate_user(self, user_data: UserLogin):
        user = await self.get_by_email(str(user_data.email))
        if not user or not Hasher.verify_password(user_data.password, user.hashed_password):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)
        if not user.is_verified:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account not verified")
        return user, create_user_token(user)

    async def update_avatar(self, user: User, avatar: str):
        user.avatar = avatar
        self.db.add(user)
        await self.db.commit()
        return user
