from fastapi import APIRouter, BackgroundTasks, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from dependencies.auth import get_current_user
from models.user_model import User
from schemas.user_schema import (
    UserCreate, UserLogin, OTPVerify, OTPResend, UserOut,
    RegisterResponse, TokenResponse, AvatarResponse, MessageResponse
)
from services.user_service import UserService
from utils.file_utils import remove_upload, save_image

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, background_tasks: BackgroundTasks, db: AsyncSession = Depends(get_db)):
    service = UserService(db)
    user = await service.create_user(user_data, background_tasks)
    return {
        "message": "Registration successful! Check your inbox for the verification code.",
        "email": user.email,
    }


@router.post("/activate", response_model=TokenResponse)
async def activate(data: OTPVerify, db: AsyncSession = Depends(get_db)):
    service = UserService(db)
    user, token = await service.verify_otp(data)
    return {"message": "OTP verified successfully", "token": token, "user": user}


@router.post("/resend-otp", response_model=MessageResponse, status_code=status.HTTP_202_ACCEPTED)
async def resend_otp(data: OTPResend, background_tasks: BackgroundTasks, db: AsyncSession = Depends(get_db)):
    await UserService(db).resend_otp(str(data.email), background_tasks)
    return {"message": "If the account is awaiting activation, a new verification code has been sent."}


@router.post("/signin", response_model=TokenResponse)
async def signin(user_data: UserLogin, db: AsyncSession = Depends(get_db)):
    service = UserService(db)
    user, token = await service.authenticate_user(user_data)
    return {"message": "Signed in successfully", "token": token, "user": user}


@router.get("/me", response_model=UserOut)
async def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/logout", response_model=MessageResponse)
async def logout():
    # Tokens are stateless; the client discards its copy
    return {"message": "Logged out"}


@router.post("/avatar", response_model=AvatarResponse)
async def upload_avatar(
    avatar: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    previous = current_user.avatar
    path = await save_image(avatar, prefix=f"avatar-{current_user.id}")
    await UserService(db).update_avatar(current_user, path)
    if previous and previous != path:
        remove_upload(previous)
    return {"message": "Avatar updated", "avatar": path}
