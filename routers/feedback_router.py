import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from dependencies.auth import get_optional_user, require_admin
from models.user_model import User
from schemas.feedback_schema import (
    FeedbackCreate, FeedbackCreated, FeedbackOut, FeedbackPage,
    FeedbackStatusUpdate, ServiceOut, PUBLIC_SECTORS
)
from services.feedback_service import FeedbackService
from utils.file_utils import save_attachment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["feedback"])


@router.get("/services", response_model=List[ServiceOut])
async def list_services():
    return [{"id": i, "name": name} for i, name in enumerate(PUBLIC_SECTORS, start=1)]


@router.get("/feedback", response_model=FeedbackPage)
async def list_feedback(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    items, total = await FeedbackService(db).list_feedback(page, limit)
    return {"items": items, "page": page, "limit": limit, "total": total}


@router.post("/feedback", response_model=FeedbackCreated, status_code=status.HTTP_201_CREATED)
async def submit_feedback(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    service: Optional[str] = Form(None),
    rating: Optional[str] = Form(None),
    comment: Optional[str] = Form(None),
    region: Optional[str] = Form(None),
    priority: Optional[str] = Form(None),
    attachment: Optional[UploadFile] = File(None),
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    fields = {
        "name": name, "email": email, "service": service,
        "rating": rating, "comment": comment, "region": region, "priority": priority,
    }
    try:
        data = FeedbackCreate(**{k: v for k, v in fields.items() if v is not None})
    except ValidationError as e:
        errors = [{**err, "loc": ("body", *err["loc"])} for err in e.errors(include_url=False)]
        raise RequestValidationError(errors)

    stored_path = None
    if attachment is not None and attachment.filename:
        stored_path = await save_attachment(attachment, prefix="feedback")

    feedback = await FeedbackService(db).create_feedback(data, user=current_user, attachment=stored_path)
    return {
        "id": feedback.id,
        "status": feedback.status,
        "message": "Thank you! Your feedback has been received.",
    }


@router.patch("/feedback/{feedback_id}/status", response_model=FeedbackOut)
async def update_feedback_status(
    feedback_id: int,
    data: FeedbackStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    logger.info(f"Admin {admin.id} updating feedback {feedback_id} to {data.status.value}")
    return await FeedbackService(db).update_status(feedback_id, data.status)
