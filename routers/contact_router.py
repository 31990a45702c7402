import logging

from fastapi import APIRouter, BackgroundTasks, status

from schemas.feedback_schema import ContactCreate
from schemas.user_schema import MessageResponse
from utils.email_service import EmailService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["contact"])


@router.post("/contact", response_model=MessageResponse, status_code=status.HTTP_202_ACCEPTED)
async def contact(data: ContactCreate, background_tasks: BackgroundTasks):
    logger.info(f"Contact message from {data.email}: {data.subject}")
    background_tasks.add_task(
        EmailService.send_contact_message, data.name, str(data.email), data.subject, data.message
    )
    return {"message": "Thanks for reaching out. We'll get back to you soon."}
