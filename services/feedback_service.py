import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.feedback_model import Feedback, FeedbackStatus
from models.user_model import User
from schemas.feedback_schema import FeedbackCreate

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


class FeedbackService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_feedback(self, data: FeedbackCreate, user: Optional[User] = None, attachment: Optional[str] = None):
        feedback = Feedback(
            name=data.name,
            email=str(data.email).lower(),
            service=data.service,
            rating=data.rating,
            comment=data.comment,
            region=data.region,
            priority=data.priority,
            status=FeedbackStatus.PENDING,
            attachment=attachment,
            user_id=user.id if user else None,
        )
        self.db.add(feedback)
        await self.db.commit()
        logger.info(f"Feedback {feedback.id} submitted for '{feedback.service}' by {feedback.email}")
        return feedback

    async def list_feedback(self, page: int = 1, limit: int = 10):
        total = await self.db.scalar(select(func.count(Feedback.id)))
        result = await self.db.execute(
            select(Feedback)
            .order_by(Feedback.created_at.desc(), Feedback.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return result.scalars().all(), total or 0

    async def update_status(self, feedback_id: int, new_status: FeedbackStatus):
        feedback = await self.db.get(Feedback, feedback_id)
        if feedback is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feedback not found")
        old_status = feedback.status
        feedback.status = new_status
        self.db.add(feedback)
        await self.db.commit()
        await self.db.refresh(feedback)
        logger.info(f"Feedback {feedback_id} status {old_status.value} -> {new_status.value}")
        return feedback

    async def dashboard(self, user: User) -> dict:
        """Aggregate feedback for the dashboard. Admins see everything, citizens their own submissions."""
        conditions = []
        if not user.is_admin:
            conditions.append((Feedback.user_id == user.id) | (Feedback.email == user.email))

        counts = await self.db.execute(
            select(Feedback.status, func.count(Feedback.id)).where(*conditions).group_by(Feedback.status)
        )
        by_status = {s.value: 0 for s in FeedbackStatus}
        for row_status, count in counts.all():
            by_status[FeedbackStatus(row_status).value] = count

        average = await self.db.scalar(select(func.avg(Feedback.rating)).where(*conditions))
        recent = await self.db.execute(
            select(Feedback)
            .where(*conditions)
            .order_by(Feedback.created_at.desc(), Feedback.id.desc())
            .limit(RECENT_LIMIT)
        )
        return {
            "scope": "all" if user.is_admin else "own",
            "total": sum(by_status.values()),
            "by_status": by_status,
            "average_rating": round(float(average), 2) if average is not None else None,
            "recent": recent.scalars().all(),
        }
