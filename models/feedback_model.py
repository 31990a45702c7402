# models/feedback_model.py
import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, ForeignKey
from database import Base


class FeedbackStatus(str, enum.Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class FeedbackPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    service = Column(String(100), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    status = Column(
        Enum(FeedbackStatus, native_enum=False, values_callable=_enum_values, length=20),
        default=FeedbackStatus.PENDING,
        nullable=False,
    )
    region = Column(String(50), nullable=True)
    priority = Column(
        Enum(FeedbackPriority, native_enum=False, values_callable=_enum_values, length=10),
        default=FeedbackPriority.MEDIUM,
        nullable=False,
    )
    attachment = Column(String, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Feedback(id={self.id}, email={self.email}, status={self.status.value})>"
