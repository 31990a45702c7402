from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from models.feedback_model import FeedbackPriority, FeedbackStatus

ETHIOPIAN_REGIONS = (
    "Addis Ababa",
    "Afar",
    "Amhara",
    "Benishangul-Gumuz",
    "Dire Dawa",
    "Gambela",
    "Harari",
    "Oromia",
    "Sidama",
    "SNNPR",
    "Somali",
    "Tigray",
)

PUBLIC_SECTORS = (
    "Healthcare",
    "Education",
    "Infrastructure",
    "Agriculture",
    "Justice",
    "Public Safety",
    "Environment",
    "Economy",
    "Social Services",
    "Technology",
)


class FeedbackCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    service: str = Field(..., min_length=1, max_length=100)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=10, max_length=1000)
    region: Optional[str] = None
    priority: FeedbackPriority = FeedbackPriority.MEDIUM

    @field_validator("name", "email", "service", "comment", "region", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("region")
    @classmethod
    def known_region(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        if value not in ETHIOPIAN_REGIONS:
            raise ValueError("Please select a valid region")
        return value


class FeedbackOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    service: str
    rating: int
    comment: str
    status: FeedbackStatus
    region: Optional[str] = None
    priority: FeedbackPriority
    attachment: Optional[str] = None
    user_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class FeedbackCreated(BaseModel):
    id: int
    status: FeedbackStatus
    message: str


class FeedbackPage(BaseModel):
    items: List[FeedbackOut]
    page: int
    limit: int
    total: int


class FeedbackStatusUpdate(BaseModel):
    status: FeedbackStatus


class ServiceOut(BaseModel):
    id: int
    name: str


class DashboardOut(BaseModel):
    scope: str
    total: int
    by_status: Dict[str, int]
    average_rating: Optional[float] = None
    recent: List[FeedbackOut]


class ContactCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    subject: str = Field(..., min_length=5, max_length=200)
    message: str = Field(..., min_length=20, max_length=2000)

    @field_validator("name", "email", "subject", "message", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value
