from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from typing import List, Optional
from datetime import datetime, timezone
from enum import Enum

from examprep.sm2 import DEFAULT_EASE_FACTOR


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise a datetime to aware UTC; naive values are taken as UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MasteryLevel(str, Enum):
    """Coarse display classification derived from SM-2 state"""
    NEW = "new"
    LEARNING = "learning"
    REVIEWING = "reviewing"
    MASTERED = "mastered"


class PracticeMode(str, Enum):
    SMART = "smart"
    CRAM = "cram"
    RANDOM = "random"


class MasteryRecord(BaseModel):
    """Spaced repetition state for one (user, question) pair"""
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    question_id: int
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval_days: float = 0
    repetitions: int = 0
    next_review_at: Optional[datetime] = None
    last_reviewed_at: Optional[datetime] = None
    quality_sum: int = 0
    review_count: int = 0

    @field_validator("next_review_at", "last_reviewed_at")
    @classmethod
    def _normalise_timestamps(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class QuestionMasteryView(BaseModel):
    """Mastery record as shown on badges and in the practice UI"""
    question_id: int
    ease_factor: float
    interval_days: float
    repetitions: int
    next_review_at: Optional[datetime] = None
    last_reviewed_at: Optional[datetime] = None
    mastery_level: MasteryLevel
    review_count: int


class MasteryStats(BaseModel):
    """Dashboard-level summary of a user's mastery records"""
    total_questions: int
    new_count: int
    learning_count: int
    reviewing_count: int
    mastered_count: int
    average_ease_factor: float
    due_today: int
    overdue_count: int


class ReviewRequest(BaseModel):
    """Schema for a single answered question"""
    user_id: str = Field(min_length=1)
    question_id: int
    is_correct: StrictBool
    is_cram_mode: bool = False
    exam_days_remaining: int = Field(default=7, ge=0)


class PracticeRequest(BaseModel):
    """Schema for practice batch selection"""
    user_id: str = Field(min_length=1)
    mode: PracticeMode = PracticeMode.SMART
    question_ids: List[int]
    count: int = Field(ge=0)
    exam_days_remaining: int = Field(default=7, ge=0)


class ReviewLogEntry(BaseModel):
    """Schema for review history rows"""
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    question_id: int
    is_correct: bool
    quality: int
    is_cram_mode: bool = False
    exam_days_remaining: Optional[int] = None
    interval_days: float
    reviewed_at: datetime

    @field_validator("reviewed_at")
    @classmethod
    def _normalise_reviewed_at(cls, value: datetime) -> datetime:
        return as_utc(value)
