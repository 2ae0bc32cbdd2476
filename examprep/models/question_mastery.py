from sqlalchemy import Column, Integer, String, Float, DateTime, Index, UniqueConstraint
from examprep.database import Base

class QuestionMastery(Base):
    """SM-2 spaced repetition state per (user, question)"""
    __tablename__ = "question_mastery"
    __table_args__ = (
        UniqueConstraint("user_id", "question_id", name="uq_mastery_user_question"),
        Index("idx_mastery_user_next_review", "user_id", "next_review_at"),
    )
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    question_id = Column(Integer, nullable=False, index=True)
    
    # SM-2 algorithm fields
    ease_factor = Column(Float, nullable=False, default=2.5)
    interval_days = Column(Float, nullable=False, default=0)  # fractional in cram mode
    repetitions = Column(Integer, nullable=False, default=0)  # consecutive successes
    
    next_review_at = Column(DateTime(timezone=True), index=True)
    last_reviewed_at = Column(DateTime(timezone=True))
    
    quality_sum = Column(Integer, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)
