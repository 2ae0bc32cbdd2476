from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime
from datetime import datetime, timezone
from examprep.database import Base

class ReviewLog(Base):
    """Record of a single answered question"""
    __tablename__ = "review_log"
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    question_id = Column(Integer, nullable=False, index=True)
    
    is_correct = Column(Boolean, nullable=False)
    quality = Column(Integer, nullable=False)  # 1 or 4
    is_cram_mode = Column(Boolean, nullable=False, default=False)
    exam_days_remaining = Column(Integer)
    interval_days = Column(Float, nullable=False)  # interval scheduled by this review
    
    reviewed_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
