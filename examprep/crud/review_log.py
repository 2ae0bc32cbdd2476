from sqlalchemy.orm import Session
from examprep.models import ReviewLog
from examprep.schemas import ReviewLogEntry
from typing import List

def record_review_log(db: Session, entry: ReviewLogEntry) -> ReviewLog:
    """Record an answered question"""
    log = ReviewLog(**entry.model_dump())
    db.add(log)
    db.commit()
    db.refresh(log)
    return log

def get_review_logs(db: Session, user_id: str, limit: int = 50) -> List[ReviewLog]:
    """Get recent reviews for a user"""
    return db.query(ReviewLog).filter(
        ReviewLog.user_id == user_id
    ).order_by(ReviewLog.reviewed_at.desc(), ReviewLog.id.desc()).limit(limit).all()
