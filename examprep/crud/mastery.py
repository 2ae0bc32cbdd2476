import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from examprep.models import QuestionMastery
from examprep.schemas import MasteryRecord, as_utc
from datetime import datetime
from typing import List, Optional

logger = logging.getLogger(__name__)

STATE_FIELDS = (
    "ease_factor",
    "interval_days",
    "repetitions",
    "next_review_at",
    "last_reviewed_at",
    "quality_sum",
    "review_count",
)

def get_mastery(db: Session, user_id: str, question_id: int) -> Optional[QuestionMastery]:
    """Get the mastery row for one (user, question) pair"""
    return db.query(QuestionMastery).filter(
        QuestionMastery.user_id == user_id,
        QuestionMastery.question_id == question_id
    ).first()

def list_mastery_for_user(db: Session, user_id: str) -> List[QuestionMastery]:
    """Get all mastery rows for user"""
    return db.query(QuestionMastery).filter(
        QuestionMastery.user_id == user_id
    ).all()

def _apply_state(row: QuestionMastery, record: MasteryRecord):
    for field in STATE_FIELDS:
        setattr(row, field, getattr(record, field))

def upsert_mastery(db: Session, record: MasteryRecord) -> QuestionMastery:
    """
    Insert or update the mastery row for record's (user, question) pair.
    
    A concurrent insert of the same pair trips the unique constraint; the
    insert is rolled back and the row written by the other writer is updated.
    """
    row = get_mastery(db, record.user_id, record.question_id)
    if row:
        _apply_state(row, record)
        db.commit()
        db.refresh(row)
        return row
    
    row = QuestionMastery(user_id=record.user_id, question_id=record.question_id)
    _apply_state(row, record)
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(
            "Mastery row for user=%s question=%s created concurrently, updating instead",
            record.user_id, record.question_id
        )
        row = get_mastery(db, record.user_id, record.question_id)
        if row is None:
            raise
        _apply_state(row, record)
        db.commit()
    db.refresh(row)
    return row

def get_due_question_ids(db: Session, user_id: str, now: datetime, limit: int = 50) -> List[int]:
    """Get question IDs due for review, most overdue first"""
    rows = db.query(QuestionMastery.question_id).filter(
        QuestionMastery.user_id == user_id,
        QuestionMastery.next_review_at <= as_utc(now)
    ).order_by(QuestionMastery.next_review_at.asc()).limit(limit).all()
    return [row.question_id for row in rows]
