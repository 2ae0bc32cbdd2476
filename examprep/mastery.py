import logging
from datetime import datetime, timedelta
from typing import Optional

from examprep.schemas import MasteryLevel, MasteryRecord, QuestionMasteryView, as_utc
from examprep.sm2 import PASSING_QUALITY, SM2Algorithm

logger = logging.getLogger(__name__)


def apply_review(
    record: Optional[MasteryRecord],
    is_correct: bool,
    is_cram_mode: bool,
    exam_days_remaining: int,
    now: datetime,
    user_id: Optional[str] = None,
    question_id: Optional[int] = None,
) -> MasteryRecord:
    """
    Apply one answered question to a mastery record.

    A missing record is treated as a fresh one seeded with EF 2.5, zero
    interval and zero repetitions. user_id and question_id are required in
    that case to give the new record its identity.

    Returns:
        A new MasteryRecord; the input record is left untouched.
    """
    if record is None:
        if user_id is None or question_id is None:
            raise ValueError("user_id and question_id are required to create a mastery record")
        record = MasteryRecord(user_id=user_id, question_id=question_id)

    now = as_utc(now)
    quality = SM2Algorithm.map_to_quality(is_correct)
    ease_factor = SM2Algorithm.update_ease(record.ease_factor, quality)

    if quality < PASSING_QUALITY:
        # Failed recall - reset
        repetitions = 0
        if is_cram_mode:
            interval_days = SM2Algorithm.cram_interval(0, exam_days_remaining)
        else:
            interval_days = 1
    else:
        repetitions = record.repetitions + 1
        if is_cram_mode:
            interval_days = SM2Algorithm.cram_interval(repetitions, exam_days_remaining)
        else:
            interval_days = SM2Algorithm.next_interval(
                record.repetitions, ease_factor, record.interval_days
            )

    updated = MasteryRecord(
        user_id=record.user_id,
        question_id=record.question_id,
        ease_factor=ease_factor,
        interval_days=interval_days,
        repetitions=repetitions,
        next_review_at=now + timedelta(days=interval_days),
        last_reviewed_at=now,
        quality_sum=record.quality_sum + quality,
        review_count=record.review_count + 1,
    )

    logger.debug(
        "Review user=%s question=%s correct=%s cram=%s: ef %.2f->%.2f reps %d->%d interval %.3f->%.3f",
        record.user_id, record.question_id, is_correct, is_cram_mode,
        record.ease_factor, updated.ease_factor,
        record.repetitions, updated.repetitions,
        record.interval_days, updated.interval_days,
    )
    return updated


def mastery_level(repetitions: int, easiness_factor: float, review_count: int) -> MasteryLevel:
    """Derive the display level; recomputed on every read, never stored"""
    if review_count == 0:
        return MasteryLevel.NEW
    if repetitions < 3:
        return MasteryLevel.LEARNING
    if repetitions >= 6 and easiness_factor >= 2.0:
        return MasteryLevel.MASTERED
    return MasteryLevel.REVIEWING


def record_level(record: MasteryRecord) -> MasteryLevel:
    return mastery_level(record.repetitions, record.ease_factor, record.review_count)


def to_question_mastery(record: MasteryRecord) -> QuestionMasteryView:
    """Convert a stored record to its display shape"""
    return QuestionMasteryView(
        question_id=record.question_id,
        ease_factor=record.ease_factor,
        interval_days=record.interval_days,
        repetitions=record.repetitions,
        next_review_at=record.next_review_at,
        last_reviewed_at=record.last_reviewed_at,
        mastery_level=record_level(record),
        review_count=record.review_count,
    )
