from datetime import datetime
from typing import Dict, Optional

from examprep.mastery import record_level
from examprep.schemas import MasteryLevel, MasteryRecord, as_utc
from examprep.sm2 import MIN_EASE_FACTOR

SECONDS_PER_DAY = 24 * 60 * 60

# Base scores by mastery level
LEVEL_SCORES: Dict[MasteryLevel, float] = {
    MasteryLevel.NEW: 0,
    MasteryLevel.LEARNING: 100,
    MasteryLevel.REVIEWING: 200,
    MasteryLevel.MASTERED: 300,
}

MAX_OVERDUE_BOOST = 50
OVERDUE_BOOST_PER_DAY = 10
MAX_NOT_DUE_PENALTY = 100
NOT_DUE_PENALTY_PER_DAY = 5
EASE_WEIGHT = 20
REPETITION_WEIGHT = 5


def calculate_priority(record: Optional[MasteryRecord], now: datetime) -> float:
    """
    Rank a question for review. Lower score = higher priority.

    Unseen questions score 0. Seen questions start from their level's base
    score, are pulled up when overdue and pushed down when not yet due (both
    capped), shifted by ease factor and pushed down for each consecutive
    success.
    """
    if record is None:
        return 0

    score = LEVEL_SCORES[record_level(record)]

    if record.next_review_at is not None:
        overdue_days = (as_utc(now) - record.next_review_at).total_seconds() / SECONDS_PER_DAY
        if overdue_days > 0:
            score -= min(MAX_OVERDUE_BOOST, overdue_days * OVERDUE_BOOST_PER_DAY)
        else:
            score += min(MAX_NOT_DUE_PENALTY, abs(overdue_days) * NOT_DUE_PENALTY_PER_DAY)

    # Ease adjustment: each 0.1 of ease above the floor lowers the score by 2
    score -= (record.ease_factor - MIN_EASE_FACTOR) * EASE_WEIGHT

    # Confidence
    score += record.repetitions * REPETITION_WEIGHT

    return score
