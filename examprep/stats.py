from datetime import datetime, timedelta
from typing import List

from examprep.mastery import record_level
from examprep.schemas import MasteryLevel, MasteryRecord, MasteryStats, as_utc
from examprep.sm2 import DEFAULT_EASE_FACTOR


def overall_mastery(records: List[MasteryRecord], total_questions: int, now: datetime) -> MasteryStats:
    """
    Summarise a user's mastery records for the stats dashboard.

    "Today" is the calendar day of `now` in `now`'s own timezone. due_today
    counts records due within today plus every overdue record, so an item
    due earlier today and already past `now` is counted in both terms.
    """
    now = as_utc(now) if now.tzinfo is None else now
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    tomorrow = today + timedelta(days=1)

    level_counts = {level: 0 for level in MasteryLevel}
    due_today = 0
    overdue_count = 0

    for record in records:
        level_counts[record_level(record)] += 1

        if record.next_review_at is None:
            continue
        if record.next_review_at < now:
            overdue_count += 1
        if today <= record.next_review_at < tomorrow:
            due_today += 1

    if records:
        average_ease_factor = sum(r.ease_factor for r in records) / len(records)
    else:
        average_ease_factor = DEFAULT_EASE_FACTOR

    reviewed_question_ids = {r.question_id for r in records}

    return MasteryStats(
        total_questions=total_questions,
        new_count=total_questions - len(reviewed_question_ids),
        learning_count=level_counts[MasteryLevel.LEARNING],
        reviewing_count=level_counts[MasteryLevel.REVIEWING],
        mastered_count=level_counts[MasteryLevel.MASTERED],
        average_ease_factor=average_ease_factor,
        due_today=due_today + overdue_count,
        overdue_count=overdue_count,
    )
