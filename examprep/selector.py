import logging
import math
import random
from datetime import datetime
from typing import Iterable, List, Mapping, Optional, Tuple

from examprep.priority import calculate_priority
from examprep.schemas import MasteryRecord, PracticeMode, as_utc

logger = logging.getLogger(__name__)

NEW_QUESTION_RATIO = 0.3


def _unique(question_ids: Iterable[int]) -> List[int]:
    """Drop repeated IDs, keeping the first occurrence"""
    return list(dict.fromkeys(question_ids))


def _by_priority(scored: List[Tuple[int, float]]) -> List[int]:
    # sorted() is stable, so ties keep pool order
    return [question_id for question_id, _ in sorted(scored, key=lambda item: item[1])]


def select_cram_questions(
    all_question_ids: List[int],
    mastery_by_question: Mapping[int, MasteryRecord],
    count: int,
    exam_days_remaining: int,
    now: datetime,
) -> List[int]:
    """
    Pick the questions most at risk of being forgotten before the exam.

    Every candidate is scored and the lowest scores win; there is no mixing
    of new and seen material.
    """
    if count <= 0:
        return []

    now = as_utc(now)
    scored = [
        (question_id, calculate_priority(mastery_by_question.get(question_id), now))
        for question_id in _unique(all_question_ids)
    ]
    selected = _by_priority(scored)[:count]

    logger.debug(
        "Cram selection: %d candidates, %d selected, exam in %d days",
        len(scored), len(selected), exam_days_remaining,
    )
    return selected


def select_smart_questions(
    all_question_ids: List[int],
    mastery_by_question: Mapping[int, MasteryRecord],
    count: int,
    now: datetime,
) -> List[int]:
    """
    Pick a review session: due questions first, then a 30% trickle of new
    questions, then not-yet-due filler, then any remaining new questions.
    """
    if count <= 0:
        return []

    now = as_utc(now)
    candidates = _unique(all_question_ids)

    def is_new(question_id: int) -> bool:
        record = mastery_by_question.get(question_id)
        return record is None or record.review_count == 0

    def is_due(question_id: int) -> bool:
        record = mastery_by_question[question_id]
        return record.next_review_at is not None and record.next_review_at <= now

    def score(question_ids: List[int]) -> List[Tuple[int, float]]:
        return [(qid, calculate_priority(mastery_by_question[qid], now)) for qid in question_ids]

    new_questions = [qid for qid in candidates if is_new(qid)]
    seen = [qid for qid in candidates if not is_new(qid)]
    due = _by_priority(score([qid for qid in seen if is_due(qid)]))
    not_due = _by_priority(score([qid for qid in seen if not is_due(qid)]))

    result = due[:count]

    new_slots = min(math.ceil((count - len(result)) * NEW_QUESTION_RATIO), len(new_questions))
    result += new_questions[:new_slots][:count - len(result)]

    result += not_due[:count - len(result)]

    result += new_questions[new_slots:][:count - len(result)]

    logger.debug(
        "Smart selection: due=%d new=%d (quota %d) not_due=%d -> %d selected",
        len(due), len(new_questions), new_slots, len(not_due), len(result),
    )
    return result


def select_random_questions(
    all_question_ids: List[int],
    count: int,
    rng: Optional[random.Random] = None,
) -> List[int]:
    """Plain shuffle; mastery state is not consulted"""
    if count <= 0:
        return []
    shuffled = _unique(all_question_ids)
    (rng or random).shuffle(shuffled)
    return shuffled[:count]


def select_questions(
    mode: PracticeMode,
    all_question_ids: List[int],
    mastery_by_question: Mapping[int, MasteryRecord],
    count: int,
    exam_days_remaining: int,
    now: datetime,
    rng: Optional[random.Random] = None,
) -> List[int]:
    """Dispatch to the selector for a practice mode"""
    mode = PracticeMode(mode)
    if mode == PracticeMode.SMART:
        return select_smart_questions(all_question_ids, mastery_by_question, count, now)
    if mode == PracticeMode.CRAM:
        return select_cram_questions(all_question_ids, mastery_by_question, count, exam_days_remaining, now)
    return select_random_questions(all_question_ids, count, rng)
