import logging
import random
from datetime import datetime
from typing import Dict, List, Optional

from examprep.config import Settings, settings as default_settings
from examprep.mastery import apply_review
from examprep.schemas import (
    MasteryRecord,
    MasteryStats,
    PracticeMode,
    PracticeRequest,
    ReviewLogEntry,
    ReviewRequest,
    as_utc,
    utcnow,
)
from examprep.selector import (
    select_cram_questions,
    select_questions,
    select_smart_questions,
)
from examprep.sm2 import SM2Algorithm
from examprep.stats import overall_mastery
from examprep.store import MasteryStore

logger = logging.getLogger(__name__)


class MasteryService:
    """Reads, updates and ranks mastery records through an injected store"""

    def __init__(self, store: MasteryStore, settings: Optional[Settings] = None, rng: Optional[random.Random] = None):
        self.store = store
        self.settings = settings or default_settings
        self.rng = rng or random.Random()

    def _mastery_map(self, user_id: str) -> Dict[int, MasteryRecord]:
        return {record.question_id: record for record in self.store.list_for_user(user_id)}

    def update_mastery(self, request: ReviewRequest, now: Optional[datetime] = None) -> MasteryRecord:
        """
        Apply an answered question and persist the new state.

        Args:
            request: Validated review input
            now: Review time (defaults to the current UTC time)

        Returns:
            The updated MasteryRecord
        """
        now = as_utc(now) if now else utcnow()
        existing = self.store.get(request.user_id, request.question_id)

        updated = apply_review(
            existing,
            request.is_correct,
            request.is_cram_mode,
            request.exam_days_remaining,
            now,
            user_id=request.user_id,
            question_id=request.question_id,
        )
        self.store.upsert(updated)
        self.store.log_review(ReviewLogEntry(
            user_id=request.user_id,
            question_id=request.question_id,
            is_correct=request.is_correct,
            quality=SM2Algorithm.map_to_quality(request.is_correct),
            is_cram_mode=request.is_cram_mode,
            exam_days_remaining=request.exam_days_remaining if request.is_cram_mode else None,
            interval_days=updated.interval_days,
            reviewed_at=now,
        ))

        logger.info(
            "User %s answered question %s %s; next review in %.2f days",
            request.user_id, request.question_id,
            "correctly" if request.is_correct else "incorrectly",
            updated.interval_days,
        )
        return updated

    def review(
        self,
        user_id: str,
        question_id: int,
        is_correct: bool,
        is_cram_mode: bool = False,
        exam_days_remaining: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> MasteryRecord:
        """Validate loose arguments and apply the review"""
        if exam_days_remaining is None:
            exam_days_remaining = self.settings.default_exam_days
        request = ReviewRequest(
            user_id=user_id,
            question_id=question_id,
            is_correct=is_correct,
            is_cram_mode=is_cram_mode,
            exam_days_remaining=exam_days_remaining,
        )
        return self.update_mastery(request, now)

    def get_mastery_for_question(self, user_id: str, question_id: int) -> Optional[MasteryRecord]:
        return self.store.get(user_id, question_id)

    def get_mastery_for_user(self, user_id: str) -> List[MasteryRecord]:
        return self.store.list_for_user(user_id)

    def get_smart_questions(
        self,
        user_id: str,
        question_ids: List[int],
        count: int,
        now: Optional[datetime] = None,
    ) -> List[int]:
        return select_smart_questions(question_ids, self._mastery_map(user_id), count, now or utcnow())

    def get_cram_questions(
        self,
        user_id: str,
        question_ids: List[int],
        exam_days: int,
        count: int,
        now: Optional[datetime] = None,
    ) -> List[int]:
        return select_cram_questions(question_ids, self._mastery_map(user_id), count, exam_days, now or utcnow())

    def select_practice_questions(self, request: PracticeRequest, now: Optional[datetime] = None) -> List[int]:
        """Ordered question IDs for a practice session"""
        if request.mode == PracticeMode.RANDOM:
            # Random practice never touches mastery state
            mastery = {}
        else:
            mastery = self._mastery_map(request.user_id)

        selected = select_questions(
            request.mode,
            request.question_ids,
            mastery,
            request.count,
            request.exam_days_remaining,
            now or utcnow(),
            rng=self.rng,
        )
        logger.info(
            "Selected %d of %d questions for user %s (%s mode)",
            len(selected), len(request.question_ids), request.user_id, request.mode.value,
        )
        return selected

    def get_due_questions(self, user_id: str, now: Optional[datetime] = None, limit: int = 50) -> List[int]:
        """Question IDs whose next review has passed, earliest first"""
        now = as_utc(now) if now else utcnow()
        due = [
            record for record in self.store.list_for_user(user_id)
            if record.next_review_at is not None and record.next_review_at <= now
        ]
        due.sort(key=lambda record: record.next_review_at)
        return [record.question_id for record in due[:limit]]

    def get_overall_mastery(self, user_id: str, total_questions: int, now: Optional[datetime] = None) -> MasteryStats:
        return overall_mastery(self.store.list_for_user(user_id), total_questions, now or utcnow())
