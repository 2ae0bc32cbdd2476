import random
import pytest
from datetime import timedelta
from pydantic import ValidationError

from examprep.config import Settings
from examprep.schemas import PracticeMode, PracticeRequest, ReviewRequest
from examprep.service import MasteryService
from examprep.store import InMemoryMasteryStore, SQLAlchemyMasteryStore


@pytest.fixture(params=["sqlalchemy", "memory"])
def service(request, db):
    store = SQLAlchemyMasteryStore(db) if request.param == "sqlalchemy" else InMemoryMasteryStore()
    return MasteryService(store, settings=Settings(default_exam_days=7), rng=random.Random(3))


class TestUpdateMastery:

    def test_creates_record_on_first_review(self, service, now):
        record = service.update_mastery(ReviewRequest(user_id="alice", question_id=7, is_correct=False), now)

        assert record.ease_factor == pytest.approx(1.96)
        assert record.repetitions == 0
        assert record.review_count == 1

        stored = service.get_mastery_for_question("alice", 7)
        assert stored is not None
        assert stored.review_count == 1
        assert stored.next_review_at == now + timedelta(days=1)

    def test_subsequent_reviews_build_on_stored_state(self, service, now):
        for day, correct in enumerate([False, True, True]):
            record = service.update_mastery(
                ReviewRequest(user_id="alice", question_id=7, is_correct=correct),
                now + timedelta(days=day),
            )
        assert record.repetitions == 2
        assert record.interval_days == 6
        assert record.quality_sum == 9
        assert len(service.get_mastery_for_user("alice")) == 1

    def test_review_is_logged(self, service, now):
        service.update_mastery(
            ReviewRequest(user_id="alice", question_id=7, is_correct=True, is_cram_mode=True, exam_days_remaining=3),
            now,
        )
        [entry] = service.store.recent_reviews("alice")
        assert entry.question_id == 7
        assert entry.quality == 4
        assert entry.is_cram_mode
        assert entry.exam_days_remaining == 3
        assert entry.reviewed_at == now

    def test_review_uses_configured_exam_days(self, now):
        service = MasteryService(InMemoryMasteryStore(), settings=Settings(default_exam_days=14))
        record = service.review("alice", 1, True, is_cram_mode=True, now=now)
        assert record.interval_days == pytest.approx(4 / 24 * 2)


class TestRequestValidation:

    def test_non_boolean_correctness_rejected(self):
        with pytest.raises(ValidationError):
            ReviewRequest(user_id="alice", question_id=1, is_correct="yes")

    def test_negative_exam_days_rejected(self):
        with pytest.raises(ValidationError):
            ReviewRequest(user_id="alice", question_id=1, is_correct=True, exam_days_remaining=-1)

    def test_negative_count_rejected(self):
        with pytest.raises(ValidationError):
            PracticeRequest(user_id="alice", question_ids=[1], count=-1)

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValidationError):
            PracticeRequest(user_id="alice", mode="spaced", question_ids=[1], count=1)


class TestSelection:

    def _seed(self, service, now):
        # 1: lapsed two days ago, 2: answered correctly, 3: never seen
        service.review("alice", 1, False, now=now - timedelta(days=2))
        service.review("alice", 2, True, now=now)

    def test_smart(self, service, now):
        self._seed(service, now)
        assert service.get_smart_questions("alice", [1, 2, 3], 3, now) == [1, 3, 2]

    def test_cram(self, service, now):
        self._seed(service, now)
        assert service.get_cram_questions("alice", [1, 2, 3], 3, 2, now) == [3, 1]

    def test_other_users_state_is_ignored(self, service, now):
        self._seed(service, now)
        assert service.get_smart_questions("bob", [1, 2, 3], 3, now) == [1, 2, 3]

    def test_practice_dispatch(self, service, now):
        self._seed(service, now)
        request = PracticeRequest(user_id="alice", mode=PracticeMode.SMART, question_ids=[1, 2, 3], count=2)
        assert service.select_practice_questions(request, now) == [1, 3]

    def test_practice_random(self, service, now):
        request = PracticeRequest(user_id="alice", mode="random", question_ids=list(range(10)), count=4)
        selected = service.select_practice_questions(request, now)
        assert len(selected) == 4
        assert set(selected) <= set(range(10))


class TestDashboard:

    def test_due_questions(self, service, now):
        service.review("alice", 1, False, now=now - timedelta(days=3))
        service.review("alice", 2, False, now=now - timedelta(days=2))
        service.review("alice", 3, True, now=now)

        assert service.get_due_questions("alice", now) == [1, 2]
        assert service.get_due_questions("alice", now, limit=1) == [1]

    def test_overall_mastery(self, service, now):
        service.review("alice", 1, False, now=now - timedelta(days=3))
        service.review("alice", 2, True, now=now)

        stats = service.get_overall_mastery("alice", 5, now)
        assert stats.new_count == 3
        assert stats.learning_count == 2
        assert stats.overdue_count == 1
        assert stats.average_ease_factor == pytest.approx((1.96 + 2.5) / 2)
