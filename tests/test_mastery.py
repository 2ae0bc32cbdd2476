import random
import pytest
from datetime import timedelta

from examprep.mastery import apply_review, mastery_level, record_level, to_question_mastery
from examprep.schemas import MasteryLevel, MasteryRecord


def review(record, is_correct, now, cram=False, exam_days=7):
    return apply_review(record, is_correct, cram, exam_days, now, user_id="alice", question_id=1)


class TestApplyReview:

    def test_fresh_incorrect_then_two_correct(self, now):
        first = review(None, False, now)
        assert first.ease_factor == pytest.approx(1.96)
        assert first.repetitions == 0
        assert first.interval_days == 1
        assert first.review_count == 1
        assert first.quality_sum == 1
        assert first.next_review_at == now + timedelta(days=1)
        assert first.last_reviewed_at == now

        second = review(first, True, now + timedelta(days=1))
        assert second.repetitions == 1
        assert second.interval_days == 1
        assert second.ease_factor == pytest.approx(1.96)

        third = review(second, True, now + timedelta(days=2))
        assert third.repetitions == 2
        assert third.interval_days == 6
        assert third.review_count == 3
        assert third.quality_sum == 9

        fourth = review(third, True, now + timedelta(days=8))
        assert fourth.interval_days == 12  # round(6 * 1.96)

    def test_success_streak_intervals(self, now):
        record = None
        intervals = []
        for day in range(3):
            record = review(record, True, now + timedelta(days=day))
            intervals.append(record.interval_days)
        assert intervals == [1, 6, round(6 * record.ease_factor)]
        assert intervals[0] < intervals[1] < intervals[2]

    def test_cram_first_correct(self, now):
        record = review(None, True, now, cram=True, exam_days=7)
        assert record.repetitions == 1
        assert record.interval_days == pytest.approx(0.167, abs=1e-3)
        assert record.next_review_at == now + timedelta(hours=4)

    def test_cram_incorrect_uses_first_slot(self, now):
        seen = review(None, True, now, cram=True)
        lapsed = review(seen, False, now, cram=True, exam_days=14)
        assert lapsed.repetitions == 0
        assert lapsed.interval_days == pytest.approx(2 / 24)

    def test_input_record_not_mutated(self, now):
        first = review(None, True, now)
        snapshot = first.model_dump()
        review(first, False, now)
        assert first.model_dump() == snapshot

    def test_identity_taken_from_existing_record(self, now):
        existing = MasteryRecord(user_id="bob", question_id=42)
        updated = apply_review(existing, True, False, 7, now)
        assert (updated.user_id, updated.question_id) == ("bob", 42)

    def test_missing_identity_for_new_record(self, now):
        with pytest.raises(ValueError):
            apply_review(None, True, False, 7, now)

    def test_naive_now_is_taken_as_utc(self, now):
        record = review(None, True, now.replace(tzinfo=None))
        assert record.last_reviewed_at == now

    def test_invariants_hold_over_random_sequences(self, now):
        rng = random.Random(1234)
        for _ in range(50):
            record = None
            when = now
            for _ in range(rng.randint(1, 30)):
                is_correct = rng.random() < 0.7
                record = review(record, is_correct, when, cram=rng.random() < 0.3, exam_days=rng.randint(0, 10))
                assert 1.3 <= record.ease_factor <= 2.5
                assert record.interval_days >= 0
                if not is_correct:
                    assert record.repetitions == 0
                when += timedelta(days=record.interval_days)


class TestMasteryLevel:

    @pytest.mark.parametrize("repetitions,ease,reviews,expected", [
        (0, 2.5, 0, MasteryLevel.NEW),
        (0, 2.5, 3, MasteryLevel.LEARNING),
        (2, 2.5, 5, MasteryLevel.LEARNING),
        (3, 2.5, 3, MasteryLevel.REVIEWING),
        (6, 1.96, 10, MasteryLevel.REVIEWING),
        (6, 2.0, 10, MasteryLevel.MASTERED),
        (9, 2.5, 9, MasteryLevel.MASTERED),
    ])
    def test_levels(self, repetitions, ease, reviews, expected):
        assert mastery_level(repetitions, ease, reviews) == expected

    def test_pure(self):
        assert mastery_level(4, 2.2, 7) == mastery_level(4, 2.2, 7)

    def test_lapsed_mastered_item_stays_mastered_until_reviewed(self, make_record, now):
        record = make_record(1, repetitions=6, due_in_days=-30)
        assert record_level(record) == MasteryLevel.MASTERED

    def test_question_mastery_view(self, make_record):
        view = to_question_mastery(make_record(5, repetitions=3))
        assert view.question_id == 5
        assert view.mastery_level == MasteryLevel.REVIEWING
        assert view.review_count == 3
