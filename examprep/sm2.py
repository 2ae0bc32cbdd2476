from typing import List

MIN_EASE_FACTOR = 1.3
DEFAULT_EASE_FACTOR = 2.5
MAX_EASE_FACTOR = 2.5  # same as the default: ease can only fall from its seed

# Cram mode base schedule in days: 1h, 4h, 8h, 1 day, 2 days
CRAM_INTERVALS: List[float] = [1 / 24, 4 / 24, 8 / 24, 1, 2]

QUALITY_CORRECT = 4  # correct after hesitation
QUALITY_INCORRECT = 1  # blackout
PASSING_QUALITY = 3


class SM2Algorithm:
    """
    SM-2 spaced repetition algorithm for calculating review intervals.
    Based on SuperMemo 2 algorithm by Piotr Wozniak, with a binary
    correct/incorrect input and a compressed cram schedule.
    """

    @staticmethod
    def map_to_quality(is_correct: bool) -> int:
        """Map binary correctness to the 0-5 SM-2 quality scale"""
        return QUALITY_CORRECT if is_correct else QUALITY_INCORRECT

    @staticmethod
    def update_ease(current_ef: float, quality: int) -> float:
        """
        Apply the SM-2 ease factor recurrence.

        Args:
            current_ef: Current EF (difficulty), 1.3-2.5
            quality: Response quality (0-5). 0=total blackout, 5=perfect

        Returns:
            New EF clamped to [1.3, 2.5]
        """
        new_ef = current_ef + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))

        # Ensure EF stays within bounds
        return max(MIN_EASE_FACTOR, min(MAX_EASE_FACTOR, new_ef))

    @staticmethod
    def next_interval(repetitions: int, easiness_factor: float, previous_interval_days: float) -> float:
        """
        Standard interval progression after a successful review.

        Args:
            repetitions: Successful reviews before this one
            easiness_factor: EF after this review
            previous_interval_days: Interval that led up to this review

        Returns:
            Interval in days: 1, then 6, then previous * EF rounded
        """
        if repetitions == 0:
            return 1
        elif repetitions == 1:
            return 6
        return round(previous_interval_days * easiness_factor)

    @staticmethod
    def cram_interval(repetitions: int, exam_days_remaining: int) -> float:
        """
        Compressed interval for short-horizon exam preparation.

        The base schedule is scaled by days-until-exam / 7 (never below 0.5).
        Past the end of the table the last step grows linearly with
        repetitions.
        """
        exam_days = max(1, exam_days_remaining)
        scale_factor = max(0.5, exam_days / 7)

        if repetitions < len(CRAM_INTERVALS):
            return CRAM_INTERVALS[repetitions] * scale_factor

        return CRAM_INTERVALS[-1] * scale_factor * (repetitions - len(CRAM_INTERVALS) + 2)
