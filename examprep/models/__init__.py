from examprep.models.question_mastery import QuestionMastery
from examprep.models.review_log import ReviewLog

__all__ = [
    "QuestionMastery",
    "ReviewLog"
]
