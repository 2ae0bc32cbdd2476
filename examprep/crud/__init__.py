from examprep.crud.mastery import (
    get_mastery,
    upsert_mastery,
    list_mastery_for_user,
    get_due_question_ids
)
from examprep.crud.review_log import record_review_log, get_review_logs

__all__ = [
    "get_mastery",
    "upsert_mastery",
    "list_mastery_for_user",
    "get_due_question_ids",
    "record_review_log",
    "get_review_logs",
]
