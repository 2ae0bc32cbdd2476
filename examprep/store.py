"""Persistence backends for mastery records.

The scheduler only depends on the MasteryStore protocol; which backend is
active is decided by whoever constructs the MasteryService.
"""
from typing import Dict, List, Optional, Protocol, Tuple

from sqlalchemy.orm import Session

from examprep import crud
from examprep.schemas import MasteryRecord, ReviewLogEntry


class MasteryStore(Protocol):
    """Protocol for mastery record storage."""

    def get(self, user_id: str, question_id: int) -> Optional[MasteryRecord]:
        ...

    def upsert(self, record: MasteryRecord) -> None:
        ...

    def list_for_user(self, user_id: str) -> List[MasteryRecord]:
        ...

    def log_review(self, entry: ReviewLogEntry) -> None:
        ...


class SQLAlchemyMasteryStore:
    """Store backed by the question_mastery and review_log tables."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str, question_id: int) -> Optional[MasteryRecord]:
        row = crud.get_mastery(self.db, user_id, question_id)
        if row:
            return MasteryRecord.model_validate(row)
        return None

    def upsert(self, record: MasteryRecord) -> None:
        crud.upsert_mastery(self.db, record)

    def list_for_user(self, user_id: str) -> List[MasteryRecord]:
        return [MasteryRecord.model_validate(row) for row in crud.list_mastery_for_user(self.db, user_id)]

    def log_review(self, entry: ReviewLogEntry) -> None:
        crud.record_review_log(self.db, entry)

    def recent_reviews(self, user_id: str, limit: int = 50) -> List[ReviewLogEntry]:
        return [ReviewLogEntry.model_validate(row) for row in crud.get_review_logs(self.db, user_id, limit)]


class InMemoryMasteryStore:
    """Dictionary-backed store keyed by (user_id, question_id)."""

    def __init__(self):
        self.records: Dict[Tuple[str, int], MasteryRecord] = {}
        self.reviews: List[ReviewLogEntry] = []

    def get(self, user_id: str, question_id: int) -> Optional[MasteryRecord]:
        return self.records.get((user_id, question_id))

    def upsert(self, record: MasteryRecord) -> None:
        self.records[(record.user_id, record.question_id)] = record

    def list_for_user(self, user_id: str) -> List[MasteryRecord]:
        return [record for (owner, _), record in self.records.items() if owner == user_id]

    def log_review(self, entry: ReviewLogEntry) -> None:
        self.reviews.append(entry)

    def recent_reviews(self, user_id: str, limit: int = 50) -> List[ReviewLogEntry]:
        mine = [entry for entry in self.reviews if entry.user_id == user_id]
        return list(reversed(mine))[:limit]
