import pytest
from datetime import datetime, timedelta, timezone
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import examprep.models  # noqa: F401
from examprep.database import Base
from examprep.schemas import MasteryRecord

# --- Fixtures ---

@pytest.fixture
def now():
    """Fixed review time used across tests."""
    return datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)

@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()

@pytest.fixture
def make_record(now):
    """Build a reviewed MasteryRecord due `due_in_days` from `now`."""
    def _make(question_id, repetitions=1, ease_factor=2.5, review_count=None, due_in_days=1.0, user_id="alice"):
        return MasteryRecord(
            user_id=user_id,
            question_id=question_id,
            ease_factor=ease_factor,
            interval_days=abs(due_in_days),
            repetitions=repetitions,
            next_review_at=now + timedelta(days=due_in_days),
            last_reviewed_at=now - timedelta(days=1),
            quality_sum=4 * max(repetitions, 1),
            review_count=review_count if review_count is not None else max(repetitions, 1),
        )
    return _make
