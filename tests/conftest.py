"""
Pytest fixtures for burnout engine tests.
"""
import sys
from datetime import date, timedelta
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Ensure src/ is on sys.path so tests can import burnout_engine.
ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Load environment variables
load_dotenv()

from burnout_engine.errors import RemoteUnavailable  # noqa: E402
from burnout_engine.models import DIMENSIONS  # noqa: E402
from burnout_engine.repository import FallbackRepository, LocalAssessmentCache  # noqa: E402
from burnout_engine.scoring import build_assessment  # noqa: E402
from burnout_engine.service import BurnoutService  # noqa: E402


TODAY = date(2025, 3, 31)


def answers_of(value: int) -> dict:
    """All five dimensions set to the same answer."""
    return {name: value for name in DIMENSIONS}


def answers_for_score(score: float) -> dict:
    """Answers whose mean is `score` (a multiple of 0.2 in [1, 5])."""
    total = round(score * len(DIMENSIONS))
    base, extra = divmod(total, len(DIMENSIONS))
    return {name: base + (1 if i < extra else 0) for i, name in enumerate(DIMENSIONS)}


def make_history(scores, end: date = TODAY) -> list:
    """One assessment per consecutive day ending on `end`, with the given mean scores."""
    return [
        build_assessment(answers_for_score(s), assessment_date=end - timedelta(days=len(scores) - 1 - i))
        for i, s in enumerate(scores)
    ]


class FlakyStore(LocalAssessmentCache):
    """In-memory stand-in for the durable store that can be switched off."""

    def __init__(self, clock=lambda: TODAY):
        super().__init__(None, max_days=365, clock=clock)
        self.available = True
        self.upserts = 0

    def _check(self):
        if not self.available:
            raise RemoteUnavailable("durable store offline")

    async def upsert(self, user_id, assessment):
        self._check()
        self.upserts += 1
        return await super().upsert(user_id, assessment)

    async def fetch_range(self, user_id, start, end):
        self._check()
        return await super().fetch_range(user_id, start, end)

    async def existing_dates(self, user_id, dates):
        self._check()
        return await super().existing_dates(user_id, dates)

    async def insert_missing(self, user_id, assessments):
        self._check()
        return await super().insert_missing(user_id, assessments)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def local_cache():
    """Memory-only device cache pinned to TODAY."""
    return LocalAssessmentCache(None, clock=lambda: TODAY)


@pytest.fixture
def remote_store():
    return FlakyStore()


@pytest.fixture
def repository(local_cache, remote_store):
    return FallbackRepository(local_cache, remote_store)


@pytest.fixture
def service(repository):
    return BurnoutService(repository, clock=lambda: TODAY)


@pytest.fixture
def local_only_service(local_cache):
    return BurnoutService(FallbackRepository(local_cache), clock=lambda: TODAY)
