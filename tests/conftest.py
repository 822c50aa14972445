"""
Shared fixtures for the recommendation tests.
"""
from unittest.mock import AsyncMock

import pytest

from care_console.ai_recommendations import (
    ListenerRegistry,
    ProcessingTracker,
    RecommendationCacheStore,
    RecommendationsService,
    Role,
    UserContext,
)
from scoring_client.models import RecommendationEntity


def build_entity(entity_id: int, **overrides) -> RecommendationEntity:
    data = {
        "id": 1000 + entity_id,
        "requestId": entity_id,
        "priorityScore": 50,
        "priorityReason": "Routine follow-up",
        "urgencyLevel": "MEDIUM",
        "recommendationText": f"Call the senior about request {entity_id}",
        "status": "COMPLETED",
        "createdAt": "2025-01-01T09:00:00",
        "updatedAt": "2025-01-01T09:00:00",
    }
    data.update(overrides)
    return RecommendationEntity.model_validate(data)


class FakeClock:
    """Controllable epoch clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeScoringClient:
    """Stand-in for ScoringClient with awaitable mocks."""

    def __init__(self):
        self.generate_single = AsyncMock()
        self.generate_batch = AsyncMock()
        self.rank_priorities = AsyncMock(return_value=[])
        self.list_all = AsyncMock(return_value=[])
        self.list_mine = AsyncMock(return_value=[])


@pytest.fixture
def make_entity():
    return build_entity


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_client():
    return FakeScoringClient()


@pytest.fixture
def store(clock):
    return RecommendationCacheStore(listeners=ListenerRegistry(), ttl_seconds=300, clock=clock)


@pytest.fixture
def tracker():
    return ProcessingTracker()


@pytest.fixture
def service(fake_client, store, tracker):
    return RecommendationsService(fake_client, store, tracker)


@pytest.fixture
def admin():
    return UserContext(user_id="admin1", role=Role.ADMIN)


@pytest.fixture
def staff():
    return UserContext(user_id="9", role=Role.STAFF)
