"""
AI recommendations subsystem.

Ephemeral cache and batch orchestration for recommendations computed by the
external scoring service.
"""

from .cache_store import RecommendationCacheStore
from .factory import create_ai_recommendations_module
from .listeners import ListenerRegistry
from .models import CacheScope, ProcessingState, ProcessingStatusRecord, Role, UserContext
from .orchestrator import BatchOrchestrator
from .processing_tracker import ProcessingTracker
from .scope import ScopeResolver
from .service import RecommendationsService

__all__ = [
    "RecommendationCacheStore",
    "create_ai_recommendations_module",
    "ListenerRegistry",
    "CacheScope",
    "ProcessingState",
    "ProcessingStatusRecord",
    "Role",
    "UserContext",
    "BatchOrchestrator",
    "ProcessingTracker",
    "ScopeResolver",
    "RecommendationsService",
]
