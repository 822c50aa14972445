"""
Consumer-facing recommendations service.

Wires the cache store, listener registry, processing tracker, orchestrator
and scope resolver behind the operations the console calls.
"""
import logging
from typing import Callable, Iterable, List, Optional

from scoring_client import (
    AuthenticationError,
    BatchRequest,
    BatchResult,
    RecommendationEntity,
    ScoringClient,
    TaskPriority,
)

from .cache_store import RecommendationCacheStore
from .listeners import Listener, ListenerRegistry
from .models import CacheScope, ProcessingStatusRecord, UserContext
from .orchestrator import BatchOrchestrator
from .processing_tracker import ProcessingTracker
from .scope import ScopeResolver
from .utils import sort_recommendations

logger = logging.getLogger(__name__)


class RecommendationsService:
    """One isolated engine instance; build as many as needed (tests do)."""

    def __init__(self, client: ScoringClient, store: RecommendationCacheStore,
                 tracker: ProcessingTracker, resolver: Optional[ScopeResolver] = None):
        self.client = client
        self.store = store
        self.tracker = tracker
        self.resolver = resolver or ScopeResolver()
        self.orchestrator = BatchOrchestrator(client, store, tracker)

    @property
    def listeners(self) -> ListenerRegistry:
        return self.store.listeners

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def fetch_recommendations(self, user: Optional[UserContext], view: Optional[str] = None,
                                    force_refresh: bool = False) -> List[RecommendationEntity]:
        """Recommendations for the requester's scope, from cache when fresh.

        Args:
            user: Authenticated requester
            view: "all" or "mine" (administrators only may read "all")
            force_refresh: Skip the freshness check
        """
        user = self._require_user(user)
        scope = self.resolver.resolve(user, view)
        switched = self.resolver.activate(user, scope)

        if not force_refresh and not switched and not self.store.is_stale(scope):
            cached = self.store.get(scope)
            # An empty list is refetched even inside the freshness window
            if cached is not None and cached.entities:
                logger.info(f"Using cached recommendations for {scope}: {len(cached.entities)} item(s)")
                return cached.entities

        if scope.is_global:
            entities = await self.client.list_all()
        else:
            entities = await self.client.list_mine(scope.user_id)
        self.store.set(scope, entities, self.store.now())

        if not entities:
            logger.info(f"No recommendations available for {scope}")
        else:
            action = "Refreshed" if force_refresh else "Loaded"
            logger.info(f"{action} {len(entities)} recommendation(s) for {scope}")
        return list(entities)

    async def get_sorted_recommendations(self, user: Optional[UserContext], view: Optional[str] = None,
                                         force_refresh: bool = False) -> List[RecommendationEntity]:
        entities = await self.fetch_recommendations(user, view=view, force_refresh=force_refresh)
        return sort_recommendations(entities)

    def get_status(self, entity_id: int) -> Optional[ProcessingStatusRecord]:
        return self.tracker.get_status(entity_id)

    def is_processing(self, entity_id: int) -> bool:
        return self.tracker.is_processing(entity_id)

    def get_processing_ids(self) -> List[int]:
        return self.tracker.get_processing_ids()

    def get_cache_stats(self) -> dict:
        stats = self.store.get_cache_stats()
        stats["processing_requests"] = len(self.tracker.get_processing_ids())
        return stats

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    async def generate_for_ids(self, entity_ids: Iterable[int],
                               user: Optional[UserContext]) -> BatchResult:
        """Single-item path for one id, batch path for several."""
        user = self._require_user(user)
        batch = BatchRequest.create(entity_ids, requester_id=user.user_id)
        scope = self._write_scope(user)
        if len(batch.entity_ids) == 1:
            return await self.orchestrator.generate_single(
                batch.entity_ids[0], requester_id=user.user_id, scope=scope
            )
        return await self.orchestrator.process_batch(batch, scope=scope)

    async def process_batch(self, entity_ids: Iterable[int], user: Optional[UserContext],
                            include_ranking: bool = False) -> BatchResult:
        user = self._require_user(user)
        batch = BatchRequest.create(entity_ids, requester_id=user.user_id,
                                    include_ranking=include_ranking)
        return await self.orchestrator.process_batch(batch, scope=self._write_scope(user))

    async def refresh(self, entity_id: int, user: Optional[UserContext]) -> BatchResult:
        """Force-regenerate one recommendation."""
        user = self._require_user(user)
        batch = BatchRequest.create([entity_id], requester_id=user.user_id)
        return await self.orchestrator.refresh(
            batch.entity_ids[0], requester_id=user.user_id, scope=self._write_scope(user)
        )

    async def rank_priorities(self, entity_ids: Iterable[int],
                              user: Optional[UserContext]) -> List[TaskPriority]:
        """Priority ranking, highest first; the cache is not involved."""
        user = self._require_user(user)
        batch = BatchRequest.create(entity_ids, requester_id=user.user_id)
        priorities = await self.client.rank_priorities(batch.entity_ids)
        logger.info(f"Ranked {len(priorities)} task(s) for {user.user_id}")
        return sorted(priorities, key=lambda p: p.priority_score, reverse=True)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.store.listeners.subscribe(listener)

    def clear(self) -> None:
        """Drop every cached list and processing record."""
        self.tracker.clear()
        self.resolver.clear()
        self.store.clear()

    # ------------------------------------------------------------------

    @staticmethod
    def _require_user(user: Optional[UserContext]) -> UserContext:
        if user is None:
            raise AuthenticationError("User not authenticated")
        return user

    def _write_scope(self, user: UserContext) -> CacheScope:
        """Scope that receives newly generated entities: the one the user is viewing."""
        return self.resolver.active_scope(user) or self.resolver.resolve(user)
