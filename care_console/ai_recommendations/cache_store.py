"""
In-memory cache of recommendation lists, partitioned by scope.

Nothing here survives a restart. Staleness is only evaluated on read; there
is no background eviction.
"""
import logging
import threading
import time
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from scoring_client.models import RecommendationEntity

from .listeners import ListenerRegistry
from .models import CacheScope, ScopeEntry

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_MAX_ENTRIES = 1000


class RecommendationCacheStore:
    """Scope-partitioned entity lists plus an id index of every cached entity."""

    def __init__(self, listeners: Optional[ListenerRegistry] = None,
                 ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 max_entries: int = DEFAULT_MAX_ENTRIES,
                 clock: Callable[[], float] = time.time):
        """Initialize the store.

        Args:
            listeners: Registry notified after every mutation
            ttl_seconds: Freshness window of a scope list
            max_entries: Cap on indexed entities; oldest scopes are evicted past it
            clock: Source of epoch seconds (tests pass a fake)
        """
        self.listeners = listeners or ListenerRegistry()
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        # Mutation and its notification run under the same reentrant lock
        self._lock = threading.RLock()
        self._scopes: Dict[CacheScope, ScopeEntry] = {}
        self._entities: Dict[int, RecommendationEntity] = {}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, scope: CacheScope) -> Optional[ScopeEntry]:
        """Cached list for ``scope`` with its refresh time, or None."""
        with self._lock:
            entry = self._scopes.get(scope)
            if entry is None:
                return None
            return ScopeEntry(entities=list(entry.entities), refreshed_at=entry.refreshed_at)

    def get_entity(self, entity_id: int) -> Optional[RecommendationEntity]:
        with self._lock:
            return self._entities.get(entity_id)

    def is_stale(self, scope: CacheScope) -> bool:
        """True when ``scope`` was never populated or its list outlived the TTL."""
        with self._lock:
            entry = self._scopes.get(scope)
            if entry is None:
                return True
            return self._clock() - entry.refreshed_at > self.ttl_seconds

    def snapshot(self) -> List[RecommendationEntity]:
        """Every cached entity, in first-cached order."""
        with self._lock:
            return list(self._entities.values())

    def scopes(self) -> List[CacheScope]:
        with self._lock:
            return list(self._scopes.keys())

    def now(self) -> float:
        return self._clock()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set(self, scope: CacheScope, entities: Iterable[RecommendationEntity],
            timestamp: Optional[float] = None) -> None:
        """Replace the whole list of ``scope``.

        Entities no scope references any more leave the index.
        """
        entities = list(entities)
        with self._lock:
            refreshed_at = self._clock() if timestamp is None else timestamp
            self._scopes[scope] = ScopeEntry(entities=entities, refreshed_at=refreshed_at)
            for entity in entities:
                self._entities[entity.id] = entity
            self._drop_orphans(list(self._entities))
            logger.info(f"Cached {len(entities)} recommendations for scope {scope}")
            self._enforce_limit(keep=scope)
            self._notify()

    def upsert(self, entity: RecommendationEntity) -> bool:
        """Replace ``entity`` wherever its id is cached.

        Never adds the id to a scope list that did not hold it.

        Returns:
            True if at least one cached copy was replaced
        """
        with self._lock:
            replaced = self._replace_in_scopes(entity)
            if entity.id in self._entities:
                self._entities[entity.id] = entity
                replaced = True
            if replaced:
                self._notify()
            return replaced

    def merge(self, entities: Iterable[RecommendationEntity],
              scope: Optional[CacheScope] = None) -> None:
        """Commit the successes of one orchestration call as a single mutation.

        Each entity replaces its cached copies. Entities cached nowhere are
        indexed by id and appended to ``scope`` when that scope is populated.
        """
        entities = list(entities)
        if not entities:
            return
        with self._lock:
            target = self._scopes.get(scope) if scope is not None else None
            added = 0
            for entity in entities:
                in_scope = self._replace_in_scopes(entity)
                self._entities[entity.id] = entity
                if not in_scope and target is not None:
                    target.entities.append(entity)
                    added += 1
            logger.info(f"Merged {len(entities)} recommendations ({added} added to scope {scope})")
            self._enforce_limit(keep=scope)
            self._notify()

    def remove(self, entity_id: int) -> bool:
        """Drop ``entity_id`` from every scope and the index."""
        with self._lock:
            found = self._entities.pop(entity_id, None) is not None
            for entry in self._scopes.values():
                kept = [e for e in entry.entities if e.id != entity_id]
                if len(kept) != len(entry.entities):
                    entry.entities = kept
                    found = True
            if found:
                logger.debug(f"Removed recommendation {entity_id} from cache")
                self._notify()
            return found

    def clear(self) -> None:
        """Return to the empty initial state."""
        with self._lock:
            self._scopes.clear()
            self._entities.clear()
            logger.info("Recommendation cache cleared")
            self._notify()

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def get_cache_stats(self) -> dict:
        """Cache statistics for debugging."""
        with self._lock:
            timestamps = [entry.refreshed_at for entry in self._scopes.values()]
            return {
                "total_recommendations": len(self._entities),
                "user_caches": sum(1 for scope in self._scopes if not scope.is_global),
                "cache_keys": [scope.key for scope in self._scopes],
                "ttl_seconds": self.ttl_seconds,
                "max_entries": self.max_entries,
                "oldest_entry": datetime.fromtimestamp(min(timestamps)).isoformat() if timestamps else None,
                "newest_entry": datetime.fromtimestamp(max(timestamps)).isoformat() if timestamps else None,
            }

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _replace_in_scopes(self, entity: RecommendationEntity) -> bool:
        replaced = False
        for entry in self._scopes.values():
            for index, cached in enumerate(entry.entities):
                if cached.id == entity.id:
                    entry.entities[index] = entity
                    replaced = True
        return replaced

    def _referenced_ids(self) -> set:
        return {entity.id for entry in self._scopes.values() for entity in entry.entities}

    def _drop_orphans(self, entity_ids: Iterable[int]) -> int:
        referenced = self._referenced_ids()
        dropped = 0
        for entity_id in entity_ids:
            if entity_id not in referenced and self._entities.pop(entity_id, None) is not None:
                dropped += 1
        return dropped

    def _enforce_limit(self, keep: Optional[CacheScope] = None) -> None:
        """Evict until the index fits ``max_entries``.

        Ids no scope references go first, oldest first, then whole scopes in
        refresh order. ``keep`` (the scope just written) is never evicted.
        """
        if len(self._entities) <= self.max_entries:
            return
        referenced = self._referenced_ids()
        evicted = 0
        for entity_id in list(self._entities):
            if len(self._entities) <= self.max_entries:
                break
            if entity_id not in referenced:
                del self._entities[entity_id]
                evicted += 1
        dropped_scopes = []
        by_age = sorted(
            (item for item in self._scopes.items() if item[0] != keep),
            key=lambda item: item[1].refreshed_at,
        )
        for old_scope, entry in by_age:
            if len(self._entities) <= self.max_entries:
                break
            del self._scopes[old_scope]
            dropped_scopes.append(old_scope.key)
            evicted += self._drop_orphans(entry.ids())
        logger.info(f"Cache over {self.max_entries} entries: evicted {evicted} recommendation(s), "
                    f"scopes {dropped_scopes}")

    def _notify(self) -> None:
        self.listeners.notify(list(self._entities.values()))
