"""
Batch orchestration of recommendation generation.

Every call follows the same four steps: mark all ids processing, make one
network call, merge the outcome into the tracker and the cache, report a
summary. Overlapping calls are not serialized; whichever response arrives
last wins on both the cache and the tracker.
"""
import logging
from typing import Iterable, Optional

from scoring_client import (
    AuthenticationError,
    BatchRequest,
    BatchResult,
    PerItemFailure,
    RecommendationServiceError,
    RequestRejectedError,
    ScoringClient,
)

from .cache_store import RecommendationCacheStore
from .models import CacheScope
from .processing_tracker import ProcessingTracker

logger = logging.getLogger(__name__)

MISSING_RESULT_REASON = "No result returned by scoring service"


class BatchOrchestrator:
    """Fans id sets out to the scoring service and merges partial results."""

    def __init__(self, client: ScoringClient, store: RecommendationCacheStore,
                 tracker: ProcessingTracker):
        self.client = client
        self.store = store
        self.tracker = tracker

    async def process_batch(self, batch: BatchRequest,
                            scope: Optional[CacheScope] = None) -> BatchResult:
        """Score ``batch`` with a single fan-out call.

        Args:
            batch: Validated, de-duplicated request
            scope: Requester's scope; new entities are added to it

        Returns:
            BatchResult with successes and per-item failures

        Raises:
            RecommendationServiceError: when no usable response arrived; every
                requested id is then FAILED and the cache is untouched
        """
        ids = list(batch.entity_ids)
        self.tracker.start_many(ids)
        logger.info(f"Batch recommendation started for {len(ids)} request(s) by {batch.requester_id}")

        try:
            response = await self.client.generate_batch(batch)
        except Exception as e:
            self._fail_all(ids, e)
            raise

        result = self._reconcile(ids, response)
        self._commit(result, scope)
        logger.info(f"Batch recommendation finished: {result.describe()}")
        return result

    async def generate_single(self, entity_id: int, requester_id: Optional[str] = None,
                              scope: Optional[CacheScope] = None) -> BatchResult:
        """Batch of one through the single-item endpoint.

        A rejection of this id by the service is a per-item failure; only
        transport and authentication failures are raised.
        """
        self.tracker.start(entity_id)
        logger.info(f"Generating recommendation for request {entity_id} by {requester_id}")

        try:
            entity = await self.client.generate_single(entity_id)
        except RequestRejectedError as e:
            result = BatchResult(failures=[PerItemFailure(entity_id=entity_id, reason=e.message)])
            self._commit(result, scope)
            logger.info(f"Recommendation for request {entity_id} rejected: {e.message}")
            return result
        except Exception as e:
            self._fail_all([entity_id], e)
            raise

        result = self._reconcile([entity_id], BatchResult(successes=[entity]))
        self._commit(result, scope)
        return result

    async def refresh(self, entity_id: int, requester_id: Optional[str] = None,
                      scope: Optional[CacheScope] = None) -> BatchResult:
        """Invalidate the cached entity, then regenerate it."""
        self.store.remove(entity_id)
        return await self.generate_single(entity_id, requester_id=requester_id, scope=scope)

    # ------------------------------------------------------------------

    @staticmethod
    def _reconcile(ids: Iterable[int], response: BatchResult) -> BatchResult:
        """Restrict the response to requested ids; unanswered ids become failures."""
        requested = list(ids)
        wanted = set(requested)
        successes = {}
        for entity in response.successes:
            if entity.id in wanted:
                successes[entity.id] = entity
            else:
                logger.warning(f"Ignoring result for unrequested request {entity.id}")
        failures = {}
        for failure in response.failures:
            if failure.entity_id in wanted and failure.entity_id not in successes:
                failures[failure.entity_id] = failure
        for entity_id in requested:
            if entity_id not in successes and entity_id not in failures:
                failures[entity_id] = PerItemFailure(entity_id=entity_id, reason=MISSING_RESULT_REASON)
        return BatchResult(
            successes=[successes[i] for i in requested if i in successes],
            failures=[failures[i] for i in requested if i in failures],
        )

    def _commit(self, result: BatchResult, scope: Optional[CacheScope]) -> None:
        # Statuses first so listeners woken by the merge already see them
        for entity in result.successes:
            self.tracker.succeed(entity.id)
        for failure in result.failures:
            self.tracker.fail(failure.entity_id, failure.reason)
        self.store.merge(result.successes, scope)

    def _fail_all(self, ids, error: Exception) -> None:
        message = error.message if isinstance(error, RecommendationServiceError) else str(error)
        if isinstance(error, AuthenticationError):
            logger.warning(f"Recommendation request for {len(ids)} id(s) not authorised: {message}")
        elif isinstance(error, RecommendationServiceError):
            logger.error(f"Recommendation request for {len(ids)} id(s) failed entirely: {message}")
        else:
            logger.exception(f"Unexpected error generating recommendations for {len(ids)} id(s): {message}")
        self.tracker.fail_many(ids, message)
