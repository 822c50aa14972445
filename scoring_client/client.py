"""
HTTP client for the external scoring service.

The service owns the scoring itself; this module only moves JSON across the
boundary and classifies failures. Blocking ``requests`` calls are pushed onto
a worker thread so callers on the event loop only suspend at the network call.
"""
import asyncio
import logging
from typing import Any, Iterable, List, Optional

import pydantic
import requests

from .errors import (
    AuthenticationError,
    RequestRejectedError,
    TransportError,
)
from .models import (
    BatchRequest,
    BatchResult,
    PerItemFailure,
    RecommendationEntity,
    TaskPriority,
)

logger = logging.getLogger(__name__)

RECOMMEND_PATH = "/api/aifeatures/recommend"


def build_session(proxy_url: Optional[str] = None, api_token: Optional[str] = None) -> requests.Session:
    """Build a requests session with optional proxy and bearer token."""
    session = requests.Session()
    session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
    if api_token:
        session.headers["Authorization"] = f"Bearer {api_token}"
    if proxy_url:
        logger.warning("Using proxy for scoring service: %s", proxy_url)
        session.proxies.update({"http": proxy_url, "https": proxy_url})
    return session


class ScoringClient:
    """Async facade over the scoring service REST API."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None,
                 timeout: float = 30.0):
        """Initialize the client.

        Args:
            base_url: Scheme and host of the scoring service
            session: Optional pre-built session (tests pass a mock)
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or build_session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def generate_single(self, entity_id: int) -> RecommendationEntity:
        """Generate a recommendation for one care request."""
        data = await self._request("POST", f"{RECOMMEND_PATH}/generate/{entity_id}")
        return self._parse(RecommendationEntity, data)

    async def generate_batch(self, batch: BatchRequest) -> BatchResult:
        """Score every id of ``batch`` in one call."""
        data = await self._request("POST", f"{RECOMMEND_PATH}/batch", batch.to_payload())
        return self._parse_batch_result(data)

    async def rank_priorities(self, entity_ids: Iterable[int]) -> List[TaskPriority]:
        """Rank task priorities; the result does not touch the cache."""
        data = await self._request("POST", f"{RECOMMEND_PATH}/priorities", list(entity_ids))
        return self._parse_list(TaskPriority, data)

    async def list_all(self) -> List[RecommendationEntity]:
        """All recommendations (administrator view)."""
        data = await self._request("GET", f"{RECOMMEND_PATH}/all")
        return self._parse_list(RecommendationEntity, data)

    async def list_mine(self, user_id: str) -> List[RecommendationEntity]:
        """Recommendations relevant to one staff member."""
        data = await self._request("GET", f"{RECOMMEND_PATH}/my/{user_id}")
        return self._parse_list(RecommendationEntity, data)

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(self, method: str, path: str, payload: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug(f"Scoring API call: {method} {url}")
        try:
            response = await asyncio.to_thread(
                self.session.request, method, url, json=payload, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"No response from scoring service for {method} {url}: {e}")
            raise TransportError(f"Scoring service unreachable: {e}") from e

        self._raise_for_status(response, method, url)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Malformed response from scoring service: {e}",
                                 status=response.status_code) from e

    @staticmethod
    def _raise_for_status(response: requests.Response, method: str, url: str) -> None:
        status = response.status_code
        if status < 400:
            return
        message = _error_message(response)
        logger.warning(f"Scoring service answered {status} for {method} {url}: {message}")
        if status in (401, 403):
            raise AuthenticationError(message or "Not authorised by scoring service", status=status)
        if status >= 500:
            raise TransportError(message or f"Scoring service error {status}", status=status)
        raise RequestRejectedError(message or f"Request rejected ({status})", status=status)

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @staticmethod
    def _parse(model, data: Any):
        if data is None:
            raise TransportError("Empty response from scoring service")
        try:
            return model.model_validate(data)
        except pydantic.ValidationError as e:
            raise TransportError(f"Unexpected {model.__name__} payload: {e}") from e

    @classmethod
    def _parse_list(cls, model, data: Any) -> list:
        if data is None:
            return []
        if not isinstance(data, list):
            raise TransportError(f"Expected a list of {model.__name__}, got {type(data).__name__}")
        return [cls._parse(model, item) for item in data]

    @classmethod
    def _parse_batch_result(cls, data: Any) -> BatchResult:
        if not isinstance(data, dict):
            raise TransportError("Expected a batch result object from scoring service")
        successes = cls._parse_list(RecommendationEntity, data.get("recommendations") or [])
        failures = []
        for item in data.get("failures") or []:
            failure = _parse_failure(item)
            if failure is not None:
                failures.append(failure)
        return BatchResult(successes=successes, failures=failures)


def _parse_failure(item: Any) -> Optional[PerItemFailure]:
    """Failures arrive as recommendation records with status FAILED.

    The service does not always know which request failed and then sends
    ``requestId: null``; such entries are skipped, leaving the id unanswered.
    """
    if not isinstance(item, dict):
        raise TransportError(f"Unexpected failure entry: {item!r}")
    entity_id = item.get("requestId")
    if entity_id is None:
        entity_id = item.get("entityId")
    if entity_id is None:
        reason = item.get("priorityReason") or item.get("reason")
        logger.warning(f"Skipping failure entry without request id: {reason}")
        return None
    reason = (
        item.get("reason")
        or item.get("error")
        or item.get("priorityReason")
        or item.get("recommendationText")
        or "Recommendation generation failed"
    )
    try:
        return PerItemFailure(entity_id=entity_id, reason=str(reason))
    except pydantic.ValidationError as e:
        raise TransportError(f"Unexpected failure entry: {e}") from e


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return (response.text or "").strip()[:200]
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            return str(errors[0].get("message", ""))
        return str(body.get("message") or body.get("error") or "")
    return str(body)[:200]
