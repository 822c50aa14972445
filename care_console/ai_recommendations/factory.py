"""
Factory for creating the AI recommendations module.
"""
from typing import Iterable, Optional

from scoring_client import ScoringClient, build_session

from .cache_store import DEFAULT_MAX_ENTRIES, DEFAULT_TTL_SECONDS, RecommendationCacheStore
from .listeners import ListenerRegistry
from .processing_tracker import ProcessingTracker
from .routes import create_ai_recommendations_routes
from .scope import ScopeResolver
from .service import RecommendationsService


def create_ai_recommendations_module(
    base_url: str,
    api_token: Optional[str] = None,
    timeout_seconds: float = 30.0,
    proxy_url: Optional[str] = None,
    ttl_seconds: float = DEFAULT_TTL_SECONDS,
    max_entries: int = DEFAULT_MAX_ENTRIES,
    admin_user_ids: Iterable[str] = (),
    client: Optional[ScoringClient] = None,
) -> dict:
    """Create the AI recommendations module with its services and routes.

    Args:
        base_url: Scoring service base URL
        api_token: Optional bearer token for the scoring service
        timeout_seconds: Per-request timeout
        proxy_url: Optional HTTP proxy
        ttl_seconds: Freshness window of cached lists
        max_entries: Cap on cached recommendations
        admin_user_ids: User ids resolved to the administrator role
        client: Pre-built client (tests pass a fake)

    Returns:
        Dictionary containing the services and blueprint
    """
    if client is None:
        session = build_session(proxy_url=proxy_url, api_token=api_token)
        client = ScoringClient(base_url, session=session, timeout=timeout_seconds)

    listeners = ListenerRegistry()
    store = RecommendationCacheStore(listeners=listeners, ttl_seconds=ttl_seconds,
                                     max_entries=max_entries)
    tracker = ProcessingTracker()
    service = RecommendationsService(client, store, tracker, resolver=ScopeResolver())

    blueprint = create_ai_recommendations_routes(service, admin_user_ids=list(admin_user_ids))

    return {
        "client": client,
        "listeners": listeners,
        "store": store,
        "processing_tracker": tracker,
        "service": service,
        "blueprint": blueprint,
    }
