"""
Scoring service boundary.

Client, wire models and error taxonomy for the external service that computes
recommendation scores. Kept free of Flask so it can be reused by scripts.
"""

from .client import ScoringClient, build_session
from .errors import (
    AuthenticationError,
    RecommendationServiceError,
    RequestRejectedError,
    TransportError,
    ValidationError,
)
from .models import (
    BatchRequest,
    BatchResult,
    PerItemFailure,
    RecommendationEntity,
    RecommendationStatus,
    TaskPriority,
    UrgencyLevel,
)

__all__ = [
    "ScoringClient",
    "build_session",
    "AuthenticationError",
    "RecommendationServiceError",
    "RequestRejectedError",
    "TransportError",
    "ValidationError",
    "BatchRequest",
    "BatchResult",
    "PerItemFailure",
    "RecommendationEntity",
    "RecommendationStatus",
    "TaskPriority",
    "UrgencyLevel",
]
