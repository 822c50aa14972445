"""
Models package for scoring service data.
"""

from .recommendation_models import (
    RecommendationEntity,
    RecommendationStatus,
    TaskPriority,
    UrgencyLevel,
    URGENCY_RANK,
)

from .batch_models import (
    BatchRequest,
    BatchResult,
    PerItemFailure,
)

__all__ = [
    "RecommendationEntity",
    "RecommendationStatus",
    "TaskPriority",
    "UrgencyLevel",
    "URGENCY_RANK",
    "BatchRequest",
    "BatchResult",
    "PerItemFailure",
]
