"""
Presentation helpers for recommendation lists.
"""
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from scoring_client.models import (
    URGENCY_RANK,
    RecommendationEntity,
    RecommendationStatus,
    UrgencyLevel,
)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _timestamp(value: Optional[datetime]) -> datetime:
    if value is None:
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def sort_recommendations(recommendations: Iterable[RecommendationEntity]) -> List[RecommendationEntity]:
    """Highest priority score first, then urgency, then newest."""
    return sorted(
        recommendations,
        key=lambda rec: (
            rec.priority_score or 0,
            URGENCY_RANK.get(rec.urgency_level or UrgencyLevel.LOW, 1),
            _timestamp(rec.created_at),
        ),
        reverse=True,
    )


def display_priority_level(score: Optional[float]) -> str:
    if not score:
        return "Low"
    if score >= 90:
        return "Critical"
    if score >= 70:
        return "High"
    if score >= 50:
        return "Medium"
    return "Low"


def format_priority_score(score: Optional[float]) -> str:
    if not score:
        return "N/A"
    return f"{score:g}/100"


def format_urgency_level(urgency: Optional[UrgencyLevel]) -> str:
    if urgency is None:
        return "Unknown"
    return urgency.value.capitalize()


def is_actionable(recommendation: RecommendationEntity) -> bool:
    """Completed and carrying non-blank advice."""
    return (
        recommendation.status == RecommendationStatus.COMPLETED
        and bool((recommendation.recommendation_text or "").strip())
    )
