"""
Recommendation data models.

Pydantic models for the records returned by the scoring service. Field
aliases follow the service's camelCase JSON; Python code uses snake_case.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UrgencyLevel(str, Enum):
    """Urgency reported for a care request."""
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


URGENCY_RANK = {
    UrgencyLevel.CRITICAL: 4,
    UrgencyLevel.HIGH: 3,
    UrgencyLevel.MEDIUM: 2,
    UrgencyLevel.LOW: 1,
}


class RecommendationStatus(str, Enum):
    """Status of a recommendation as reported by the scoring service."""
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class RecommendationEntity(BaseModel):
    """One externally scored care request.

    Instances are frozen: the cache replaces entities, it never edits them.
    Only the wire aliases are accepted on input: the service row id arrives
    as ``id`` and must never populate the ``id`` field, which is keyed by
    ``requestId``.
    """
    model_config = ConfigDict(populate_by_name=False, frozen=True)

    id: int = Field(alias="requestId", description="Identifier of the underlying care request")
    recommendation_id: Optional[int] = Field(default=None, alias="id", description="Service-side row id")
    user_id: Optional[int] = Field(default=None, alias="userId", description="Staff member the recommendation belongs to")
    priority_score: Optional[float] = Field(default=None, alias="priorityScore", description="Priority on a 0-100 scale")
    priority_reason: Optional[str] = Field(default=None, alias="priorityReason")
    urgency_level: Optional[UrgencyLevel] = Field(default=None, alias="urgencyLevel")
    recommendation_text: Optional[str] = Field(default=None, alias="recommendationText")
    status: RecommendationStatus = Field(default=RecommendationStatus.PENDING)
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    def to_dict(self) -> dict:
        """Convert to the camelCase JSON shape used by the console."""
        return self.model_dump(mode="json", by_alias=True)


class TaskPriority(BaseModel):
    """Priority ranking for a single task, independent of the cache."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    task_id: int = Field(alias="taskId")
    priority_score: float = Field(alias="priorityScore", description="Priority on a 1-10 scale")
    priority_reason: Optional[str] = Field(default=None, alias="priorityReason")
    urgency_level: UrgencyLevel = Field(default=UrgencyLevel.LOW, alias="urgencyLevel")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
