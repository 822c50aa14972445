"""
Batch request/result models.

Both are transient: built and consumed inside a single orchestration call.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..errors import ValidationError
from .recommendation_models import RecommendationEntity


class PerItemFailure(BaseModel):
    """The service answered but rejected one id."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    entity_id: int = Field(alias="entityId")
    reason: str = Field(default="Recommendation generation failed")

    def to_dict(self) -> dict:
        return {"entityId": self.entity_id, "reason": self.reason}


@dataclass(frozen=True)
class BatchRequest:
    """A de-duplicated set of ids to score in one call."""
    entity_ids: tuple
    requester_id: Optional[str] = None
    include_ranking: bool = False

    @classmethod
    def create(cls, entity_ids: Iterable, requester_id: Optional[str] = None,
               include_ranking: bool = False) -> "BatchRequest":
        """Validate and de-duplicate ids, keeping first-seen order."""
        if entity_ids is None:
            raise ValidationError("At least one request id is required")
        unique: List[int] = []
        for raw in entity_ids:
            if isinstance(raw, bool):
                raise ValidationError(f"Invalid request id: {raw!r}")
            try:
                entity_id = int(raw)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid request id: {raw!r}") from None
            if entity_id not in unique:
                unique.append(entity_id)
        if not unique:
            raise ValidationError("At least one request id is required")
        return cls(entity_ids=tuple(unique), requester_id=requester_id,
                   include_ranking=bool(include_ranking))

    def to_payload(self) -> dict:
        """Body for the batch endpoint."""
        payload = {
            "requestIds": list(self.entity_ids),
            "includePriorityRanking": self.include_ranking,
        }
        user_id = _numeric_user_id(self.requester_id)
        if user_id is not None:
            payload["userId"] = user_id
        return payload


def _numeric_user_id(requester_id: Optional[str]) -> Optional[int]:
    """The service keys users by number; console-only ids such as 'admin1' are not sent."""
    if requester_id is None:
        return None
    text = str(requester_id).strip()
    return int(text) if text.isdigit() else None


@dataclass
class BatchResult:
    """Merged outcome of one orchestration call."""
    successes: List[RecommendationEntity] = field(default_factory=list)
    failures: List[PerItemFailure] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.successes)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def total_processed(self) -> int:
        return self.success_count + self.failure_count

    def describe(self) -> str:
        """Single user-facing summary for the whole call."""
        if self.failure_count == 0:
            return f"{self.success_count} recommendation(s) generated"
        if self.success_count == 0:
            return f"All {self.failure_count} recommendation(s) failed"
        return f"{self.success_count} succeeded, {self.failure_count} failed"

    def to_dict(self) -> dict:
        return {
            "totalProcessed": self.total_processed,
            "successCount": self.success_count,
            "failureCount": self.failure_count,
            "message": self.describe(),
            "recommendations": [entity.to_dict() for entity in self.successes],
            "failures": [failure.to_dict() for failure in self.failures],
        }
