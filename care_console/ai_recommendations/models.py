"""
Data models for the AI recommendations subsystem.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional

from scoring_client.models import RecommendationEntity


@dataclass(frozen=True)
class CacheScope:
    """Partition key of the cache: every entity (``user_id`` None) or one staff member."""
    user_id: Optional[str] = None

    @classmethod
    def all(cls) -> "CacheScope":
        return cls()

    @classmethod
    def for_user(cls, user_id) -> "CacheScope":
        return cls(user_id=str(user_id))

    @property
    def is_global(self) -> bool:
        return self.user_id is None

    @property
    def key(self) -> str:
        return "all" if self.is_global else f"user-{self.user_id}"

    def __str__(self) -> str:
        return self.key


@dataclass
class ScopeEntry:
    """Cached list for one scope."""
    entities: List[RecommendationEntity]
    refreshed_at: float  # epoch seconds

    def ids(self) -> List[int]:
        return [entity.id for entity in self.entities]


class ProcessingState(Enum):
    """Local lifecycle of a generate/refresh attempt."""
    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ProcessingStatusRecord:
    """Latest processing attempt for one entity id."""
    entity_id: int
    status: ProcessingState
    started_at: datetime
    completed_at: Optional[datetime] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "entity_id": self.entity_id,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "error": self.error,
        }


class Role(Enum):
    """Console roles relevant to scope resolution."""
    ADMIN = "admin"
    STAFF = "staff"


@dataclass(frozen=True)
class UserContext:
    """The authenticated requester."""
    user_id: str
    role: Role = Role.STAFF

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_uid(cls, uid: Optional[str], admin_user_ids: Iterable[str] = ()) -> Optional["UserContext"]:
        """Build a context from a session uid; None when there is no session."""
        if not uid or not str(uid).strip():
            return None
        uid = str(uid).strip()
        role = Role.ADMIN if uid in set(admin_user_ids) else Role.STAFF
        return cls(user_id=uid, role=role)
