"""
Scope resolution: which cache partition a requester reads and writes.
"""
import logging
import threading
from typing import Dict, Optional

from scoring_client import ValidationError

from .models import CacheScope, UserContext

logger = logging.getLogger(__name__)

VIEW_ALL = "all"
VIEW_MINE = "mine"
VALID_VIEWS = (VIEW_ALL, VIEW_MINE)


class ScopeResolver:
    """Maps requesters to scopes and remembers each requester's active scope."""

    def __init__(self):
        self._lock = threading.Lock()
        self._active: Dict[str, CacheScope] = {}

    def resolve(self, user: UserContext, view: Optional[str] = None) -> CacheScope:
        """Scope for ``user``.

        Administrators default to the global scope and may toggle to their own
        list with ``view="mine"``. Staff always read their own list; asking
        for ``"all"`` does not widen it.
        """
        if view is not None and view not in VALID_VIEWS:
            raise ValidationError(f"Unknown view '{view}', expected one of {', '.join(VALID_VIEWS)}")
        if user.is_admin and view != VIEW_MINE:
            return CacheScope.all()
        return CacheScope.for_user(user.user_id)

    def activate(self, user: UserContext, scope: CacheScope) -> bool:
        """Record ``scope`` as the requester's current view.

        Returns:
            True if this is a switch away from a different scope
        """
        with self._lock:
            previous = self._active.get(user.user_id)
            self._active[user.user_id] = scope
        switched = previous is not None and previous != scope
        if switched:
            logger.info(f"User {user.user_id} switched recommendations view {previous} -> {scope}")
        return switched

    def active_scope(self, user: UserContext) -> Optional[CacheScope]:
        with self._lock:
            return self._active.get(user.user_id)

    def clear(self) -> None:
        with self._lock:
            self._active.clear()
