"""Short-lived role cache with single-flight lookups.

A ``UserRoleCache`` holds one slot for the identity it is bound to: either a
resolved ``(role, fetched_at)`` pair or a pending lookup that concurrent
callers join instead of issuing their own query. Binding a different
identity empties the slot.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from concurrent.futures import Future
from threading import Lock

from propdesk.core.enums import ROLE_ADMIN, ROLE_AGENT, ROLE_TENANT
from propdesk.core.exceptions import NotFoundError
from propdesk.database.db import get_db_session
from propdesk.database.models import Profile

logger = logging.getLogger(__name__)

RoleFetcher = Callable[[str], "str | None"]


def load_role_from_db(user_id: str) -> str | None:
    """Read the role column of the user's profile."""
    with get_db_session() as session:
        return session.query(Profile.role).filter(Profile.id == user_id).scalar()


class UserRoleCache:
    def __init__(
        self,
        fetch_role: RoleFetcher = load_role_from_db,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch_role = fetch_role
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = Lock()
        self._user_id: str | None = None
        self._role: str | None = None
        self._fetched_at: float | None = None
        self._pending: Future | None = None
        self._generation = 0
        self.error: Exception | None = None

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def role(self) -> str | None:
        return self._role

    @property
    def loading(self) -> bool:
        return self._pending is not None

    @property
    def is_admin(self) -> bool:
        return self._role == ROLE_ADMIN

    @property
    def is_agent(self) -> bool:
        return self._role == ROLE_AGENT

    @property
    def is_tenant(self) -> bool:
        return self._role == ROLE_TENANT

    def bind(self, user_id: str | None) -> None:
        """Attach the cache to an identity, dropping state if it changed."""
        with self._lock:
            if user_id != self._user_id:
                self._user_id = user_id
                self._reset_locked()

    def clear(self) -> None:
        with self._lock:
            self._reset_locked()

    def has_role(self, required: str | list[str] | tuple[str, ...] | set[str]) -> bool:
        role = self._role
        if not role:
            return False
        if isinstance(required, str):
            return role == required
        return role in required

    def get_role(self, force: bool = False) -> str | None:
        with self._lock:
            user_id = self._user_id
            if user_id is None:
                self._role = None
                return None
            pending = self._pending
            if pending is None:
                if not force and self._is_fresh_locked():
                    return self._role
                pending = Future()
                self._pending = pending
                generation = self._generation
                owner = True
            else:
                owner = False

        if not owner:
            return pending.result()
        return self._resolve(user_id, pending, generation)

    def _resolve(self, user_id: str, pending: Future, generation: int) -> str | None:
        try:
            role = self._fetch_role(user_id)
            if not role:
                raise NotFoundError(f"No role found for user {user_id}.")
        except Exception as exc:
            logger.warning(
                "auth.role.fetch_failed",
                extra={"event": "auth.role.fetch_failed", "user_id": user_id, "error": str(exc)},
            )
            with self._lock:
                if generation == self._generation:
                    self._role = None
                    self._fetched_at = None
                    self.error = exc
                    self._pending = None
            pending.set_result(None)
            return None

        with self._lock:
            if generation == self._generation:
                self._role = role
                self._fetched_at = self._clock()
                self.error = None
                self._pending = None
        pending.set_result(role)
        return role

    @property
    def is_idle(self) -> bool:
        """No lookup in flight and no fresh role held."""
        with self._lock:
            return self._pending is None and not self._is_fresh_locked()

    def _is_fresh_locked(self) -> bool:
        if self._role is None or self._fetched_at is None:
            return False
        return (self._clock() - self._fetched_at) < self._ttl_seconds

    def _reset_locked(self) -> None:
        self._role = None
        self._fetched_at = None
        self._pending = None
        self.error = None
        self._generation += 1


class RoleCacheRegistry:
    """One ``UserRoleCache`` per identity for multi-user processes.

    Entries are kept in least-recently-used order. Adding an identity drops
    every idle entry (expired or failed), then the least recently used ones
    while the registry is at ``max_entries``. Entries with a lookup in flight
    are never evicted.
    """

    def __init__(
        self,
        fetch_role: RoleFetcher = load_role_from_db,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 1024,
    ) -> None:
        self._fetch_role = fetch_role
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._max_entries = max_entries
        self._lock = Lock()
        self._caches: OrderedDict[str, UserRoleCache] = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._caches)

    def for_user(self, user_id: str) -> UserRoleCache:
        with self._lock:
            cache = self._caches.get(user_id)
            if cache is not None:
                self._caches.move_to_end(user_id)
                return cache
            self._prune_locked()
            cache = UserRoleCache(
                fetch_role=self._fetch_role,
                ttl_seconds=self._ttl_seconds,
                clock=self._clock,
            )
            cache.bind(user_id)
            self._caches[user_id] = cache
            return cache

    def get_role(self, user_id: str, force: bool = False) -> str | None:
        return self.for_user(user_id).get_role(force=force)

    def invalidate(self, user_id: str) -> None:
        with self._lock:
            cache = self._caches.pop(user_id, None)
        if cache is not None:
            cache.clear()

    def _prune_locked(self) -> None:
        for user_id in [key for key, cache in self._caches.items() if cache.is_idle]:
            del self._caches[user_id]
        # Room for the entry about to be added.
        while len(self._caches) >= self._max_entries:
            victim = next((key for key, cache in self._caches.items() if not cache.loading), None)
            if victim is None:
                break
            del self._caches[victim]
