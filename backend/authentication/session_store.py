"""
In-process session state.

``SessionStore`` maps opaque session ids to user ids with an expiry, and
``LogoutTombstones`` remembers users who explicitly logged out so that a
stale session cannot silently re-authenticate them. Both are owned by a
``SessionRegistry`` that the application builds at startup and tears down
at shutdown. Every method is safe to call from concurrent request threads.
"""

import secrets
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, replace

from loguru import logger

# Minimum gap between sweeps of expired sessions
PURGE_INTERVAL_SECONDS = 60


@dataclass(frozen=True)
class SessionRecord:
    session_id: str
    user_id: int
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class SessionStore:
    """Thread-safe map of session id to SessionRecord."""

    def __init__(
        self,
        max_age_seconds: int,
        clock: Callable[[], float] = time.time,
        purge_interval_seconds: int = PURGE_INTERVAL_SECONDS,
    ) -> None:
        self._max_age = max_age_seconds
        self._clock = clock
        self._purge_interval = purge_interval_seconds
        self._records: dict[str, SessionRecord] = {}
        self._lock = threading.Lock()
        self._last_purge = clock()

    @property
    def max_age_seconds(self) -> int:
        return self._max_age

    def create(self, user_id: int) -> SessionRecord:
        """
        Open a new session for a user and return it.

        Expired records left behind by abandoned browsers are swept here, at
        most once per purge interval.
        """
        now = self._clock()
        record = SessionRecord(
            session_id=secrets.token_urlsafe(32),
            user_id=user_id,
            created_at=now,
            expires_at=now + self._max_age,
        )
        with self._lock:
            if now - self._last_purge >= self._purge_interval:
                self._purge_locked(now)
            self._records[record.session_id] = record
        return record

    def get(self, session_id: str) -> SessionRecord | None:
        """Return a live session. Expired records are dropped on read."""
        now = self._clock()
        with self._lock:
            record = self._records.get(session_id)
            if record is None:
                return None
            if record.is_expired(now):
                del self._records[session_id]
                return None
            return record

    def touch(self, session_id: str) -> SessionRecord | None:
        """Push a live session's expiry forward by the full max age."""
        now = self._clock()
        with self._lock:
            record = self._records.get(session_id)
            if record is None or record.is_expired(now):
                self._records.pop(session_id, None)
                return None
            record = replace(record, expires_at=now + self._max_age)
            self._records[session_id] = record
            return record

    def destroy(self, session_id: str) -> bool:
        """Remove a session. Returns False if it did not exist."""
        with self._lock:
            return self._records.pop(session_id, None) is not None

    def all(self) -> list[SessionRecord]:
        """Snapshot of live sessions."""
        now = self._clock()
        with self._lock:
            return [r for r in self._records.values() if not r.is_expired(now)]

    def purge_expired(self) -> int:
        """Drop every expired record. Returns how many were removed."""
        with self._lock:
            return self._purge_locked(self._clock())

    def _purge_locked(self, now: float) -> int:
        expired = [sid for sid, r in self._records.items() if r.is_expired(now)]
        for sid in expired:
            del self._records[sid]
        self._last_purge = now
        if expired:
            logger.debug(f"Purged {len(expired)} expired sessions")
        return len(expired)

    def clear(self) -> int:
        """Drop every session. Returns how many were removed."""
        with self._lock:
            count = len(self._records)
            self._records.clear()
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class LogoutTombstones:
    """Thread-safe set of user ids that explicitly logged out."""

    def __init__(self) -> None:
        self._user_ids: set[int] = set()
        self._lock = threading.Lock()

    def add(self, user_id: int) -> None:
        with self._lock:
            self._user_ids.add(user_id)

    def discard(self, user_id: int) -> None:
        with self._lock:
            self._user_ids.discard(user_id)

    def clear(self) -> int:
        with self._lock:
            count = len(self._user_ids)
            self._user_ids.clear()
        return count

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return user_id in self._user_ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._user_ids)


class SessionRegistry:
    """
    Owns the session store and the tombstone set for one application.

    Built in the FastAPI lifespan and reached only through
    ``services.auth_service.AuthService``.
    """

    def __init__(
        self, max_age_seconds: int, clock: Callable[[], float] = time.time
    ) -> None:
        self.sessions = SessionStore(max_age_seconds, clock=clock)
        self.tombstones = LogoutTombstones()

    def close(self) -> None:
        sessions = self.sessions.clear()
        tombstones = self.tombstones.clear()
        logger.info(
            f"Session registry closed ({sessions} sessions, {tombstones} tombstones dropped)"
        )
