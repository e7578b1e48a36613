# Session store: the single source of truth for in-flight auth attempts.
# Created: 2026-10-19
#
# SessionStore is the interface the relay talks to. MemorySessionStore
# serves single-process deployments; a shared-cache implementation must
# give consume() compare-and-delete semantics to keep delivery at-most-once.
#
# Expired sessions are invisible to every read path (lazy expiry) and are
# physically removed by sweep_expired().

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime, timedelta

from authrelay.relay.models import Session

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=10)


class KeyCollisionError(RuntimeError):
    """A read- or write-key is already held by a live session."""


class SessionStore(ABC):
    """Keyed, ephemeral map from read-key to Session."""

    def __init__(self, ttl: timedelta = DEFAULT_TTL):
        self.ttl = ttl

    @abstractmethod
    def create(self, session: Session) -> None:
        """Insert a new session. Raises KeyCollisionError if either key is live."""

    @abstractmethod
    def get(self, read_key: str) -> Session | None:
        """Return a copy of the live session, or None."""

    @abstractmethod
    def find_by_write_key(self, write_key: str) -> Session | None:
        """Return a copy of the live session bound to ``write_key``, or None."""

    @abstractmethod
    def update(self, read_key: str, mutator: Callable[[Session], None]) -> Session | None:
        """Apply ``mutator`` atomically and return a copy of the result.

        Returns None (and does not call ``mutator``) if the session is gone.
        """

    @abstractmethod
    def consume(self, read_key: str) -> Session | None:
        """Atomically remove and return the session if it has a result.

        A pending session is returned as a copy and left in place. Only one
        caller can ever receive a completed session.
        """

    @abstractmethod
    def delete(self, read_key: str) -> bool:
        """Remove the session if present. Returns True if it was removed."""

    @abstractmethod
    def sweep_expired(self, max_age: timedelta | None = None) -> int:
        """Remove sessions older than ``max_age`` (default: the store TTL)."""

    @abstractmethod
    def snapshot(self) -> list[Session]:
        """Copies of every live session, for diagnostics."""

    @abstractmethod
    def __len__(self) -> int: ...


class MemorySessionStore(SessionStore):
    """In-process store guarded by one lock.

    Critical sections are constant-time dict operations and never span an
    await, so sessions on different keys do not wait on each other in any
    measurable way.
    """

    def __init__(self, ttl: timedelta = DEFAULT_TTL):
        super().__init__(ttl)
        self._lock = threading.Lock()
        self._sessions: dict[str, Session] = {}
        self._write_index: dict[str, str] = {}  # write_key → read_key

    # -- internal helpers (call with the lock held) --

    def _live(self, read_key: str, now: datetime) -> Session | None:
        session = self._sessions.get(read_key)
        if session is None:
            return None
        if session.is_expired(self.ttl, now):
            self._remove(read_key)
            logger.debug("Session %s… expired on access", read_key[:6])
            return None
        return session

    def _remove(self, read_key: str) -> Session | None:
        session = self._sessions.pop(read_key, None)
        if session is not None:
            self._write_index.pop(session.write_key, None)
        return session

    # -- SessionStore --

    def create(self, session: Session) -> None:
        keys = (session.read_key, session.write_key)
        with self._lock:
            for key in keys:
                if key in self._sessions or key in self._write_index:
                    raise KeyCollisionError("key already in use")
            self._sessions[session.read_key] = replace(session)
            self._write_index[session.write_key] = session.read_key

    def get(self, read_key: str) -> Session | None:
        with self._lock:
            session = self._live(read_key, datetime.now(UTC))
            return replace(session) if session else None

    def find_by_write_key(self, write_key: str) -> Session | None:
        with self._lock:
            read_key = self._write_index.get(write_key)
            if read_key is None:
                return None
            session = self._live(read_key, datetime.now(UTC))
            return replace(session) if session else None

    def update(self, read_key: str, mutator: Callable[[Session], None]) -> Session | None:
        with self._lock:
            session = self._live(read_key, datetime.now(UTC))
            if session is None:
                return None
            candidate = replace(session)
            mutator(candidate)
            if candidate.read_key != read_key or candidate.write_key != session.write_key:
                raise ValueError("session keys are immutable")
            self._sessions[read_key] = candidate
            return replace(candidate)

    def consume(self, read_key: str) -> Session | None:
        with self._lock:
            session = self._live(read_key, datetime.now(UTC))
            if session is None:
                return None
            if session.result is None:
                return replace(session)
            return self._remove(read_key)

    def delete(self, read_key: str) -> bool:
        with self._lock:
            return self._remove(read_key) is not None

    def sweep_expired(self, max_age: timedelta | None = None) -> int:
        max_age = max_age if max_age is not None else self.ttl
        now = datetime.now(UTC)
        with self._lock:
            expired = [k for k, s in self._sessions.items() if s.is_expired(max_age, now)]
            for key in expired:
                self._remove(key)
        if expired:
            logger.info("Swept %d expired session(s)", len(expired))
        return len(expired)

    def snapshot(self) -> list[Session]:
        now = datetime.now(UTC)
        with self._lock:
            return [replace(s) for s in self._sessions.values() if not s.is_expired(self.ttl, now)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
