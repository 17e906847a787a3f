"""
Room document store.

Each room is one JSON-like document. The in-memory store keeps plain dicts
(never model instances) so nothing handed out can alias stored state, and
validates every document against ``SessionSnapshot`` on the way in and out.
Writes are compare-and-swap on ``version`` when the caller passes
``expected_version`` (0 means "only if the room does not exist yet").
"""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any, Protocol

from models.session import SessionSnapshot

logger = logging.getLogger(__name__)

COUNTER_FIELDS = frozenset({"viewers", "time_remaining_seconds"})


class SessionNotFoundError(LookupError):
    pass


class VersionConflictError(RuntimeError):
    def __init__(self, session_id: str, expected: int, actual: int) -> None:
        super().__init__(f"room {session_id}: expected version {expected}, found {actual}")
        self.session_id = session_id
        self.expected = expected
        self.actual = actual


class StoreUnavailableError(RuntimeError):
    pass


class SessionStore(Protocol):
    async def get(self, session_id: str) -> SessionSnapshot | None: ...

    async def put(
        self,
        session_id: str,
        snapshot: SessionSnapshot,
        *,
        merge_existing: bool = False,
        expected_version: int | None = None,
    ) -> SessionSnapshot: ...

    async def increment(self, session_id: str, field: str, delta: int) -> int: ...


class InMemorySessionStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._documents: dict[str, dict[str, Any]] = {}

    async def get(self, session_id: str) -> SessionSnapshot | None:
        async with self._lock:
            doc = self._documents.get(session_id)
            if doc is None:
                return None
            return SessionSnapshot.model_validate(copy.deepcopy(doc))

    async def put(
        self,
        session_id: str,
        snapshot: SessionSnapshot,
        *,
        merge_existing: bool = False,
        expected_version: int | None = None,
    ) -> SessionSnapshot:
        # A merge only carries the fields the caller actually set, like a partial document update.
        incoming = snapshot.model_dump(mode="json", exclude={"version"}, exclude_unset=merge_existing)
        async with self._lock:
            existing = self._documents.get(session_id)
            current_version = existing["version"] if existing else 0
            if expected_version is not None and expected_version != current_version:
                raise VersionConflictError(session_id, expected_version, current_version)

            doc = copy.deepcopy(existing) if merge_existing and existing else {}
            doc.update(incoming)
            doc["id"] = session_id
            doc["version"] = current_version + 1
            # Validate before storing so a bad write never replaces a good document.
            validated = SessionSnapshot.model_validate(doc)
            self._documents[session_id] = validated.model_dump(mode="json")
        logger.debug("[store] put room=%s version=%d merge=%s", session_id, validated.version, merge_existing)
        return validated

    async def increment(self, session_id: str, field: str, delta: int) -> int:
        """Atomically add ``delta`` to a counter field, clamped at 0."""
        if field not in COUNTER_FIELDS:
            raise ValueError(f"{field!r} is not a counter field")
        async with self._lock:
            doc = self._documents.get(session_id)
            if doc is None:
                raise SessionNotFoundError(session_id)
            doc[field] = max(0, int(doc.get(field, 0)) + delta)
            doc["version"] = doc.get("version", 0) + 1
            return doc[field]

    def clear(self) -> None:
        """Drop every room. Used by tests; also resets the lock for a fresh event loop."""
        self._documents.clear()
        self._lock = asyncio.Lock()


session_store = InMemorySessionStore()
