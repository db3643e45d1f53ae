"""State Cache: content-addressed, TTL-expiring store of pending dry runs.

A dry run saves its (path, edits) pair under a fingerprint; approval
looks the fingerprint up and applies the cached edits to the file's
*current* content. Only the edit list is cached, never file content.

Expired entries are swept lazily on every save/get/delete; there is no
background timer. A single lock guards the map and the sweep so the
cache is safe when tools run on several threads.
"""

from __future__ import annotations

import hashlib
import json
import logging
import math
import os
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from .edit_request import EditRequest, canonical_edits_json, normalize_edits

logger = logging.getLogger(__name__)

STATE_TTL_ENV = "MCP_EDIT_STATE_TTL"
DEFAULT_STATE_TTL_MS = 60_000
FINGERPRINT_LENGTH = 8


def fingerprint(path: str, edits: Sequence[Any]) -> str:
    """Deterministic short id for a (path, edit set) pair.

    Edits are normalized to the canonical shape, match patterns are
    trimmed and the list is sorted by target line then end line, so
    logically identical input hashes identically regardless of key order
    or submission order.
    """
    requests = normalize_edits(edits)
    payload = json.dumps({"path": path, "edits": canonical_edits_json(requests)}, sort_keys=True)
    return hashlib.sha256(payload.encode()).hexdigest()[:FINGERPRINT_LENGTH]


def parse_ttl_ms(value: float | int | str | None) -> float:
    """Validate a TTL setting in milliseconds.

    Raises:
        ValueError: If the value is not a positive finite number
    """
    error = f"{STATE_TTL_ENV} must be a positive number when set"
    if value is None:
        return float(DEFAULT_STATE_TTL_MS)
    if isinstance(value, bool):
        raise ValueError(error)
    try:
        ttl = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(error) from e
    if not math.isfinite(ttl) or ttl <= 0:
        raise ValueError(error)
    return ttl


@dataclass(frozen=True)
class CacheEntry:
    """Pending edit set awaiting approval. Never updated in place."""

    fingerprint: str
    path: str
    edits: tuple[EditRequest, ...]
    created_at: float


class StateCache:
    """In-memory dry-run store keyed by fingerprint.

    Args:
        ttl_ms: Entry lifetime in milliseconds. When None, read from the
            MCP_EDIT_STATE_TTL environment variable (default 60000).
        clock: Monotonic time source in seconds (injectable for tests)

    Raises:
        ValueError: If the configured TTL is not a positive number
    """

    def __init__(
        self,
        ttl_ms: float | int | str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_ms is None:
            ttl_ms = os.getenv(STATE_TTL_ENV) or None
        self._ttl_ms = parse_ttl_ms(ttl_ms)
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def ttl_ms(self) -> float:
        return self._ttl_ms

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return (now - entry.created_at) * 1000 > self._ttl_ms

    def _sweep(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired edit state(s)")
        return len(expired)

    def cleanup(self) -> int:
        """Remove every expired entry, return how many were removed."""
        with self._lock:
            return self._sweep(self._clock())

    def save(self, path: str, edits: Sequence[Any]) -> str:
        """Store a pending edit set and return its fingerprint.

        Saving the same (path, edits) again returns the same id and
        replaces the entry with a fresh timestamp.
        """
        requests = tuple(normalize_edits(edits))
        state_id = fingerprint(path, requests)
        with self._lock:
            now = self._clock()
            self._sweep(now)
            self._entries[state_id] = CacheEntry(
                fingerprint=state_id, path=path, edits=requests, created_at=now
            )
        logger.debug(f"Saved edit state {state_id} for {path} ({len(requests)} edit(s))")
        return state_id

    def get(self, state_id: str) -> CacheEntry | None:
        """Return the entry if present and within TTL, else None.

        An expired entry is deleted as a side effect.
        """
        with self._lock:
            now = self._clock()
            self._sweep(now)
            entry = self._entries.get(state_id)
            if entry is not None and not self._is_expired(entry, now):
                return entry
            self._entries.pop(state_id, None)
        logger.debug(f"Edit state {state_id} not found or expired")
        return None

    def delete(self, state_id: str) -> None:
        """Remove an entry; unknown ids are ignored."""
        with self._lock:
            self._sweep(self._clock())
            self._entries.pop(state_id, None)

    def is_valid(self, state_id: str) -> bool:
        return self.get(state_id) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        """Number of live (non-expired) entries."""
        with self._lock:
            self._sweep(self._clock())
            return len(self._entries)

    def __contains__(self, state_id: object) -> bool:
        return isinstance(state_id, str) and self.is_valid(state_id)


__all__ = [
    "DEFAULT_STATE_TTL_MS",
    "STATE_TTL_ENV",
    "CacheEntry",
    "StateCache",
    "fingerprint",
    "parse_ttl_ms",
]
