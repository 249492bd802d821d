"""Simple memory-backed key-value backend.

Strings and sets share one keyspace, as they do in Redis, so a command of
the wrong kind against an existing key raises `WrongTypeError`. Expiring
entries are dropped lazily when they are next touched.
"""
from __future__ import annotations
import logging
import time
from datetime import timedelta
from threading import RLock
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from typedstore_lib.errors import WrongTypeError
from .base import KeyValueBackend, check_ttl

logger = logging.getLogger(__name__)


class MemoryBackend(KeyValueBackend):
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._lock = RLock()
        self._store: Dict[str, Any] = {}
        self._expires: Dict[str, float] = {}
        self._clock = clock

    def _live(self, key: str) -> Any:
        # caller holds the lock
        deadline = self._expires.get(key)
        if deadline is not None and self._clock() >= deadline:
            self._store.pop(key, None)
            self._expires.pop(key, None)
        return self._store.get(key)

    def _string(self, key: str) -> Optional[str]:
        value = self._live(key)
        if value is not None and not isinstance(value, str):
            raise WrongTypeError(f"key {key!r} holds a set, not a string")
        return value

    def _set(self, key: str) -> Optional[Set[str]]:
        value = self._live(key)
        if value is not None and not isinstance(value, set):
            raise WrongTypeError(f"key {key!r} holds a string, not a set")
        return value

    def exists(self, key: str) -> bool:
        with self._lock:
            return self._live(key) is not None

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._string(key)

    def get_many(self, keys: Iterable[str]) -> List[Optional[str]]:
        with self._lock:
            # MGET reports keys of the wrong type as missing
            values = [self._live(k) for k in keys]
            return [v if isinstance(v, str) else None for v in values]

    def set(self, key: str, value: str, ttl: Optional[timedelta] = None) -> None:
        check_ttl(ttl)
        logger.debug("SET %s ttl=%s", key, ttl)
        with self._lock:
            self._store[key] = str(value)
            if ttl is None:
                self._expires.pop(key, None)
            else:
                self._expires[key] = self._clock() + ttl.total_seconds()

    def delete(self, key: str) -> bool:
        logger.debug("DEL %s", key)
        with self._lock:
            present = self._live(key) is not None
            self._store.pop(key, None)
            self._expires.pop(key, None)
            return present

    def set_add(self, set_key: str, member: str) -> bool:
        logger.debug("SADD %s %s", set_key, member)
        with self._lock:
            members = self._set(set_key)
            if members is None:
                members = self._store[set_key] = set()
            if member in members:
                return False
            members.add(member)
            return True

    def set_remove(self, set_key: str, member: str) -> bool:
        logger.debug("SREM %s %s", set_key, member)
        with self._lock:
            members = self._set(set_key)
            if not members or member not in members:
                return False
            members.discard(member)
            if not members:
                del self._store[set_key]
            return True

    def set_members(self, set_key: str) -> Set[str]:
        with self._lock:
            return set(self._set(set_key) or ())

    def set_length(self, set_key: str) -> int:
        with self._lock:
            return len(self._set(set_key) or ())

    def keys(self) -> List[str]:
        """Return all live keys. Convenience for tests and inspection."""
        with self._lock:
            return [k for k in list(self._store) if self._live(k) is not None]

    def close(self) -> None:
        with self._lock:
            self._store.clear()
            self._expires.clear()
