"""Key-value backend interface definitions.

Defines the KeyValueBackend abstract class used by the typed client to
issue primitive commands. The command set is deliberately small: string
get/set/delete with optional expiry plus unordered-set primitives.
Implementations only need to guarantee atomicity of single commands.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Iterable, List, Optional, Set


class KeyValueBackend(ABC):
    """Abstract key-value backend.

    Implementations must be safe to share between threads for single
    commands; sequences of commands are not coordinated.
    """

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return True if `key` exists."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the string stored under `key` or None if missing."""

    @abstractmethod
    def get_many(self, keys: Iterable[str]) -> List[Optional[str]]:
        """Return values for `keys` in the same order, None for missing keys."""

    @abstractmethod
    def set(self, key: str, value: str, ttl: Optional[timedelta] = None) -> None:
        """Store `value` under `key`, expiring after `ttl` when given."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove `key`. Return True if something was removed."""

    @abstractmethod
    def set_add(self, set_key: str, member: str) -> bool:
        """Add `member` to the set at `set_key`. Return True if it was new."""

    @abstractmethod
    def set_remove(self, set_key: str, member: str) -> bool:
        """Remove `member` from the set at `set_key`. Return True if present."""

    @abstractmethod
    def set_members(self, set_key: str) -> Set[str]:
        """Return all members of the set at `set_key` (empty if missing)."""

    @abstractmethod
    def set_length(self, set_key: str) -> int:
        """Return the cardinality of the set at `set_key`."""

    def ping(self) -> bool:
        """Return True when the backend answers. In-process backends always do."""
        return True

    def configure(self, **options) -> None:
        """Accept runtime options. Backends without options ignore them."""
        return

    def close(self) -> None:
        """Release any resources held by the backend."""
        return


def check_ttl(ttl: Optional[timedelta]) -> Optional[timedelta]:
    if ttl is not None and ttl <= timedelta(0):
        raise ValueError(f"ttl must be positive, got {ttl!r}")
    return ttl
