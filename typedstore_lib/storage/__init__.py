"""Key-value backend package for the typed store."""
from __future__ import annotations
from typing import Optional

from .base import KeyValueBackend
from .interfaces import KeyValueProtocol
from .memory_backend import MemoryBackend
from .keyspace import entry_key_for, index_key_for

__all__ = [
    "KeyValueBackend",
    "KeyValueProtocol",
    "MemoryBackend",
    "create_backend",
    "entry_key_for",
    "index_key_for",
]


def create_backend(backend: str = "redis", options=None) -> KeyValueBackend:
    """Factory returning a backend by name.

    - backend: 'redis' or 'memory'
    - options: `ConnectionOptions` for the redis backend (ignored by memory)

    The redis backend is imported lazily so the memory backend works
    without a redis client installed.
    """
    kind = (backend or "redis").lower()
    if kind == "memory":
        return MemoryBackend()
    if kind == "redis":
        from .redis_backend import RedisBackend
        return RedisBackend(options)
    raise ValueError(f"unknown backend {backend!r}")
