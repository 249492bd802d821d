"""Redis implementation of the key-value backend using redis-py.

Clients are created with ``decode_responses=True`` so every value crossing
the boundary is a `str`. Errors raised by redis-py (``RedisError`` and its
subclasses) are not caught here; callers see them as-is.
"""
from __future__ import annotations
import logging
import socket
from datetime import timedelta
from typing import Any, Dict, Iterable, List, Optional, Set

import redis

from typedstore_lib.config.options import ConnectionOptions
from .base import KeyValueBackend, check_ttl

logger = logging.getLogger(__name__)


def client_kwargs(options: ConnectionOptions) -> Dict[str, Any]:
    """Translate ConnectionOptions into `redis.Redis` keyword arguments.

    Zero/unset options are left out so redis-py defaults apply.
    """
    host = options.host
    if options.resolve_dns:
        resolved = socket.gethostbyname(host)
        logger.debug("Resolved %s to %s", host, resolved)
        host = resolved

    kwargs: Dict[str, Any] = {
        "host": host,
        "port": options.port,
        "db": options.database,
        "decode_responses": True,
    }
    if options.password:
        kwargs["password"] = options.password
    if options.sync_timeout:
        kwargs["socket_timeout"] = options.sync_timeout / 1000.0
    if options.connect_timeout:
        kwargs["socket_connect_timeout"] = options.connect_timeout / 1000.0
    if options.keep_alive:
        kwargs["socket_keepalive"] = True
        kwargs["health_check_interval"] = options.keep_alive
    if options.client_name:
        kwargs["client_name"] = options.client_name
    if options.ssl:
        kwargs["ssl"] = True
        # redis-py verifies against the connect host; ssl_host forces checking on
        if options.ssl_host:
            kwargs["ssl_check_hostname"] = True

    for name in ("allow_admin", "tie_breaker", "write_buffer"):
        if getattr(options, name):
            logger.debug("Option %s has no redis-py counterpart; ignored", name)
    return kwargs


class RedisBackend(KeyValueBackend):
    """Backend issuing one Redis command per primitive.

    Parameters
    - options: connection options used to build a client when `client`
      is not supplied.
    - client: an existing `redis.Redis` (or compatible) instance. It must
      have been created with ``decode_responses=True``.
    """

    def __init__(self, options: Optional[ConnectionOptions] = None, client: Any = None) -> None:
        self.options = options or ConnectionOptions()
        if client is None:
            client = redis.Redis(**client_kwargs(self.options))
        self._client = client

    @property
    def client(self) -> Any:
        return self._client

    def ping(self) -> bool:
        return bool(self._client.ping())

    def exists(self, key: str) -> bool:
        return bool(self._client.exists(key))

    def get(self, key: str) -> Optional[str]:
        return self._client.get(key)

    def get_many(self, keys: Iterable[str]) -> List[Optional[str]]:
        keys = list(keys)
        if not keys:
            # MGET with no keys is a protocol error
            return []
        return list(self._client.mget(keys))

    def set(self, key: str, value: str, ttl: Optional[timedelta] = None) -> None:
        check_ttl(ttl)
        logger.debug("SET %s ttl=%s", key, ttl)
        if ttl is None:
            self._client.set(key, value)
        else:
            millis = max(1, int(ttl.total_seconds() * 1000))
            self._client.set(key, value, px=millis)

    def delete(self, key: str) -> bool:
        logger.debug("DEL %s", key)
        return int(self._client.delete(key)) > 0

    def set_add(self, set_key: str, member: str) -> bool:
        logger.debug("SADD %s %s", set_key, member)
        return int(self._client.sadd(set_key, member)) == 1

    def set_remove(self, set_key: str, member: str) -> bool:
        logger.debug("SREM %s %s", set_key, member)
        return int(self._client.srem(set_key, member)) == 1

    def set_members(self, set_key: str) -> Set[str]:
        return set(self._client.smembers(set_key))

    def set_length(self, set_key: str) -> int:
        return int(self._client.scard(set_key))

    def close(self) -> None:
        logger.debug("Closing redis client for %s", self.options.endpoint)
        self._client.close()
