import uuid
from typing import Optional

from typedstore_lib.client.entity import Entity


class Customer(Entity):
    id: Optional[int] = None
    name: str = ""


class Session(Entity):
    id: Optional[str] = None
    name: str = ""


class Device(Entity):
    id: Optional[uuid.UUID] = None
    label: str = ""


class FakeRedis:
    """Dict-backed stand-in for a ``redis.Redis(decode_responses=True)`` client.

    Records every command as ``(name, args, kwargs)`` in `calls`.
    """

    def __init__(self, fail_ping: int = 0):
        self.strings = {}
        self.sets = {}
        self.calls = []
        self.closed = False
        self._fail_ping = fail_ping

    def _record(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))

    def ping(self):
        self._record("ping")
        if self._fail_ping:
            self._fail_ping -= 1
            raise ConnectionError("connection refused")
        return True

    def exists(self, key):
        self._record("exists", key)
        return int(key in self.strings or key in self.sets)

    def get(self, key):
        self._record("get", key)
        return self.strings.get(key)

    def mget(self, keys):
        self._record("mget", list(keys))
        return [self.strings.get(k) for k in keys]

    def set(self, key, value, px=None):
        self._record("set", key, value, px=px)
        self.strings[key] = value
        return True

    def delete(self, key):
        self._record("delete", key)
        removed = int(self.strings.pop(key, None) is not None)
        removed += int(self.sets.pop(key, None) is not None)
        return removed

    def sadd(self, key, member):
        self._record("sadd", key, member)
        members = self.sets.setdefault(key, set())
        if member in members:
            return 0
        members.add(member)
        return 1

    def srem(self, key, member):
        self._record("srem", key, member)
        members = self.sets.get(key, set())
        if member not in members:
            return 0
        members.discard(member)
        return 1

    def smembers(self, key):
        self._record("smembers", key)
        return set(self.sets.get(key, set()))

    def scard(self, key):
        self._record("scard", key)
        return len(self.sets.get(key, set()))

    def close(self):
        self.closed = True

    def command_names(self):
        return [c[0] for c in self.calls]
