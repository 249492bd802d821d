from datetime import timedelta
from typing import Protocol, Iterable, List, Optional, Set, runtime_checkable


@runtime_checkable
class KeyValueProtocol(Protocol):
    """Backend protocol mirroring `typedstore_lib.storage.KeyValueBackend`.

    Implementations should follow the semantics documented on the abstract
    base class in `typedstore_lib.storage.base` (None for missing keys,
    single-command atomicity, etc.).
    """

    def exists(self, key: str) -> bool: ...

    def get(self, key: str) -> Optional[str]: ...

    def get_many(self, keys: Iterable[str]) -> List[Optional[str]]: ...

    def set(self, key: str, value: str, ttl: Optional[timedelta] = None) -> None: ...

    def delete(self, key: str) -> bool: ...

    def set_add(self, set_key: str, member: str) -> bool: ...

    def set_remove(self, set_key: str, member: str) -> bool: ...

    def set_members(self, set_key: str) -> Set[str]: ...

    def set_length(self, set_key: str) -> int: ...

    def ping(self) -> bool: ...

    def configure(self, **options) -> None: ...

    def close(self) -> None: ...
