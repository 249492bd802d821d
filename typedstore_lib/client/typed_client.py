"""Typed client: stores entities of one type in a key-value backend.

Indexed mode (the default) keeps every entity under ``urn:<type>:<id>``
and records its identifier in the ``ids:<Type>`` set used by `get_all`.
Cache mode (`insert` with an expiry, ``from_cache=True`` on lookups and
deletes) writes the raw identifier as key, with a time-to-live and no index
entry, so cached entities never show up in `get_all`.

Multi-command operations are not atomic. `insert` adds to the index and
then writes the entry; `delete` removes from the index and then deletes
the entry; integer identifiers are derived from the index size. Concurrent
writers of the same type can interleave between those commands (duplicate
integer identifiers, an entity briefly visible through `get_by_id` but not
`get_all`). If a later command fails the earlier one is not undone.
Callers that care must serialize inserts and deletes per type.
"""
from __future__ import annotations
import logging
from datetime import timedelta
from typing import Any, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from typedstore_lib.errors import MissingIdentifierError, UnsupportedIdentifierError
from typedstore_lib.storage.keyspace import entry_key_for, index_key_for
from .context import DbContext
from .entity import Codec, EntityCodec, Identifiable
from .identifiers import IdKind, assign_identifier, check_range, is_unset, to_key

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Identifiable)
Expiry = Union[timedelta, int, float]


def _resolve_id_kind(entity_type: type, id_kind: Optional[IdKind]) -> IdKind:
    if id_kind is not None:
        return IdKind.from_annotation(id_kind)
    fields = getattr(entity_type, "model_fields", None)
    if not fields or "id" not in fields:
        raise UnsupportedIdentifierError(
            f"{entity_type.__name__} has no typed 'id' field; pass id_kind explicitly"
        )
    return IdKind.from_annotation(fields["id"].annotation)


def _as_timedelta(expiry: Expiry) -> timedelta:
    if isinstance(expiry, timedelta):
        return expiry
    return timedelta(seconds=expiry)


class TypedClient(Generic[T]):
    """CRUD access to entities of `entity_type`.

    Parameters
    - context: DbContext providing the shared backend handle
    - entity_type: the stored class; its ``__name__`` names the keys
    - type_name: override for the name used in keys
    - id_kind: identifier kind; inferred from a pydantic ``id`` field
      annotation when omitted
    - codec: entity <-> string codec; defaults to JSON for pydantic models

    Unsupported identifier types are rejected here, not on first insert.
    """

    def __init__(
        self,
        context: DbContext,
        entity_type: Type[T],
        *,
        type_name: Optional[str] = None,
        id_kind: Optional[IdKind] = None,
        codec: Optional[Codec[T]] = None,
    ) -> None:
        self._db = context.database()
        self._type = type_name or entity_type.__name__
        self._id_kind = _resolve_id_kind(entity_type, id_kind)
        if codec is None:
            if not (isinstance(entity_type, type) and issubclass(entity_type, BaseModel)):
                raise TypeError(f"{entity_type.__name__} is not a pydantic model; pass a codec")
            codec = EntityCodec(entity_type)
        self._codec = codec

    @property
    def type_name(self) -> str:
        return self._type

    @property
    def id_kind(self) -> IdKind:
        return self._id_kind

    def get_all(self) -> List[T]:
        """Return every indexed entity of this type.

        Index members whose entry is missing are skipped. Order follows
        the backend and is not stable.
        """
        keys = self.get_set_urn_keys()
        if not keys:
            return []
        payloads = self._db.get_many(keys)
        return [self._codec.decode(p) for p in payloads if p]

    def get_by_id(self, id: Any, from_cache: bool = False) -> Optional[T]:
        """Return the entity with identifier `id`, or None if absent.

        With ``from_cache=True`` the raw cache key is read instead of the
        indexed entry.
        """
        if from_cache:
            value = self._db.get(self._id_key(id))
            if value is None:
                return None
            return self._codec.decode(value)

        key = self.get_typed_urn_key(id)
        if not self._db.exists(key):
            return None
        value = self._db.get(key)
        # removed between the existence check and the read
        if value is None:
            return None
        return self._codec.decode(value)

    def insert(self, entity: Optional[T], expiry: Optional[Expiry] = None) -> Optional[T]:
        """Insert `entity`, assigning an identifier when it has none.

        Without `expiry` the identifier is added to the type index and the
        entry is written. With `expiry` (timedelta or seconds) only the raw
        cache key is written, with that time-to-live and no index entry.

        Returns:
            The entity, carrying its (possibly new) identifier
        """
        if entity is None:
            return None
        if is_unset(self._id_kind, entity.get_id()):
            entity.set_id(assign_identifier(self._id_kind, self.get_typed_set_length))
            logger.debug("Assigned id %s to new %s", entity.get_id(), self._type)
        else:
            check_range(self._id_kind, entity.get_id())

        if expiry is not None:
            self.store_entity(entity, expiry)
            return entity

        self.add_key_to_typed_set(entity.get_id())
        self.store_entity(entity)
        return entity

    def store(self, entity: Optional[T]) -> Optional[T]:
        """Write `entity` over its existing entry. The index is not touched.

        Raises:
            MissingIdentifierError: the entity has no identifier
            IdentifierRangeError: an integer id does not fit the declared width
        """
        if entity is None:
            return None
        if is_unset(self._id_kind, entity.get_id()):
            raise MissingIdentifierError(f"{self._type} requires an assigned id to be stored")
        check_range(self._id_kind, entity.get_id())
        self.store_entity(entity)
        return entity

    def delete(self, entity: Optional[T], from_cache: bool = False) -> None:
        """Remove `entity` from the index and delete its entry.

        With ``from_cache=True`` only the raw cache key is deleted.
        """
        if entity is None:
            return
        if from_cache:
            self._db.delete(self._id_key(entity.get_id()))
            return
        self.remove_key_from_typed_set(entity.get_id())
        self.remove_key_from_urn(entity.get_id())

    def add_key_to_typed_set(self, key: Any) -> None:
        self._db.set_add(self.get_set_key(), self._id_key(key))

    def remove_key_from_typed_set(self, key: Any) -> None:
        self._db.set_remove(self.get_set_key(), self._id_key(key))

    def get_typed_set_length(self) -> int:
        return self._db.set_length(self.get_set_key())

    def get_incremented_key_value(self) -> int:
        """Return the index size plus one, i.e. the next integer identifier."""
        return self.get_typed_set_length() + 1

    def get_set_keys(self) -> List[str]:
        """Return the raw identifiers in the type index."""
        return list(self._db.set_members(self.get_set_key()))

    def get_set_urn_keys(self) -> List[str]:
        """Return the entry keys for every identifier in the type index."""
        return [entry_key_for(self._type, member) for member in self.get_set_keys()]

    def store_entity(self, entity: T, expiry: Optional[Expiry] = None) -> None:
        """Serialize and write `entity`.

        Without `expiry` the indexed entry key is written; with it, the
        raw cache key with a time-to-live.
        """
        payload = self._codec.encode(entity)
        if expiry is None:
            self._db.set(self.get_typed_urn_key(entity.get_id()), payload)
        else:
            self._db.set(self._id_key(entity.get_id()), payload, _as_timedelta(expiry))

    def remove_key_from_urn(self, key: Any) -> None:
        self._db.delete(self.get_typed_urn_key(key))

    def get_set_key(self) -> str:
        return index_key_for(self._type)

    def get_typed_urn_key(self, key: Any) -> str:
        return entry_key_for(self._type, self._id_key(key))

    def _id_key(self, id: Any) -> str:
        return to_key(self._id_kind, id)
