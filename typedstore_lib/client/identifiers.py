"""Identifier kinds and auto-assignment.

Stored types declare one of four identifier kinds. When an entity is
inserted without an identifier a fresh one is produced here:

- INT32 / INT64: the current size of the type's index plus one. This is a
  read-then-compute step, not an atomic counter, so concurrent inserts of
  the same type can pick the same value. Serialize such inserts per type
  when that matters.
- UUID: a random (version 4) UUID.
- STRING: a random UUID rendered as text.
"""
from __future__ import annotations
import types
import typing
import uuid
from enum import Enum
from typing import Any, Callable

from typedstore_lib.errors import IdentifierRangeError, UnsupportedIdentifierError
from typedstore_lib.storage.keyspace import id_text

INT32_MAX = 2**31 - 1
INT64_MAX = 2**63 - 1
NIL_UUID = uuid.UUID(int=0)


class IdKind(Enum):
    INT32 = "int32"
    INT64 = "int64"
    UUID = "uuid"
    STRING = "string"

    @property
    def is_integer(self) -> bool:
        return self in (IdKind.INT32, IdKind.INT64)

    @classmethod
    def from_annotation(cls, annotation: Any) -> "IdKind":
        """Map a field annotation to an IdKind.

        ``Optional[X]`` is unwrapped. Python ints are unbounded and map to
        INT64; pass ``IdKind.INT32`` explicitly for 32-bit identifiers.
        Raises UnsupportedIdentifierError for anything else.
        """
        if isinstance(annotation, IdKind):
            return annotation
        origin = typing.get_origin(annotation)
        if origin is typing.Union or origin is types.UnionType:
            args = [a for a in typing.get_args(annotation) if a is not type(None)]
            if len(args) == 1:
                annotation = args[0]
        # bool is an int subclass but never a valid identifier
        if annotation is bool:
            raise UnsupportedIdentifierError("bool is not a supported identifier type")
        kind = _ANNOTATIONS.get(annotation)
        if kind is None:
            raise UnsupportedIdentifierError(
                f"unsupported identifier type {annotation!r}; expected int, uuid.UUID or str"
            )
        return kind


_ANNOTATIONS = {int: IdKind.INT64, uuid.UUID: IdKind.UUID, str: IdKind.STRING}


def is_unset(kind: IdKind, value: Any) -> bool:
    """Return True if `value` counts as "no identifier" for `kind`."""
    if value is None:
        return True
    if kind.is_integer:
        return value == 0
    if kind is IdKind.UUID:
        return value == NIL_UUID or value == "" or value == str(NIL_UUID)
    return value == ""


def assign_identifier(kind: IdKind, cardinality: Callable[[], int]) -> Any:
    """Produce a new identifier of `kind`.

    Args:
        kind: identifier kind of the stored type
        cardinality: returns the current size of the type index; only
            called for integer kinds

    Returns:
        int for integer kinds, uuid.UUID for UUID, str for STRING
    """
    if kind is IdKind.INT32 or kind is IdKind.INT64:
        return check_range(kind, int(cardinality()) + 1)
    if kind is IdKind.UUID:
        return uuid.uuid4()
    if kind is IdKind.STRING:
        return str(uuid.uuid4())
    raise UnsupportedIdentifierError(f"cannot assign identifiers of kind {kind!r}")


def check_range(kind: IdKind, value: Any) -> Any:
    """Reject integer identifiers that do not fit `kind`. Returns `value`."""
    if kind.is_integer:
        limit = INT32_MAX if kind is IdKind.INT32 else INT64_MAX
        if not -limit - 1 <= int(value) <= limit:
            raise IdentifierRangeError(f"identifier {value} exceeds {kind.value} range")
    return value


def to_key(kind: IdKind, value: Any) -> str:
    """String form of an identifier as used in keys and index members.

    UUIDs are normalised to canonical lower-case hyphenated form, so
    ``'ABCD...'`` and ``'abcd...'`` address the same entry. A string that
    is not a UUID raises ValueError for UUID kinds.
    """
    if kind is IdKind.UUID:
        return str(value if isinstance(value, uuid.UUID) else uuid.UUID(str(value)))
    if kind.is_integer:
        return str(int(value))
    return id_text(value)
