"""Exception types raised by the typed store.

Missing entries are not errors: lookups return ``None``. The classes below
signal programming or configuration defects and are never retried.
Failures of the backend itself (e.g. ``redis.exceptions.ConnectionError``)
propagate unchanged.
"""


class TypedStoreError(Exception):
    """Base class for typed store errors."""


class MissingIdentifierError(TypedStoreError):
    """An operation required an assigned identifier but the entity had none."""


class UnsupportedIdentifierError(TypedStoreError, TypeError):
    """The identifier field has a type that cannot be auto-assigned."""


class IdentifierRangeError(TypedStoreError, ValueError):
    """An auto-assigned integer identifier does not fit its declared width."""


class WrongTypeError(TypedStoreError):
    """A string command hit a set key, or a set command hit a string key."""
