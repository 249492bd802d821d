"""Typed object store on top of a key-value backend."""

from .client import DbContext, Entity, IdKind, TypedClient
from .config import ConnectionOptions

__all__ = ["DbContext", "Entity", "IdKind", "TypedClient", "ConnectionOptions"]
