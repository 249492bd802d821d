"""Typed client package: connection context, identifiers and the typed store."""

from .context import DbContext
from .entity import Entity, EntityCodec, Identifiable
from .identifiers import IdKind
from .typed_client import TypedClient

__all__ = ["DbContext", "Entity", "EntityCodec", "Identifiable", "IdKind", "TypedClient"]
