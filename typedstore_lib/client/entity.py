"""Stored entity contracts and the payload codec."""
from __future__ import annotations
from typing import Any, Generic, Optional, Protocol, Type, TypeVar, runtime_checkable

from pydantic import BaseModel

from typedstore_lib.storage.serializer import JSONSerializer, Serializer

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


@runtime_checkable
class Identifiable(Protocol):
    """Explicit access to an entity's identifier field."""

    def get_id(self) -> Any: ...

    def set_id(self, value: Any) -> None: ...


class Codec(Protocol[T]):
    def encode(self, entity: T) -> str: ...

    def decode(self, payload: str) -> T: ...


class Entity(BaseModel):
    """Base model for stored entities.

    Subclasses narrow the identifier type, which also selects how missing
    identifiers are assigned::

        class Customer(Entity):
            id: Optional[int] = None
            name: str = ""
    """

    id: Optional[Any] = None

    def get_id(self) -> Any:
        return self.id

    def set_id(self, value: Any) -> None:
        self.id = value


class EntityCodec(Generic[M]):
    """Encode pydantic models to string payloads and back.

    Models are dumped in JSON mode (UUIDs, datetimes become text) and
    passed through `serializer`. Decoding re-validates the model.
    """

    def __init__(self, model: Type[M], serializer: Optional[Serializer] = None) -> None:
        self.model = model
        self.serializer = serializer or JSONSerializer()

    def encode(self, entity: M) -> str:
        return self.serializer.dump(entity.model_dump(mode="json")).decode("utf-8")

    def decode(self, payload: str) -> M:
        return self.model.model_validate(self.serializer.load(payload.encode("utf-8")))
