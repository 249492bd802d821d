"""Key naming conventions.

Each entity type owns an index set ``ids:<TypeName>`` listing the string
form of every identifier inserted for it, and one string key per entity,
``urn:<typename>:<id>``. Both are pure functions of their inputs so keys
are stable across processes. `str.lower` does not depend on the locale.
"""
from typing import Any

INDEX_PREFIX = "ids:"
ENTRY_PREFIX = "urn:"


def id_text(value: Any) -> str:
    """String form of an identifier as used in keys and index members.

    UUIDs render in canonical lower-case hyphenated form.
    """
    return value if isinstance(value, str) else str(value)


def index_key_for(type_name: str) -> str:
    return INDEX_PREFIX + type_name


def entry_key_for(type_name: str, id: Any) -> str:
    return f"{ENTRY_PREFIX}{type_name.lower()}:{id_text(id)}"
