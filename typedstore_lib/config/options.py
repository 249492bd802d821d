"""Connection options for the key-value backend.

Options can be given as a mapping (e.g. loaded from YAML) or as a
connection string of the form ``host:port,key=value,...``::

    ConnectionOptions.parse("cache.local:6380,password=s3cret,ssl=true")

Zero or empty values mean "use the backend default".
"""
from __future__ import annotations
from typing import Optional, Tuple

from pydantic import BaseModel, Field

DEFAULT_ENDPOINT = "localhost:6379"
DEFAULT_PORT = 6379

# connection-string key -> field name
_STRING_KEYS = {
    "abortconnect": "abort_on_connect_fail",
    "allowadmin": "allow_admin",
    "connectretry": "connect_retry",
    "connecttimeout": "connect_timeout",
    "keepalive": "keep_alive",
    "synctimeout": "sync_timeout",
    "name": "client_name",
    "password": "password",
    "resolvedns": "resolve_dns",
    "ssl": "ssl",
    "sslhost": "ssl_host",
    "tiebreaker": "tie_breaker",
    "writebuffer": "write_buffer",
    "defaultdatabase": "database",
}

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


class ConnectionOptions(BaseModel):
    endpoint: str = DEFAULT_ENDPOINT
    database: int = Field(default=0, ge=0)
    allow_admin: bool = False
    abort_on_connect_fail: bool = True
    connect_retry: int = Field(default=0, ge=0)
    # milliseconds
    connect_timeout: int = Field(default=0, ge=0)
    sync_timeout: int = Field(default=0, ge=0)
    # seconds
    keep_alive: int = Field(default=0, ge=0)
    client_name: Optional[str] = None
    password: Optional[str] = None
    resolve_dns: bool = False
    ssl: bool = False
    ssl_host: Optional[str] = None
    tie_breaker: Optional[str] = None
    write_buffer: int = Field(default=0, ge=0)

    @classmethod
    def parse(cls, text: str) -> "ConnectionOptions":
        """Build options from a connection string.

        The first comma-separated part without ``=`` is the endpoint.
        Raises ValueError for unknown keys or malformed values.
        """
        values: dict = {}
        for raw in (text or "").split(","):
            part = raw.strip()
            if not part:
                continue
            if "=" not in part:
                if "endpoint" in values:
                    raise ValueError(f"only one endpoint is supported, got {part!r}")
                values["endpoint"] = part
                continue
            name, _, value = part.partition("=")
            field = _STRING_KEYS.get(name.strip().lower())
            if field is None:
                raise ValueError(f"unknown connection option {name.strip()!r}")
            values[field] = _coerce(field, value.strip())
        return cls(**values)

    @property
    def host(self) -> str:
        return split_endpoint(self.endpoint)[0]

    @property
    def port(self) -> int:
        return split_endpoint(self.endpoint)[1]

    def describe(self) -> str:
        """Return the endpoint plus the non-default options, password hidden."""
        parts = [self.endpoint]
        for field, value in self.model_dump(exclude_defaults=True, exclude={"endpoint"}).items():
            parts.append(f"{field}={'***' if field == 'password' else value}")
        return ",".join(parts)


def _coerce(field: str, value: str):
    annotation = ConnectionOptions.model_fields[field].annotation
    if annotation is bool:
        lowered = value.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"invalid boolean for {field}: {value!r}")
    if annotation is int:
        try:
            return int(value)
        except ValueError as e:
            raise ValueError(f"invalid integer for {field}: {value!r}") from e
    return value


def split_endpoint(endpoint: str) -> Tuple[str, int]:
    """Split ``host[:port]`` into its parts. IPv6 hosts go in brackets."""
    text = endpoint.strip()
    if text.startswith("["):
        host, sep, rest = text[1:].partition("]")
        if not sep:
            raise ValueError(f"unterminated IPv6 endpoint {endpoint!r}")
        port_text = rest[1:] if rest.startswith(":") else ""
    else:
        host, _, port_text = text.partition(":")
    if not host:
        raise ValueError(f"endpoint {endpoint!r} has no host")
    if not port_text:
        return host, DEFAULT_PORT
    try:
        return host, int(port_text)
    except ValueError as e:
        raise ValueError(f"invalid port in endpoint {endpoint!r}") from e
