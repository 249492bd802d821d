"""Connection provider for typed clients.

A DbContext owns one backend handle. The handle is created on the first
call to `database()` and shared by every TypedClient built from the
context; clients never close it. Release it once with `close()` or by
using the context as a ``with`` block::

    with DbContext("localhost:6379,connectRetry=3") as ctx:
        customers = TypedClient(ctx, Customer)
"""
from __future__ import annotations
import logging
import threading
from typing import Callable, Optional, Union

from typedstore_lib.config.options import DEFAULT_ENDPOINT, DEFAULT_PORT, ConnectionOptions
from typedstore_lib.storage import create_backend
from typedstore_lib.storage.base import KeyValueBackend

logger = logging.getLogger(__name__)


class DbContext:
    """Owns the backend handle for one endpoint.

    Parameters
    - connection: connection string or ConnectionOptions; defaults to
      ``localhost:6379``
    - host/port: alternative to `connection` for a plain endpoint
    - backend: backend kind passed to `create_backend` ('redis' or 'memory')
    """

    def __init__(
        self,
        connection: Union[str, ConnectionOptions, None] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        backend: str = "redis",
        factory: Optional[Callable[..., KeyValueBackend]] = None,
    ) -> None:
        if host is not None:
            if connection is not None:
                raise ValueError("pass either connection or host/port, not both")
            shown = f"[{host}]" if ":" in host else host
            options = ConnectionOptions(endpoint=f"{shown}:{port or DEFAULT_PORT}")
        elif isinstance(connection, ConnectionOptions):
            options = connection
        else:
            options = ConnectionOptions.parse(connection or DEFAULT_ENDPOINT)
        self.options = options
        self.backend = backend
        self._factory = factory or create_backend
        self._lock = threading.Lock()
        self._db: Optional[KeyValueBackend] = None
        self._owned = True
        self._closed = False

    @classmethod
    def from_backend(cls, db: KeyValueBackend) -> "DbContext":
        """Wrap an existing handle. The caller keeps ownership of `db`."""
        ctx = cls()
        ctx._db = db
        ctx._owned = False
        return ctx

    @property
    def closed(self) -> bool:
        return self._closed

    def database(self) -> KeyValueBackend:
        """Return the shared backend handle, connecting on first use."""
        with self._lock:
            if self._closed:
                raise RuntimeError("DbContext is closed")
            if self._db is None:
                self._db = self._connect()
            return self._db

    def _connect(self) -> KeyValueBackend:
        db = self._factory(self.backend, self.options)
        attempts = self.options.connect_retry + 1
        last_error: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            try:
                db.ping()
                logger.info("Connected to %s backend at %s", self.backend, self.options.describe())
                return db
            except Exception as e:
                last_error = e
                logger.debug("Connect attempt %d/%d to %s failed: %s",
                             attempt, attempts, self.options.endpoint, e)

        if self.options.abort_on_connect_fail:
            db.close()
            raise last_error  # pyright: ignore[reportGeneralTypeIssues]
        logger.warning("Could not reach %s after %d attempt(s); continuing, commands will reconnect",
                       self.options.endpoint, attempts)
        return db

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            db, self._db = self._db, None
        if db is not None and self._owned:
            db.close()

    def __enter__(self) -> "DbContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
