"""YAML configuration for typed store deployments.

The configuration file is human-editable YAML::

    log_level: INFO
    backend: redis
    connection: "localhost:6379,connectTimeout=5000"

`connection` may also be a mapping of `ConnectionOptions` fields. The
`TYPEDSTORE_CONNECTION` environment variable overrides it with a
connection string.
"""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError

from .options import ConnectionOptions

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("data/config/typedstore.yml")
ENV_CONNECTION = "TYPEDSTORE_CONNECTION"
BACKENDS = ("redis", "memory")


@dataclass
class StoreConfig:
    log_level: str = "WARNING"
    backend: str = "redis"
    connection: ConnectionOptions = field(default_factory=ConnectionOptions)


def parse_config(data: Any) -> StoreConfig:
    """Build a StoreConfig from already-parsed YAML data."""
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValueError("invalid config format: expected mapping")

    backend = str(data.get("backend") or "redis").lower()
    if backend not in BACKENDS:
        raise ValueError(f"invalid config: unknown backend {backend!r}")

    raw_conn = data.get("connection")
    try:
        if raw_conn is None:
            conn = ConnectionOptions()
        elif isinstance(raw_conn, str):
            conn = ConnectionOptions.parse(raw_conn)
        elif isinstance(raw_conn, Mapping):
            conn = ConnectionOptions(**raw_conn)
        else:
            raise ValueError("invalid config: connection must be a string or mapping")
    except ValidationError as e:
        raise ValueError(f"invalid config: {e}") from e

    return StoreConfig(
        log_level=str(data.get("log_level") or "WARNING").upper(),
        backend=backend,
        connection=conn,
    )


def load_config(path: Optional[Path] = None) -> StoreConfig:
    """Load the configuration file, applying the environment override.

    A missing file yields the defaults. Malformed YAML raises ValueError.
    """
    cfg_path = Path(path) if path else DEFAULT_CONFIG_PATH
    data: Any = {}
    if cfg_path.exists():
        with cfg_path.open("r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError("invalid config format: parse error") from e
        logger.debug("Loaded config from %s", cfg_path)
    else:
        logger.debug("No config at %s; using defaults", cfg_path)

    cfg = parse_config(data)
    override = os.environ.get(ENV_CONNECTION)
    if override:
        logger.debug("Connection overridden by %s", ENV_CONNECTION)
        cfg.connection = ConnectionOptions.parse(override)
    return cfg


def config_template() -> str:
    """Return the default YAML template."""
    template = {
        "log_level": "INFO",
        "backend": "redis",
        "connection": ConnectionOptions().model_dump(exclude_none=True),
    }
    return yaml.safe_dump(template, sort_keys=False)


def write_template(path: Optional[Path] = None) -> Path:
    cfg_path = Path(path) if path else DEFAULT_CONFIG_PATH
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    cfg_path.write_text(config_template(), encoding="utf-8")
    return cfg_path
