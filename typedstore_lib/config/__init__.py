"""Configuration package: connection options and YAML config loading."""

from .options import ConnectionOptions
from .loader import StoreConfig, load_config, parse_config

__all__ = ["ConnectionOptions", "StoreConfig", "load_config", "parse_config"]
