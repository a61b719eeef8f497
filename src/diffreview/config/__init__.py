"""Configuration loading, schema, and defaults."""

from diffreview.config.loader import ConfigError, load_config
from diffreview.config.schema import DiffReviewConfig

__all__ = [
    "ConfigError",
    "DiffReviewConfig",
    "load_config",
]
