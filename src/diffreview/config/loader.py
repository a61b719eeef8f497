"""Load and merge configuration from .diffreview.toml and env vars."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from diffreview.config.schema import (
    COMMENT_TYPES,
    CommentsConfig,
    DiffReviewConfig,
    NavigationConfig,
    SessionConfig,
    UIConfig,
)

CONFIG_FILENAME = ".diffreview.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(repo_root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = repo_root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _merge_env_overrides(cfg: DiffReviewConfig) -> None:
    """Apply DIFFREVIEW_* environment variable overrides."""
    if val := os.environ.get("DIFFREVIEW_COMMENT_TYPE"):
        if val.lower() in COMMENT_TYPES:
            cfg.comments.default_type = val.lower()  # type: ignore[assignment]
    if val := os.environ.get("DIFFREVIEW_SESSION_DIR"):
        cfg.session.directory = val
    if val := os.environ.get("DIFFREVIEW_HALF_PAGE"):
        try:
            lines = int(val)
        except ValueError:
            lines = 0
        if lines > 0:
            cfg.navigation.half_page_lines = lines


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    import dataclasses

    raw = data.get(section, {})
    if not isinstance(raw, dict):
        raise ConfigError(f"[{section}] must be a table")
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in raw.items() if k in valid_fields}
    return cls(**filtered)


def _validate(cfg: DiffReviewConfig) -> None:
    if cfg.comments.default_type not in COMMENT_TYPES:
        raise ConfigError(
            f"Invalid comments.default_type: {cfg.comments.default_type!r} "
            f"(expected one of {', '.join(COMMENT_TYPES)})"
        )
    nav = cfg.navigation
    for name in ("half_page_lines", "page_lines", "horizontal_step"):
        value = getattr(nav, name)
        if not isinstance(value, int) or value < 1:
            raise ConfigError(f"navigation.{name} must be a positive integer, got {value!r}")
    width = cfg.ui.file_list_width
    if not isinstance(width, int) or not 5 <= width <= 80:
        raise ConfigError(f"ui.file_list_width must be between 5 and 80, got {width!r}")


def load_config(
    repo_root: Path,
    config_override: Optional[str] = None,
) -> DiffReviewConfig:
    """Load, validate, and return a DiffReviewConfig."""
    config_path = find_config_file(repo_root, config_override)

    if config_path is None:
        cfg = DiffReviewConfig()
    else:
        raw = _parse_toml(config_path)
        cfg = DiffReviewConfig(
            version=raw.get("version", "1.0"),
            navigation=_build_section(raw, NavigationConfig, "navigation"),
            comments=_build_section(raw, CommentsConfig, "comments"),
            session=_build_section(raw, SessionConfig, "session"),
            ui=_build_section(raw, UIConfig, "ui"),
        )

    _merge_env_overrides(cfg)
    _validate(cfg)
    return cfg
