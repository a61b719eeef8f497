"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

CommentTypeName = Literal["note", "suggestion", "issue", "praise"]

COMMENT_TYPES = ("note", "suggestion", "issue", "praise")


@dataclass
class NavigationConfig:
    half_page_lines: int = 15
    page_lines: int = 30
    horizontal_step: int = 4  # columns per h / l press


@dataclass
class CommentsConfig:
    default_type: CommentTypeName = "note"


@dataclass
class SessionConfig:
    directory: Optional[str] = None  # None = $DIFFREVIEW_DATA_DIR or XDG data dir
    discard_stale: bool = True  # delete sessions recorded against another HEAD


@dataclass
class UIConfig:
    file_list_width: int = 20  # percent of the screen
    show_help_on_start: bool = False


@dataclass
class DiffReviewConfig:
    version: str = "1.0"
    navigation: NavigationConfig = field(default_factory=NavigationConfig)
    comments: CommentsConfig = field(default_factory=CommentsConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    ui: UIConfig = field(default_factory=UIConfig)
