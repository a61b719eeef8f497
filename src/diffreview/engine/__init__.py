"""Virtual diff-document engine — line index and navigation controller."""

from diffreview.engine.controller import DiffState, FocusedPanel, ReviewController
from diffreview.engine.layout import (
    CommentLocation,
    DiffLineEntry,
    FileComment,
    FileHeader,
    HunkHeader,
    LayoutEntry,
    LineComment,
    Location,
    Placeholder,
    Spacing,
    VirtualLineIndex,
)

__all__ = [
    "CommentLocation",
    "DiffLineEntry",
    "DiffState",
    "FileComment",
    "FileHeader",
    "FocusedPanel",
    "HunkHeader",
    "LayoutEntry",
    "LineComment",
    "Location",
    "Placeholder",
    "ReviewController",
    "Spacing",
    "VirtualLineIndex",
]
