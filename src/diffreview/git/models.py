"""Data models for the parsed diff snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class LineOrigin(str, Enum):
    ADDITION = "addition"
    DELETION = "deletion"
    CONTEXT = "context"

    @property
    def prefix(self) -> str:
        return {"addition": "+", "deletion": "-", "context": " "}[self.value]


class FileStatus(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"

    def as_char(self) -> str:
        return {
            "added": "A",
            "modified": "M",
            "deleted": "D",
            "renamed": "R",
            "copied": "C",
        }[self.value]


@dataclass(frozen=True, slots=True)
class DiffLine:
    """A single line inside a hunk."""

    origin: LineOrigin
    content: str
    old_lineno: Optional[int] = None
    new_lineno: Optional[int] = None


@dataclass(frozen=True)
class Hunk:
    """A contiguous block of changes, headed by its ``@@`` line."""

    header: str
    lines: Tuple[DiffLine, ...] = ()


@dataclass(frozen=True)
class DiffFile:
    """One changed file in the snapshot."""

    path: str
    old_path: Optional[str] = None  # set on renames and copies
    status: FileStatus = FileStatus.MODIFIED
    is_binary: bool = False
    hunks: Tuple[Hunk, ...] = ()

    @property
    def display_path(self) -> str:
        return self.path

    @property
    def line_count(self) -> int:
        return sum(len(h.lines) for h in self.hunks)
