"""Review session models — comments, per-file review state, sessions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from diffreview.git.models import FileStatus


def _utc_now() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


class CommentType(str, Enum):
    NOTE = "note"
    SUGGESTION = "suggestion"
    ISSUE = "issue"
    PRAISE = "praise"

    @property
    def label(self) -> str:
        return self.value.upper()

    def cycle(self) -> "CommentType":
        """Return the next type: note → suggestion → issue → praise → note."""
        order = list(CommentType)
        return order[(order.index(self) + 1) % len(order)]


class LineSide(str, Enum):
    OLD = "old"
    NEW = "new"


@dataclass(frozen=True)
class Comment:
    """A review comment. Immutable: editing is delete + recreate."""

    content: str
    comment_type: CommentType = CommentType.NOTE
    side: Optional[LineSide] = None  # None for file-level comments
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: str = field(default_factory=_utc_now)

    @property
    def effective_side(self) -> LineSide:
        """Side used for display; legacy line comments without one are NEW."""
        return self.side or LineSide.NEW

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "comment_type": self.comment_type.value,
            "side": self.side.value if self.side else None,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Comment":
        side = data.get("side")
        return cls(
            content=data["content"],
            comment_type=CommentType(data.get("comment_type", "note")),
            side=LineSide(side) if side else None,
            id=data.get("id") or uuid.uuid4().hex,
            created_at=data.get("created_at") or _utc_now(),
        )


@dataclass
class FileReview:
    """Review state of a single file."""

    path: str
    status: FileStatus = FileStatus.MODIFIED
    reviewed: bool = False
    file_comments: List[Comment] = field(default_factory=list)
    line_comments: Dict[int, List[Comment]] = field(default_factory=dict)

    def add_file_comment(self, comment: Comment) -> None:
        self.file_comments.append(comment)

    def add_line_comment(self, line: int, comment: Comment) -> None:
        self.line_comments.setdefault(line, []).append(comment)

    def comments_on_side(self, line: int, side: LineSide) -> List[Comment]:
        """Line comments at *line* on *side*, in insertion order."""
        return [c for c in self.line_comments.get(line, []) if c.effective_side == side]

    def comment_count(self) -> int:
        return len(self.file_comments) + sum(len(c) for c in self.line_comments.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "reviewed": self.reviewed,
            "file_comments": [c.to_dict() for c in self.file_comments],
            "line_comments": {
                str(line): [c.to_dict() for c in comments]
                for line, comments in sorted(self.line_comments.items())
            },
        }

    @classmethod
    def from_dict(cls, path: str, data: Dict[str, Any]) -> "FileReview":
        return cls(
            path=path,
            status=FileStatus(data.get("status", "modified")),
            reviewed=bool(data.get("reviewed", False)),
            file_comments=[Comment.from_dict(c) for c in data.get("file_comments", [])],
            line_comments={
                int(line): [Comment.from_dict(c) for c in comments]
                for line, comments in data.get("line_comments", {}).items()
            },
        )


@dataclass
class ReviewSession:
    """Review state of one working tree, keyed by file path."""

    repo_path: str
    base_commit: Optional[str] = None
    branch_name: Optional[str] = None
    files: Dict[str, FileReview] = field(default_factory=dict)
    session_notes: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: str = field(default_factory=_utc_now)
    updated_at: str = field(default_factory=_utc_now)

    def add_file(self, path: str, status: FileStatus = FileStatus.MODIFIED) -> FileReview:
        """Register *path*; existing review state is kept untouched."""
        review = self.files.get(path)
        if review is None:
            review = FileReview(path=path, status=status)
            self.files[path] = review
        else:
            review.status = status
        return review

    def get_file(self, path: str) -> Optional[FileReview]:
        return self.files.get(path)

    def is_file_reviewed(self, path: str) -> bool:
        review = self.files.get(path)
        return review is not None and review.reviewed

    def rename_file(self, old_path: str, new_path: str) -> bool:
        """Move the review state of *old_path* to *new_path*.

        Reloads key strictly by path, so callers that know about a rename
        must re-key before reloading. Returns False when there is nothing
        to move or the new path is already taken.
        """
        if old_path not in self.files or new_path in self.files:
            return False
        review = self.files.pop(old_path)
        review.path = new_path
        self.files[new_path] = review
        return True

    def reviewed_count(self) -> int:
        return sum(1 for r in self.files.values() if r.reviewed)

    def comment_count(self) -> int:
        return sum(r.comment_count() for r in self.files.values())

    def has_comments(self) -> bool:
        return self.comment_count() > 0

    def touch(self) -> None:
        self.updated_at = _utc_now()

    def iter_comments(self) -> Iterator[Tuple[str, Optional[int], Comment]]:
        """Yield ``(path, line, comment)`` for every comment, report order.

        Files are sorted by path; within a file, file comments (line None)
        come first, then line comments sorted by line number.
        """
        for path in sorted(self.files):
            review = self.files[path]
            for comment in review.file_comments:
                yield path, None, comment
            for line in sorted(review.line_comments):
                for comment in review.line_comments[line]:
                    yield path, line, comment

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": "1",
            "id": self.id,
            "repo_path": self.repo_path,
            "base_commit": self.base_commit,
            "branch_name": self.branch_name,
            "session_notes": self.session_notes,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "files": {path: review.to_dict() for path, review in sorted(self.files.items())},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReviewSession":
        return cls(
            repo_path=data["repo_path"],
            base_commit=data.get("base_commit"),
            branch_name=data.get("branch_name"),
            files={
                path: FileReview.from_dict(path, review)
                for path, review in data.get("files", {}).items()
            },
            session_notes=data.get("session_notes"),
            id=data.get("id") or uuid.uuid4().hex,
            created_at=data.get("created_at") or _utc_now(),
            updated_at=data.get("updated_at") or _utc_now(),
        )
