"""Navigation & mutation controller — cursor, scroll and review edits.

Every operation that moves the cursor or changes the viewport height ends by
restoring viewport containment::

    scroll_offset <= cursor_line < scroll_offset + viewport_height

by moving ``scroll_offset`` only. Positions are always re-derived from a
fresh :class:`VirtualLineIndex`, never patched.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from diffreview.engine.layout import CommentLocation, FileComment, LineComment, VirtualLineIndex
from diffreview.git.models import DiffFile
from diffreview.review.models import Comment, CommentType, LineSide, ReviewSession


class FocusedPanel(str, Enum):
    FILE_LIST = "file_list"
    DIFF = "diff"


@dataclass
class DiffState:
    cursor_line: int = 0  # absolute position in the flattened space
    scroll_offset: int = 0  # first visible line
    scroll_x: int = 0  # horizontal offset, bounded by the renderer
    current_file_idx: int = 0
    viewport_height: int = 0  # set by the renderer every frame


class ReviewController:
    """Stateful cursor/scroll object over a diff snapshot and a session."""

    def __init__(
        self,
        diff_files: Sequence[DiffFile],
        session: ReviewSession,
        *,
        viewport_height: int = 0,
    ) -> None:
        self.diff_files: List[DiffFile] = list(diff_files)
        self.session = session
        self.state = DiffState(viewport_height=max(0, viewport_height))
        self.file_list_selected = 0
        self.focused_panel = FocusedPanel.DIFF
        self.dirty = False
        self._ingest(self.diff_files)

    @property
    def index(self) -> VirtualLineIndex:
        return VirtualLineIndex(self.diff_files, self.session)

    # ── read helpers ─────────────────────────────────────────────────────

    def total_lines(self) -> int:
        return self.index.total_lines()

    def file_count(self) -> int:
        return len(self.diff_files)

    def reviewed_count(self) -> int:
        """Reviewed files in the current snapshot."""
        return sum(1 for f in self.diff_files if self.session.is_file_reviewed(f.display_path))

    def current_file(self) -> Optional[DiffFile]:
        if 0 <= self.state.current_file_idx < len(self.diff_files):
            return self.diff_files[self.state.current_file_idx]
        return None

    def current_file_path(self) -> Optional[str]:
        current = self.current_file()
        return current.display_path if current else None

    # ── viewport ─────────────────────────────────────────────────────────

    def set_viewport_height(self, height: int) -> None:
        self.state.viewport_height = max(0, height)
        self._ensure_cursor_visible()

    def _max_line(self) -> int:
        return max(0, self.total_lines() - 1)

    def _ensure_cursor_visible(self) -> None:
        viewport = max(1, self.state.viewport_height)
        if self.state.cursor_line < self.state.scroll_offset:
            self.state.scroll_offset = self.state.cursor_line
        if self.state.cursor_line >= self.state.scroll_offset + viewport:
            self.state.scroll_offset = self.state.cursor_line - viewport + 1

    def _update_current_file_from_cursor(self) -> None:
        idx = self.index.file_index_at(self.state.cursor_line)
        self.state.current_file_idx = idx
        self.file_list_selected = idx

    # ── cursor movement ──────────────────────────────────────────────────

    def cursor_down(self, lines: int = 1) -> None:
        self.state.cursor_line = min(self.state.cursor_line + lines, self._max_line())
        self._ensure_cursor_visible()
        self._update_current_file_from_cursor()

    def cursor_up(self, lines: int = 1) -> None:
        self.state.cursor_line = max(0, self.state.cursor_line - lines)
        self._ensure_cursor_visible()
        self._update_current_file_from_cursor()

    def scroll_down(self, lines: int) -> None:
        """Advance cursor and window together (half-page / page)."""
        max_line = self._max_line()
        self.state.cursor_line = min(self.state.cursor_line + lines, max_line)
        self.state.scroll_offset = min(self.state.scroll_offset + lines, max_line)
        self._ensure_cursor_visible()
        self._update_current_file_from_cursor()

    def scroll_up(self, lines: int) -> None:
        self.state.cursor_line = max(0, self.state.cursor_line - lines)
        self.state.scroll_offset = max(0, self.state.scroll_offset - lines)
        self._ensure_cursor_visible()
        self._update_current_file_from_cursor()

    def scroll_left(self, cols: int) -> None:
        self.state.scroll_x = max(0, self.state.scroll_x - cols)

    def scroll_right(self, cols: int) -> None:
        self.state.scroll_x += cols

    def center_cursor(self) -> None:
        half_viewport = max(1, self.state.viewport_height) // 2
        self.state.scroll_offset = max(0, self.state.cursor_line - half_viewport)

    # ── file navigation ──────────────────────────────────────────────────

    def jump_to_file(self, idx: int) -> None:
        """Put the header of file *idx* at the top of the viewport."""
        if 0 <= idx < len(self.diff_files):
            self.state.current_file_idx = idx
            self.state.cursor_line = self.index.file_scroll_offset(idx)
            self.state.scroll_offset = self.state.cursor_line
            self.file_list_selected = idx

    def next_file(self) -> None:
        self.jump_to_file(min(self.state.current_file_idx + 1, max(0, len(self.diff_files) - 1)))

    def prev_file(self) -> None:
        self.jump_to_file(max(0, self.state.current_file_idx - 1))

    def go_to_top(self) -> None:
        self.jump_to_file(0)

    def go_to_bottom(self) -> None:
        self.jump_to_file(max(0, len(self.diff_files) - 1))

    def file_list_down(self, n: int = 1) -> None:
        self.jump_to_file(min(self.file_list_selected + n, max(0, len(self.diff_files) - 1)))

    def file_list_up(self, n: int = 1) -> None:
        self.jump_to_file(max(0, self.file_list_selected - n))

    def toggle_focus(self) -> None:
        if self.focused_panel == FocusedPanel.FILE_LIST:
            self.focused_panel = FocusedPanel.DIFF
        else:
            self.focused_panel = FocusedPanel.FILE_LIST

    def next_hunk(self) -> None:
        for pos in self.index.hunk_header_positions():
            if pos > self.state.cursor_line:
                self.state.cursor_line = pos
                self._ensure_cursor_visible()
                self._update_current_file_from_cursor()
                return

    def prev_hunk(self) -> None:
        target = 0
        for pos in reversed(self.index.hunk_header_positions()):
            if pos < self.state.cursor_line:
                target = pos
                break
        self.state.cursor_line = target
        self._ensure_cursor_visible()
        self._update_current_file_from_cursor()

    # ── review mutations ─────────────────────────────────────────────────

    def toggle_reviewed(self) -> Optional[bool]:
        """Flip the current file's reviewed flag; return the new value.

        The cursor moves to the file header since the body has just
        collapsed or expanded.
        """
        current = self.current_file()
        if current is None:
            return None
        review = self.session.add_file(current.display_path, current.status)
        review.reviewed = not review.reviewed
        self.dirty = True

        self.state.cursor_line = self.index.file_scroll_offset(self.state.current_file_idx)
        self._ensure_cursor_visible()
        return review.reviewed

    def get_line_at_cursor(self) -> Optional[Tuple[int, LineSide]]:
        return self.index.line_at(self.state.cursor_line)

    def find_comment_at_cursor(self) -> Optional[CommentLocation]:
        return self.index.comment_at(self.state.cursor_line)

    def add_file_comment(self, content: str, comment_type: CommentType = CommentType.NOTE) -> Comment:
        """Append a file-level comment to the current file."""
        path, content = self._comment_target(content)
        comment = Comment(content=content, comment_type=comment_type)
        self.session.files[path].add_file_comment(comment)
        self.dirty = True
        self._ensure_cursor_visible()
        return comment

    def add_line_comment(
        self,
        line: int,
        side: LineSide,
        content: str,
        comment_type: CommentType = CommentType.NOTE,
    ) -> Comment:
        """Append a comment on *line* / *side* of the current file."""
        path, content = self._comment_target(content)
        comment = Comment(content=content, comment_type=comment_type, side=side)
        self.session.files[path].add_line_comment(line, comment)
        self.dirty = True
        self._ensure_cursor_visible()
        return comment

    def _comment_target(self, content: str) -> Tuple[str, str]:
        content = content.strip()
        if not content:
            raise ValueError("Comment cannot be empty")
        current = self.current_file()
        if current is None:
            raise ValueError("No file selected")
        self.session.add_file(current.display_path, current.status)
        return current.display_path, content

    def delete_comment_at_cursor(self) -> bool:
        """Delete the comment under the cursor; False when there is none."""
        location = self.find_comment_at_cursor()
        if location is None:
            return False
        review = self.session.get_file(location.path)
        if review is None:
            return False

        if isinstance(location, FileComment):
            del review.file_comments[location.comment_index]
        elif isinstance(location, LineComment):
            comments = review.line_comments.get(location.line_number, [])
            # Storage mixes both sides; map the side-relative index back.
            side_idx = 0
            actual_idx: Optional[int] = None
            for i, comment in enumerate(comments):
                if comment.effective_side == location.side:
                    if side_idx == location.comment_index:
                        actual_idx = i
                        break
                    side_idx += 1
            if actual_idx is None:
                return False
            del comments[actual_idx]
            if not comments:
                del review.line_comments[location.line_number]
        else:
            return False

        self.dirty = True
        self.state.cursor_line = min(self.state.cursor_line, self._max_line())
        self._ensure_cursor_visible()
        self._update_current_file_from_cursor()
        return True

    # ── reload ───────────────────────────────────────────────────────────

    def _ingest(self, files: Sequence[DiffFile]) -> None:
        for file in files:
            self.session.add_file(file.display_path, file.status)

    def reload(self, new_files: Sequence[DiffFile]) -> int:
        """Swap in a new snapshot, keeping the user's place; return file count.

        The previous in-file offset is measured against the approximate
        (comment-free) file start and clamped against the exact height of
        the target file.
        """
        current_path = self.current_file_path()
        prev_file_idx = self.state.current_file_idx
        prev_viewport_offset = max(0, self.state.cursor_line - self.state.scroll_offset)
        if self.diff_files:
            start = self.index.approximate_file_offset(prev_file_idx)
            prev_relative_line = max(0, self.state.cursor_line - start)
        else:
            prev_relative_line = 0

        self._ingest(new_files)
        self.diff_files = list(new_files)

        if not self.diff_files:
            self.state.current_file_idx = 0
            self.state.cursor_line = 0
            self.state.scroll_offset = 0
            self.file_list_selected = 0
            return 0

        last_idx = len(self.diff_files) - 1
        target_idx = min(prev_file_idx, last_idx)
        if current_path is not None:
            for i, file in enumerate(self.diff_files):
                if file.display_path == current_path:
                    target_idx = i
                    break

        self.jump_to_file(target_idx)

        index = self.index
        file_start = index.file_scroll_offset(target_idx)
        file_height = index.file_render_height(self.diff_files[target_idx])
        self.state.cursor_line = file_start + min(prev_relative_line, max(0, file_height - 1))

        viewport = max(1, self.state.viewport_height)
        relative_offset = min(prev_viewport_offset, viewport - 1)
        max_scroll = max(0, index.total_lines() - 1)
        self.state.scroll_offset = min(max(0, self.state.cursor_line - relative_offset), max_scroll)

        self._ensure_cursor_visible()
        self._update_current_file_from_cursor()
        return len(self.diff_files)
