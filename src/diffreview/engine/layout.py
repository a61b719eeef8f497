"""Virtual line index — the flattened line space of a diff snapshot.

Layout of one file, top to bottom::

    file header                       1 line
    (reviewed files end here)
    file comment blocks               comment_display_lines(c) each
    placeholder                       1 line, binary file or no hunks
      or, per hunk:
    hunk header                       1 line
    diff line                         1 line
      old-side comment blocks         comments at old_lineno, side OLD
      new-side comment blocks         comments at new_lineno, side NEW
    spacing                           1 line

Nothing is cached. Every query walks ``(files, session)`` afresh, so the
index can never disagree with the data it describes.

Two heights are exposed:

* ``file_render_height`` is exact (comment blocks included). Cursor and
  scroll bounds, offsets and ``locate`` all use it.
* ``approximate_file_height`` ignores comments. Only ``reload`` uses it, to
  measure where the cursor sat inside its file before the snapshot changed.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from diffreview.git.models import DiffFile, DiffLine, LineOrigin
from diffreview.review.models import Comment, FileReview, LineSide, ReviewSession


@dataclass(frozen=True)
class FileHeader:
    file_index: int
    path: str


@dataclass(frozen=True)
class FileComment:
    file_index: int
    path: str
    comment_index: int
    comment: Comment
    row: int = 0  # line within the comment block


@dataclass(frozen=True)
class Placeholder:
    file_index: int
    path: str
    is_binary: bool


@dataclass(frozen=True)
class HunkHeader:
    file_index: int
    path: str
    hunk_index: int
    header: str


@dataclass(frozen=True)
class DiffLineEntry:
    file_index: int
    path: str
    hunk_index: int
    line: DiffLine

    @property
    def old_lineno(self) -> Optional[int]:
        return self.line.old_lineno

    @property
    def new_lineno(self) -> Optional[int]:
        return self.line.new_lineno


@dataclass(frozen=True)
class LineComment:
    file_index: int
    path: str
    line_number: int
    side: LineSide
    comment_index: int  # index among comments on this line *and* side
    comment: Comment
    row: int = 0


@dataclass(frozen=True)
class Spacing:
    file_index: int
    path: str


Location = Union[FileHeader, FileComment, Placeholder, HunkHeader, DiffLineEntry, LineComment, Spacing]
CommentLocation = Union[FileComment, LineComment]


@dataclass(frozen=True)
class LayoutEntry:
    """One semantic entry of the flattened space and the lines it spans."""

    start: int
    height: int
    location: Location

    @property
    def end(self) -> int:
        return self.start + self.height

    def contains(self, position: int) -> bool:
        return self.start <= position < self.end


class VirtualLineIndex:
    """Height and position queries over ``(files, session)``."""

    def __init__(self, files: Sequence[DiffFile], session: ReviewSession) -> None:
        self.files = files
        self.session = session

    @staticmethod
    def comment_display_lines(comment: Comment) -> int:
        """Header line + one line per content line + footer line."""
        return 2 + comment.content.count("\n") + 1

    def is_reviewed(self, file: DiffFile) -> bool:
        return self.session.is_file_reviewed(file.display_path)

    # ── heights ──────────────────────────────────────────────────────────

    def approximate_file_height(self, file: DiffFile) -> int:
        """Height of *file* ignoring comment blocks."""
        if self.is_reviewed(file):
            return 1
        if file.is_binary or not file.hunks:
            body = 1
        else:
            body = len(file.hunks) + file.line_count
        return 2 + max(1, body)

    def file_render_height(self, file: DiffFile) -> int:
        """Exact height of *file*, comment blocks included."""
        if self.is_reviewed(file):
            return 1
        return self.approximate_file_height(file) + self._comment_lines(file)

    def total_lines(self) -> int:
        return sum(self.file_render_height(f) for f in self.files)

    def file_scroll_offset(self, file_index: int) -> int:
        """First line of file *file_index* (exact heights)."""
        return sum(self.file_render_height(f) for f in self.files[:file_index])

    def approximate_file_offset(self, file_index: int) -> int:
        """First line of file *file_index* as if no comments existed."""
        return sum(self.approximate_file_height(f) for f in self.files[:file_index])

    def file_index_at(self, position: int) -> int:
        """Index of the file whose span contains *position*, clamped to the last file."""
        offset = 0
        for i, file in enumerate(self.files):
            offset += self.file_render_height(file)
            if position < offset:
                return i
        return max(0, len(self.files) - 1)

    # ── walking ──────────────────────────────────────────────────────────

    def iter_entries(self) -> Iterator[LayoutEntry]:
        """Yield every layout entry in order."""
        position = 0
        for i, file in enumerate(self.files):
            for entry in self._file_entries(i, file, position):
                yield entry
                position = entry.end

    def locate(self, position: int) -> Optional[Location]:
        """Return the location whose span contains *position*, or None."""
        if position < 0:
            return None
        offset = 0
        for i, file in enumerate(self.files):
            height = self.file_render_height(file)
            if position >= offset + height:
                offset += height
                continue
            for entry in self._file_entries(i, file, offset):
                if entry.contains(position):
                    return _at_row(entry, position)
            break
        return None

    def hunk_header_positions(self) -> List[int]:
        return [e.start for e in self.iter_entries() if isinstance(e.location, HunkHeader)]

    def line_at(self, position: int) -> Optional[Tuple[int, LineSide]]:
        """Source line and side at *position*, only when it is a diff line."""
        location = self.locate(position)
        if not isinstance(location, DiffLineEntry):
            return None
        line = location.line
        if line.origin == LineOrigin.DELETION and line.old_lineno is not None:
            return line.old_lineno, LineSide.OLD
        if line.new_lineno is not None:
            return line.new_lineno, LineSide.NEW
        if line.old_lineno is not None:
            return line.old_lineno, LineSide.OLD
        return None

    def comment_at(self, position: int) -> Optional[CommentLocation]:
        """The comment block containing *position*, if any."""
        location = self.locate(position)
        if isinstance(location, (FileComment, LineComment)):
            return location
        return None

    # ── internals ────────────────────────────────────────────────────────

    def _file_entries(self, file_index: int, file: DiffFile, start: int) -> Iterator[LayoutEntry]:
        path = file.display_path
        pos = start

        yield LayoutEntry(pos, 1, FileHeader(file_index, path))
        pos += 1
        if self.is_reviewed(file):
            return

        review = self.session.get_file(path)
        if review is not None:
            for ci, comment in enumerate(review.file_comments):
                height = self.comment_display_lines(comment)
                yield LayoutEntry(pos, height, FileComment(file_index, path, ci, comment))
                pos += height

        if file.is_binary or not file.hunks:
            yield LayoutEntry(pos, 1, Placeholder(file_index, path, file.is_binary))
            pos += 1
        else:
            for hi, hunk in enumerate(file.hunks):
                yield LayoutEntry(pos, 1, HunkHeader(file_index, path, hi, hunk.header))
                pos += 1
                for line in hunk.lines:
                    yield LayoutEntry(pos, 1, DiffLineEntry(file_index, path, hi, line))
                    pos += 1
                    for line_no, side, si, comment in _comments_after(review, line):
                        height = self.comment_display_lines(comment)
                        yield LayoutEntry(
                            pos, height, LineComment(file_index, path, line_no, side, si, comment)
                        )
                        pos += height

        yield LayoutEntry(pos, 1, Spacing(file_index, path))

    def _comment_lines(self, file: DiffFile) -> int:
        review = self.session.get_file(file.display_path)
        if review is None:
            return 0
        total = sum(self.comment_display_lines(c) for c in review.file_comments)
        if file.is_binary or not file.hunks:
            return total
        for hunk in file.hunks:
            for line in hunk.lines:
                for _, _, _, comment in _comments_after(review, line):
                    total += self.comment_display_lines(comment)
        return total


def _comments_after(
    review: Optional[FileReview], line: DiffLine
) -> Iterator[Tuple[int, LineSide, int, Comment]]:
    """Comments rendered under *line*: old side first, then new side."""
    if review is None or not review.line_comments:
        return
    if line.old_lineno is not None:
        for idx, comment in enumerate(review.comments_on_side(line.old_lineno, LineSide.OLD)):
            yield line.old_lineno, LineSide.OLD, idx, comment
    if line.new_lineno is not None:
        for idx, comment in enumerate(review.comments_on_side(line.new_lineno, LineSide.NEW)):
            yield line.new_lineno, LineSide.NEW, idx, comment


def _at_row(entry: LayoutEntry, position: int) -> Location:
    location = entry.location
    if isinstance(location, (FileComment, LineComment)):
        return replace(location, row=position - entry.start)
    return location
