"""Unified diff parser — turns ``git diff`` output into a list of DiffFile.

Handles new, deleted, renamed and copied files, binary markers, mode-only
changes, quoted paths, CRLF line endings, ``\\ No newline at end of file``
markers and hunk headers without explicit counts.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from diffreview.git.models import DiffFile, DiffLine, FileStatus, Hunk, LineOrigin

# --- Regex patterns for diff parsing ---

_DIFF_HEADER_RE = re.compile(r"^diff --git a/(.*) b/(.*)$")
_QUOTED_DIFF_HEADER_RE = re.compile(r'^diff --git ("a/.*") ("b/.*")$')
_HUNK_HEADER_RE = re.compile(
    r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$"
)
_BINARY_RE = re.compile(r"^Binary files .* and .* differ$")
_GIT_BINARY_PATCH_RE = re.compile(r"^GIT binary patch$")
_RENAME_FROM_RE = re.compile(r"^rename from (.+)$")
_RENAME_TO_RE = re.compile(r"^rename to (.+)$")
_COPY_FROM_RE = re.compile(r"^copy from (.+)$")
_COPY_TO_RE = re.compile(r"^copy to (.+)$")
_NO_NEWLINE_RE = re.compile(r"^\\ No newline at end of file$")
_FILE_HEADER_OLD = re.compile(r"^--- (.+)$")
_FILE_HEADER_NEW = re.compile(r"^\+\+\+ (.+)$")
_SIMILARITY_RE = re.compile(r"^(?:dis)?similarity index \d+%$")
_OLD_MODE_RE = re.compile(r"^old mode \d+$")
_NEW_MODE_RE = re.compile(r"^new mode \d+$")
_DELETED_FILE_RE = re.compile(r"^deleted file mode \d+$")
_NEW_FILE_RE = re.compile(r"^new file mode \d+$")
_INDEX_RE = re.compile(r"^index [0-9a-f]+\.\.[0-9a-f]+")

_C_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\", "a": "\a", "b": "\b", "f": "\f", "v": "\v"}


def _unquote(path: str) -> str:
    """Undo git's C-style quoting of paths with special characters."""
    if not (len(path) >= 2 and path[0] == '"' and path[-1] == '"'):
        return path
    body = path[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            octal = body[i + 1:i + 4]
            if len(octal) == 3 and all(c in "01234567" for c in octal):
                out.append(int(octal, 8))
                i += 4
                continue
            out.extend(_C_ESCAPES.get(body[i + 1], body[i + 1]).encode("utf-8"))
            i += 2
            continue
        out.extend(ch.encode("utf-8"))
        i += 1
    return out.decode("utf-8", errors="replace")


def _strip_prefix(path: str, prefix: str) -> Optional[str]:
    """Return *path* without its ``a/`` / ``b/`` prefix, or None for /dev/null."""
    path = _unquote(path.rstrip("\t"))
    if path == "/dev/null":
        return None
    if path.startswith(prefix):
        return path[len(prefix):]
    return path


def _normalise(line: str) -> str:
    """Strip trailing CR (CRLF → LF)."""
    return line.rstrip("\r")


class DiffParser:
    """Parse unified diff text into DiffFile objects.

    Usage::

        files = DiffParser(diff_text).parse()
        for f in files:
            for hunk in f.hunks:
                ...
    """

    def __init__(self, diff_text: str) -> None:
        # Split on LF only: form feeds and other separators are line content
        lines = diff_text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        self._lines = [_normalise(line) for line in lines]

    def parse(self) -> List[DiffFile]:
        """Return every file in the diff, in diff order."""
        files: List[DiffFile] = []
        idx = 0
        total = len(self._lines)

        while idx < total:
            paths = self._match_header(self._lines[idx])
            if paths is None:
                idx += 1
                continue
            idx, diff_file = self._parse_file(idx + 1, *paths)
            files.append(diff_file)

        return files

    @staticmethod
    def _match_header(line: str) -> Optional[Tuple[str, str]]:
        qm = _QUOTED_DIFF_HEADER_RE.match(line)
        if qm:
            return _unquote(qm.group(1))[2:], _unquote(qm.group(2))[2:]
        m = _DIFF_HEADER_RE.match(line)
        if m:
            return m.group(1), m.group(2)
        return None

    def _parse_file(self, idx: int, old_file: str, current_file: str) -> Tuple[int, DiffFile]:
        total = len(self._lines)
        status = FileStatus.MODIFIED
        is_binary = False
        moved_from: Optional[str] = None

        # Sub-headers (index, mode changes, renames, copies, new/deleted file)
        while idx < total:
            sub = self._lines[idx]
            if _INDEX_RE.match(sub) or _SIMILARITY_RE.match(sub):
                idx += 1
                continue
            if _OLD_MODE_RE.match(sub) or _NEW_MODE_RE.match(sub):
                idx += 1
                continue
            if _DELETED_FILE_RE.match(sub):
                status = FileStatus.DELETED
                idx += 1
                continue
            if _NEW_FILE_RE.match(sub):
                status = FileStatus.ADDED
                idx += 1
                continue
            if (rm := _RENAME_FROM_RE.match(sub)):
                moved_from = _unquote(rm.group(1))
                status = FileStatus.RENAMED
                idx += 1
                continue
            if (rt := _RENAME_TO_RE.match(sub)):
                current_file = _unquote(rt.group(1))
                idx += 1
                continue
            if (cm := _COPY_FROM_RE.match(sub)):
                moved_from = _unquote(cm.group(1))
                status = FileStatus.COPIED
                idx += 1
                continue
            if (ct := _COPY_TO_RE.match(sub)):
                current_file = _unquote(ct.group(1))
                idx += 1
                continue
            if _BINARY_RE.match(sub) or _GIT_BINARY_PATCH_RE.match(sub):
                is_binary = True
                idx += 1
                continue
            if (om := _FILE_HEADER_OLD.match(sub)):
                old_path = _strip_prefix(om.group(1), "a/")
                if old_path is not None:
                    old_file = old_path
                idx += 1
                continue
            if (nm := _FILE_HEADER_NEW.match(sub)):
                new_path = _strip_prefix(nm.group(1), "b/")
                if new_path is not None:
                    current_file = new_path
                idx += 1
                continue
            break  # not a sub-header → hunks (or next file)

        if status == FileStatus.DELETED:
            current_file = old_file

        hunks: List[Hunk] = []
        while idx < total:
            line = self._lines[idx]
            if self._match_header(line) is not None:
                break
            hm = _HUNK_HEADER_RE.match(line)
            if hm:
                idx, hunk = self._parse_hunk(idx, hm)
                hunks.append(hunk)
                continue
            if _BINARY_RE.match(line) or _GIT_BINARY_PATCH_RE.match(line):
                is_binary = True
            idx += 1

        return idx, DiffFile(
            path=current_file,
            old_path=moved_from,
            status=status,
            is_binary=is_binary,
            hunks=() if is_binary else tuple(hunks),
        )

    def _parse_hunk(self, idx: int, hm: "re.Match[str]") -> Tuple[int, Hunk]:
        total = len(self._lines)
        header = self._lines[idx]
        old_no = int(hm.group(1))
        old_remaining = int(hm.group(2)) if hm.group(2) is not None else 1
        new_no = int(hm.group(3))
        new_remaining = int(hm.group(4)) if hm.group(4) is not None else 1
        lines: List[DiffLine] = []
        idx += 1

        while idx < total and (old_remaining > 0 or new_remaining > 0):
            raw_line = self._lines[idx]
            if _NO_NEWLINE_RE.match(raw_line):
                idx += 1
                continue
            if raw_line.startswith("+") and new_remaining > 0:
                lines.append(DiffLine(LineOrigin.ADDITION, raw_line[1:], new_lineno=new_no))
                new_no += 1
                new_remaining -= 1
            elif raw_line.startswith("-") and old_remaining > 0:
                lines.append(DiffLine(LineOrigin.DELETION, raw_line[1:], old_lineno=old_no))
                old_no += 1
                old_remaining -= 1
            elif raw_line.startswith(" ") or raw_line == "":
                # Some tools strip the leading space from blank context lines
                lines.append(DiffLine(LineOrigin.CONTEXT, raw_line[1:], old_lineno=old_no, new_lineno=new_no))
                old_no += 1
                new_no += 1
                old_remaining -= 1
                new_remaining -= 1
            else:
                break
            idx += 1

        # Trailing marker after the last line of the hunk
        if idx < total and _NO_NEWLINE_RE.match(self._lines[idx]):
            idx += 1

        return idx, Hunk(header=header, lines=tuple(lines))
