"""Rich text rendering of the controller state.

Pure functions: they read the controller, the snapshot and the session and
return ``rich.text.Text``. Only the visible slice of the flattened space is
built.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

from rich.text import Text

from diffreview.engine.controller import FocusedPanel, ReviewController
from diffreview.engine.layout import (
    DiffLineEntry,
    FileComment,
    FileHeader,
    HunkHeader,
    LineComment,
    Location,
    Placeholder,
    Spacing,
)
from diffreview.git.models import DiffFile, LineOrigin
from diffreview.review.models import Comment, CommentType, LineSide

CURSOR = "▶"

_ORIGIN_STYLE = {
    LineOrigin.ADDITION: "green",
    LineOrigin.DELETION: "red",
    LineOrigin.CONTEXT: "",
}

_STATUS_STYLE = {
    "A": "bold green",
    "M": "bold yellow",
    "D": "bold red",
    "R": "bold magenta",
    "C": "bold cyan",
}

_COMMENT_STYLE = {
    CommentType.NOTE: "bold black on bright_cyan",
    CommentType.SUGGESTION: "bold black on yellow",
    CommentType.ISSUE: "bold white on red",
    CommentType.PRAISE: "bold black on green",
}

_MESSAGE_STYLE = {
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
}

HELP_SECTIONS = [
    ("Navigation", [
        ("j/k", "Move cursor down/up"),
        ("Ctrl-d/u", "Half page down/up"),
        ("Ctrl-f/b", "Full page down/up"),
        ("g/G", "Go to first/last file"),
        ("{/}", "Jump to prev/next file"),
        ("[/]", "Jump to prev/next hunk"),
        ("h/l", "Scroll left/right"),
        ("zz", "Center cursor"),
        ("Tab", "Toggle focus file list/diff"),
        ("Enter", "Open selected file"),
    ]),
    ("Review", [
        ("r", "Toggle file reviewed"),
        ("c", "Comment on line"),
        ("C", "Comment on file"),
        ("dd", "Delete comment at cursor"),
        ("y", "Copy review to clipboard"),
    ]),
    ("Comment editor", [
        ("Ctrl-s", "Save comment"),
        ("Ctrl-t", "Cycle comment type"),
        ("Esc", "Cancel"),
    ]),
    ("Commands", [
        (":w", "Save session"),
        (":e", "Reload diff"),
        (":clip", "Copy review to clipboard"),
        (":x  :wq", "Save and quit"),
        (":q", "Quit"),
    ]),
]


def comment_badge(comment_type: CommentType) -> Text:
    return Text(f" {comment_type.label} ", style=_COMMENT_STYLE.get(comment_type, ""))


def render_header(controller: ReviewController, branch_name: Optional[str]) -> Text:
    reviewed = controller.reviewed_count()
    total = controller.file_count()
    text = Text(" diffreview - Code Review ", style="bold")
    text.append(f"[{branch_name or 'detached'}] ", style="dim")
    text.append(
        f"{reviewed}/{total} reviewed ",
        style="bold green" if total and reviewed == total else "yellow",
    )
    return text


def render_file_list(controller: ReviewController) -> Text:
    text = Text(no_wrap=True, overflow="ellipsis")
    focused = controller.focused_panel == FocusedPanel.FILE_LIST
    for i, file in enumerate(controller.diff_files):
        if i:
            text.append("\n")
        is_current = i == controller.state.current_file_idx
        is_reviewed = controller.session.is_file_reviewed(file.display_path)
        row_style = "reverse" if is_current and focused else ("bold" if is_current else "")
        text.append(CURSOR if is_current else " ", style="bold cyan")
        text.append("[✓]" if is_reviewed else "[ ]", style="green" if is_reviewed else "dim")
        status = file.status.as_char()
        text.append(f" {status} ", style=_STATUS_STYLE.get(status, ""))
        text.append(file.display_path.rsplit("/", 1)[-1], style=row_style)
    return text


def _file_header_body(file: DiffFile, reviewed: bool) -> str:
    label = f"═══ {file.display_path} [{file.status.as_char()}]"
    if file.old_path:
        label += f" (from {file.old_path})"
    if reviewed:
        label += " ✓ reviewed"
    return f"{label} " + "═" * 40


def _comment_row(comment: Comment, row: int, line: Optional[int], side: Optional[LineSide]) -> Text:
    content_lines = comment.content.split("\n")
    if row == 0:
        text = Text("┌─")
        text.append_text(comment_badge(comment.comment_type))
        if line is not None:
            marker = f"~{line}" if side == LineSide.OLD else str(line)
            text.append(f" line {marker} ", style="dim")
        else:
            text.append(" file ", style="dim")
        text.append("─" * 20)
        return text
    if row <= len(content_lines):
        return Text(f"│ {content_lines[row - 1]}")
    return Text("└" + "─" * 30)


def _location_text(controller: ReviewController, location: Location) -> Text:
    files = controller.diff_files
    if isinstance(location, FileHeader):
        file = files[location.file_index]
        reviewed = controller.session.is_file_reviewed(file.display_path)
        return Text(_file_header_body(file, reviewed), style="bold blue")
    if isinstance(location, FileComment):
        return _comment_row(location.comment, location.row, None, None)
    if isinstance(location, LineComment):
        return _comment_row(location.comment, location.row, location.line_number, location.side)
    if isinstance(location, Placeholder):
        return Text("(binary file)" if location.is_binary else "(no changes)", style="dim")
    if isinstance(location, HunkHeader):
        return Text(location.header, style="cyan")
    if isinstance(location, DiffLineEntry):
        line = location.line
        if line.origin == LineOrigin.ADDITION:
            number = line.new_lineno
        elif line.origin == LineOrigin.DELETION:
            number = line.old_lineno
        else:
            number = line.new_lineno if line.new_lineno is not None else line.old_lineno
        text = Text(f"{number:>4} " if number is not None else "     ", style="dim")
        text.append(f"{line.origin.prefix} {line.content}", style=_ORIGIN_STYLE[line.origin])
        return text
    if isinstance(location, Spacing):
        return Text("")
    return Text("")


def render_diff_lines(controller: ReviewController, height: Optional[int] = None) -> List[Text]:
    """Visible lines of the diff view, cursor indicator column included."""
    state = controller.state
    height = state.viewport_height if height is None else height
    first = state.scroll_offset
    last = first + max(0, height)
    lines: List[Text] = []

    for entry in controller.index.iter_entries():
        if entry.end <= first:
            continue
        if entry.start >= last:
            break
        for position in range(max(entry.start, first), min(entry.end, last)):
            location = entry.location
            if isinstance(location, (FileComment, LineComment)):
                location = replace(location, row=position - entry.start)
            body = _location_text(controller, location)
            if state.scroll_x:
                body = body[state.scroll_x:]
            line = Text(CURSOR if position == state.cursor_line else " ", style="bold cyan")
            line.append_text(body)
            lines.append(line)
    return lines


def render_diff(controller: ReviewController, height: Optional[int] = None) -> Text:
    text = Text(no_wrap=True, overflow="crop")
    for i, line in enumerate(render_diff_lines(controller, height)):
        if i:
            text.append("\n")
        text.append_text(line)
    return text


def render_status_bar(
    controller: ReviewController,
    mode: str,
    message: Optional[str] = None,
    message_type: str = "info",
) -> Text:
    text = Text(f" {mode.upper()} ", style="bold black on white")
    if controller.dirty:
        text.append(" [modified]", style="yellow")
    if message:
        text.append(f"  {message}", style=_MESSAGE_STYLE.get(message_type, ""))
    else:
        text.append("  ? help  :w save  :q quit", style="dim")
    return text


def render_help() -> Text:
    text = Text()
    for i, (section, rows) in enumerate(HELP_SECTIONS):
        if i:
            text.append("\n")
        text.append(f"{section}\n", style="bold underline")
        for key, description in rows:
            text.append(f"  {key:<10}", style="bold")
            text.append(f"{description}\n")
    return text
