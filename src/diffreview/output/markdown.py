"""Markdown review report — a flat, numbered list of every comment."""

from __future__ import annotations

from typing import List, Optional

from diffreview.review.models import LineSide, ReviewSession

INTRO = "I reviewed your code and have the following comments. Please address them."
LEGEND = (
    "Comment types: ISSUE (problems to fix), SUGGESTION (improvements), "
    "NOTE (observations), PRAISE (positive feedback)"
)


def format_location(path: str, line: Optional[int], side: Optional[LineSide]) -> str:
    """`path`, `path:line`, or `path:~line` for old-side (deleted) lines."""
    if line is None:
        return f"`{path}`"
    if side == LineSide.OLD:
        return f"`{path}:~{line}`"
    return f"`{path}:{line}`"


def generate_markdown(session: ReviewSession) -> str:
    """Render *session* as a markdown report."""
    out: List[str] = [INTRO, "", LEGEND, ""]

    if session.session_notes:
        out.append(f"Summary: {session.session_notes}")
        out.append("")

    for i, (path, line, comment) in enumerate(session.iter_comments(), start=1):
        location = format_location(path, line, comment.side if line is not None else None)
        out.append(f"{i}. **[{comment.comment_type.label}]** {location} - {comment.content}")

    return "\n".join(out) + "\n"
