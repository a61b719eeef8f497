"""Clipboard export through the platform's copy tools."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from typing import List

from diffreview.output.markdown import generate_markdown
from diffreview.review.models import ReviewSession


class ClipboardError(Exception):
    """Raised when no clipboard tool accepted the text."""


class ExportError(Exception):
    """Raised when there is nothing to export."""


def _clipboard_commands() -> List[List[str]]:
    if sys.platform == "darwin":
        return [["pbcopy"]]
    if os.name == "nt":
        return [["clip"]]
    return [
        ["wl-copy"],
        ["xclip", "-selection", "clipboard"],
        ["xsel", "--clipboard", "--input"],
    ]


def copy_to_clipboard(text: str) -> None:
    """Copy *text* with the first clipboard tool that succeeds."""
    tried: List[str] = []
    for command in _clipboard_commands():
        if shutil.which(command[0]) is None:
            continue
        tried.append(command[0])
        try:
            proc = subprocess.run(
                command,
                input=text,
                text=True,
                capture_output=True,
                timeout=5,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired):
            continue
        if proc.returncode == 0:
            return
    if not tried:
        raise ClipboardError("Failed to access clipboard: no clipboard tool found")
    raise ClipboardError(f"Failed to copy to clipboard (tried {', '.join(tried)})")


def export_to_clipboard(session: ReviewSession) -> str:
    """Copy the markdown report of *session*; return a status message."""
    if not session.has_comments():
        raise ExportError("No comments to export - skipping copy")
    copy_to_clipboard(generate_markdown(session))
    return "Review copied to clipboard"
