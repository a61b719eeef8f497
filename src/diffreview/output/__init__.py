"""Review export — markdown report and clipboard copy."""

from diffreview.output.clipboard import (
    ClipboardError,
    ExportError,
    copy_to_clipboard,
    export_to_clipboard,
)
from diffreview.output.markdown import format_location, generate_markdown

__all__ = [
    "ClipboardError",
    "ExportError",
    "copy_to_clipboard",
    "export_to_clipboard",
    "format_location",
    "generate_markdown",
]
