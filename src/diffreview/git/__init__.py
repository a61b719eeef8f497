"""Git interface layer — adapter, diff parsing, models."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from diffreview.git.adapter import (
    GitError,
    get_branch_name,
    get_head_commit,
    get_repo_root,
    get_untracked_files,
    get_working_tree_diff,
)
from diffreview.git.diff_parser import DiffParser
from diffreview.git.models import DiffFile, DiffLine, FileStatus, Hunk, LineOrigin


def load_diff(repo_root: Path, base: Optional[str] = None) -> List[DiffFile]:
    """Fetch the working tree diff against *base* and parse it."""
    return DiffParser(get_working_tree_diff(repo_root, base)).parse()


__all__ = [
    "DiffFile",
    "DiffLine",
    "DiffParser",
    "FileStatus",
    "GitError",
    "Hunk",
    "LineOrigin",
    "get_branch_name",
    "get_head_commit",
    "get_repo_root",
    "get_untracked_files",
    "get_working_tree_diff",
    "load_diff",
]
