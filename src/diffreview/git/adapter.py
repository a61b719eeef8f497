"""Git subprocess wrapper — repo discovery, HEAD, working tree diff."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

# Hash of the empty tree; used as the diff base before the first commit.
EMPTY_TREE = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

_DIFF_FLAGS = [
    "--no-color",
    "--no-ext-diff",
    "--find-renames",
    "--src-prefix=a/",
    "--dst-prefix=b/",
]


class GitError(Exception):
    """Raised when git is unavailable or returns an unexpected error."""


def _run_git(
    args: list[str],
    cwd: Path,
    timeout: int = 30,
    ok_codes: Tuple[int, ...] = (0,),
) -> str:
    """Run a git command and return stdout. Raises GitError on failure.

    Exit codes outside *ok_codes* are errors, as is any non-zero exit that
    reports ``error:`` or ``fatal:``. Output is decoded as UTF-8
    without newline translation, so a lone CR stays inside its line.
    """
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        raise GitError("git is not installed or not on PATH")
    except subprocess.TimeoutExpired:
        raise GitError(f"git command timed out after {timeout}s: git {' '.join(args)}")

    stderr = result.stderr.decode("utf-8", errors="replace").strip()
    reported = any(line.startswith(("error:", "fatal:")) for line in stderr.split("\n"))
    if result.returncode not in ok_codes or (result.returncode != 0 and reported):
        raise GitError(f"git error: {stderr or f'git {args[0]} exited with {result.returncode}'}")
    return result.stdout.decode("utf-8", errors="replace")


def get_repo_root(cwd: Optional[Path] = None) -> Path:
    """Return the root of the current git repository."""
    cwd = cwd or Path.cwd()
    out = _run_git(["rev-parse", "--show-toplevel"], cwd=cwd)
    if not out.strip():
        raise GitError(f"Not a git repository: {cwd}")
    return Path(out.strip())


def get_head_commit(repo_root: Path) -> Optional[str]:
    """Return the HEAD commit id, or None when HEAD is unborn."""
    # exits 1 on an unborn HEAD
    out = _run_git(["rev-parse", "--verify", "--quiet", "HEAD"], cwd=repo_root, ok_codes=(0, 1))
    return out.strip() or None


def get_branch_name(repo_root: Path) -> Optional[str]:
    """Return the current branch name, or None when HEAD is detached."""
    # exits 1 when detached
    out = _run_git(["symbolic-ref", "--short", "--quiet", "HEAD"], cwd=repo_root, ok_codes=(0, 1))
    return out.strip() or None


def get_untracked_files(repo_root: Path) -> List[str]:
    """Return untracked, non-ignored file paths."""
    output = _run_git(
        ["ls-files", "--others", "--exclude-standard"],
        cwd=repo_root,
    )
    return [line for line in output.split("\n") if line.strip()]


def get_working_tree_diff(repo_root: Path, base: Optional[str] = None) -> str:
    """Return the unified diff of the working tree against *base*.

    *base* defaults to HEAD, or the empty tree before the first commit.
    Tracked changes (staged and unstaged) come first, followed by one
    ``--no-index`` diff per untracked file.
    """
    base = base or get_head_commit(repo_root) or EMPTY_TREE
    parts = [_run_git(["diff", *_DIFF_FLAGS, base], cwd=repo_root)]
    for path in get_untracked_files(repo_root):
        parts.append(
            _run_git(
                ["diff", *_DIFF_FLAGS, "--no-index", "--", "/dev/null", path],
                ok_codes=(0, 1),
                cwd=repo_root,
            )
        )
    return "".join(p if p.endswith("\n") or not p else p + "\n" for p in parts)
