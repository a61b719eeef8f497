"""On-disk review sessions — one JSON file per repository, atomic writes."""

from __future__ import annotations

import hashlib
import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from diffreview.review.models import ReviewSession


class SessionError(Exception):
    """Raised when a session file cannot be read, parsed, or written."""


def sessions_dir(override: Optional[str] = None) -> Path:
    """Return the directory that holds session files.

    Precedence: *override* (config), ``$DIFFREVIEW_DATA_DIR``,
    ``$XDG_DATA_HOME/diffreview/reviews``, ``~/.local/share/diffreview/reviews``.
    """
    if override:
        return Path(override).expanduser()
    if val := os.environ.get("DIFFREVIEW_DATA_DIR"):
        return Path(val).expanduser()
    data_home = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(data_home) / "diffreview" / "reviews"


def session_path_for_repo(repo_root: Path, directory: Optional[str] = None) -> Path:
    """Return the session file path for *repo_root*."""
    resolved = str(Path(repo_root).resolve())
    digest = hashlib.sha256(resolved.encode("utf-8")).hexdigest()[:12]
    name = Path(resolved).name or "repo"
    return sessions_dir(directory) / f"{name}-{digest}.json"


def find_session_for_repo(repo_root: Path, directory: Optional[str] = None) -> Optional[Path]:
    """Return the existing session file for *repo_root*, if any."""
    path = session_path_for_repo(repo_root, directory)
    return path if path.is_file() else None


def load_session(path: Path) -> ReviewSession:
    """Read and parse a session file."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise SessionError(f"Failed to read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SessionError(f"Review session corrupted: {path}: {exc}") from exc

    try:
        return ReviewSession.from_dict(raw)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise SessionError(f"Review session corrupted: {path}: {exc}") from exc


def save_session(
    session: ReviewSession,
    repo_root: Optional[Path] = None,
    directory: Optional[str] = None,
) -> Path:
    """Write *session* atomically and return the file path.

    The file is written to a temporary sibling and moved into place, so a
    failed save never leaves a truncated session behind.
    """
    path = session_path_for_repo(repo_root or Path(session.repo_path), directory)
    session.touch()
    payload = json.dumps(session.to_dict(), indent=2)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".session-", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise SessionError(f"Failed to write {path}: {exc}") from exc
    return path


def load_or_create_session(
    repo_root: Path,
    head_commit: Optional[str],
    *,
    branch_name: Optional[str] = None,
    directory: Optional[str] = None,
    discard_stale: bool = True,
) -> ReviewSession:
    """Load the saved session for *repo_root* or start a fresh one.

    A session recorded against another base commit is stale: its file is
    deleted (when *discard_stale*) and a new session is returned. Corrupted
    files are replaced the same way.
    """
    fresh = ReviewSession(
        repo_path=str(Path(repo_root).resolve()),
        base_commit=head_commit,
        branch_name=branch_name,
    )
    path = find_session_for_repo(repo_root, directory)
    if path is None:
        return fresh

    try:
        session = load_session(path)
    except SessionError:
        return fresh

    if session.base_commit != head_commit:
        if discard_stale:
            path.unlink(missing_ok=True)
        return fresh

    session.branch_name = branch_name
    return session
