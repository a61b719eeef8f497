"""Shared test fixtures — sample diffs, snapshot builders, temp git repos."""

from __future__ import annotations

import subprocess
import textwrap
from pathlib import Path
from typing import Callable, Sequence

import pytest

from diffreview.git.models import DiffFile, DiffLine, FileStatus, Hunk, LineOrigin
from diffreview.review.models import ReviewSession


@pytest.fixture
def sample_diff_modified() -> str:
    """A modified file: one deletion, two additions, context around them."""
    return textwrap.dedent("""\
        diff --git a/app.py b/app.py
        index 1234567..abcdef0 100644
        --- a/app.py
        +++ b/app.py
        @@ -10,4 +10,5 @@ def main():
             setup()
        -    run()
        +    run(fast=True)
        +    report()
             teardown()
             return 0
    """)


@pytest.fixture
def sample_diff_new_file() -> str:
    return textwrap.dedent("""\
        diff --git a/hello.py b/hello.py
        new file mode 100644
        index 0000000..e69de29
        --- /dev/null
        +++ b/hello.py
        @@ -0,0 +1,3 @@
        +def greet(name):
        +    return f"Hello, {name}!"
        +# end
    """)


@pytest.fixture
def sample_diff_deleted_file() -> str:
    return textwrap.dedent("""\
        diff --git a/legacy.py b/legacy.py
        deleted file mode 100644
        index abc1234..0000000
        --- a/legacy.py
        +++ /dev/null
        @@ -1,2 +0,0 @@
        -import os
        -print(os.getcwd())
    """)


@pytest.fixture
def sample_diff_binary() -> str:
    """A diff with a binary file."""
    return textwrap.dedent("""\
        diff --git a/image.png b/image.png
        new file mode 100644
        Binary files /dev/null and b/image.png differ
    """)


@pytest.fixture
def sample_diff_rename() -> str:
    """A diff with a renamed file."""
    return textwrap.dedent("""\
        diff --git a/old_name.py b/new_name.py
        similarity index 97%
        rename from old_name.py
        rename to new_name.py
        index abc1234..def5678 100644
        --- a/old_name.py
        +++ b/new_name.py
        @@ -1,0 +2,1 @@
        +# New line added after rename
    """)


@pytest.fixture
def sample_diff_mode_only() -> str:
    """A diff with only file mode change."""
    return textwrap.dedent("""\
        diff --git a/script.sh b/script.sh
        old mode 100644
        new mode 100755
    """)


@pytest.fixture
def sample_diff_no_newline() -> str:
    """A diff with 'No newline at end of file' marker."""
    return textwrap.dedent("""\
        diff --git a/data.txt b/data.txt
        new file mode 100644
        index 0000000..abc1234
        --- /dev/null
        +++ b/data.txt
        @@ -0,0 +1 @@
        +final line without newline
        \\ No newline at end of file
    """)


@pytest.fixture
def sample_diff_multi(sample_diff_modified, sample_diff_new_file, sample_diff_binary) -> str:
    """Three files in one diff."""
    return sample_diff_modified + sample_diff_new_file + sample_diff_binary


# ── snapshot builders ─────────────────────────────────────────────────────────


def build_file(
    path: str,
    hunk_sizes: Sequence[int] = (3,),
    *,
    status: FileStatus = FileStatus.MODIFIED,
    is_binary: bool = False,
) -> DiffFile:
    """A file whose hunks hold *hunk_sizes* context lines each.

    Hunk *n* starts 10 lines after the end of hunk *n-1*, so line numbers
    are unique within the file.
    """
    hunks = []
    line_no = 1
    for size in hunk_sizes:
        lines = tuple(
            DiffLine(LineOrigin.CONTEXT, f"line {line_no + i}", old_lineno=line_no + i, new_lineno=line_no + i)
            for i in range(size)
        )
        hunks.append(Hunk(header=f"@@ -{line_no},{size} +{line_no},{size} @@", lines=lines))
        line_no += size + 10
    return DiffFile(
        path=path,
        status=status,
        is_binary=is_binary,
        hunks=() if is_binary else tuple(hunks),
    )


@pytest.fixture
def make_file() -> Callable[..., DiffFile]:
    return build_file


@pytest.fixture
def changed_file() -> DiffFile:
    """``src/app.py``: context, deletion, two additions, context.

    Old lines 10..13, new lines 10..14.
    """
    lines = (
        DiffLine(LineOrigin.CONTEXT, "    setup()", old_lineno=10, new_lineno=10),
        DiffLine(LineOrigin.DELETION, "    run()", old_lineno=11),
        DiffLine(LineOrigin.ADDITION, "    run(fast=True)", new_lineno=11),
        DiffLine(LineOrigin.ADDITION, "    report()", new_lineno=12),
        DiffLine(LineOrigin.CONTEXT, "    teardown()", old_lineno=12, new_lineno=13),
    )
    return DiffFile(path="src/app.py", hunks=(Hunk("@@ -10,3 +10,4 @@ def main():", lines),))


@pytest.fixture
def two_files(make_file) -> list:
    """File A (1 hunk, 3 lines) and binary file B."""
    return [
        make_file("a.py", (3,)),
        make_file("b.png", is_binary=True, status=FileStatus.ADDED),
    ]


@pytest.fixture
def session(tmp_path: Path) -> ReviewSession:
    return ReviewSession(repo_path=str(tmp_path), base_commit="abc123", branch_name="main")


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository for integration tests."""
    repo = tmp_path / "repo"
    repo.mkdir()
    subprocess.run(["git", "init", str(repo)], capture_output=True, check=True)
    subprocess.run(
        ["git", "config", "user.email", "test@test.com"],
        cwd=repo, capture_output=True, check=True,
    )
    subprocess.run(
        ["git", "config", "user.name", "Test"],
        cwd=repo, capture_output=True, check=True,
    )
    # Initial commit
    readme = repo / "README.md"
    readme.write_text("# Test\n")
    subprocess.run(["git", "add", "."], cwd=repo, capture_output=True, check=True)
    subprocess.run(
        ["git", "commit", "-m", "init"],
        cwd=repo, capture_output=True, check=True,
    )
    return repo


@pytest.fixture
def session_dir(tmp_path: Path, monkeypatch) -> Path:
    """Point session storage at a temp directory."""
    directory = tmp_path / "sessions"
    monkeypatch.setenv("DIFFREVIEW_DATA_DIR", str(directory))
    return directory
