"""diffreview CLI — Typer application with review, export and init commands."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from diffreview import __version__

app = typer.Typer(
    name="diffreview",
    help="Review pending changes in a git working tree, vim style.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)


def _resolve_repo_root() -> Path:
    """Find the git repo root, exit 2 on failure."""
    from diffreview.git.adapter import GitError, get_repo_root

    try:
        return get_repo_root()
    except GitError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc


def _load_config(repo_root: Path, config: Optional[str]):
    from diffreview.config.loader import ConfigError, load_config

    try:
        return load_config(repo_root, config)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc


# ── review ────────────────────────────────────────────────────────────────────


@app.command()
def review(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .diffreview.toml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output with timing"),
) -> None:
    """Open the interactive reviewer on the working tree's pending changes."""
    from diffreview.engine.controller import ReviewController
    from diffreview.git import GitError, get_branch_name, get_head_commit, load_diff
    from diffreview.review.persistence import load_or_create_session, session_path_for_repo
    from diffreview.ui.app import ReviewApp

    repo_root = _resolve_repo_root()
    cfg = _load_config(repo_root, config)

    started = time.perf_counter()
    try:
        head = get_head_commit(repo_root)
        branch = get_branch_name(repo_root)
        files = load_diff(repo_root)
    except GitError as exc:
        console.print(f"[bold red]Git error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    if verbose or debug:
        console.print(f"[dim]Repo root: {repo_root}[/dim]")
        console.print(f"[dim]Base commit: {head or '(none)'}[/dim]")
        console.print(f"[dim]Files changed: {len(files)}[/dim]")
    if debug:
        console.print(f"[dim]Diff load: {(time.perf_counter() - started) * 1000:.0f}ms[/dim]")

    if not files:
        console.print("[dim]No changes to review.[/dim]")
        raise typer.Exit(code=1)

    session = load_or_create_session(
        repo_root,
        head,
        branch_name=branch,
        directory=cfg.session.directory,
        discard_stale=cfg.session.discard_stale,
    )
    if verbose or debug:
        console.print(f"[dim]Session file: {session_path_for_repo(repo_root, cfg.session.directory)}[/dim]")
        console.print(f"[dim]Saved comments: {session.comment_count()}[/dim]")

    controller = ReviewController(files, session)
    ReviewApp(
        controller,
        cfg,
        repo_root=repo_root,
        branch_name=branch,
        diff_loader=lambda: load_diff(repo_root),
    ).run()


# ── export ────────────────────────────────────────────────────────────────────


@app.command()
def export(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .diffreview.toml"),
    clipboard: bool = typer.Option(False, "--clipboard", help="Copy the report instead of printing it"),
) -> None:
    """Print the markdown report of the saved review for this repository."""
    from diffreview.output.clipboard import ClipboardError, ExportError, export_to_clipboard
    from diffreview.output.markdown import generate_markdown
    from diffreview.review.persistence import SessionError, find_session_for_repo, load_session

    repo_root = _resolve_repo_root()
    cfg = _load_config(repo_root, config)

    path = find_session_for_repo(repo_root, cfg.session.directory)
    if path is None:
        console.print("[yellow]⚠[/yellow]  No saved review for this repository")
        raise typer.Exit(code=1)

    try:
        session = load_session(path)
    except SessionError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc

    if not session.has_comments():
        console.print("[yellow]⚠[/yellow]  No comments to export")
        raise typer.Exit(code=1)

    if clipboard:
        try:
            msg = export_to_clipboard(session)
        except (ClipboardError, ExportError) as exc:
            console.print(f"[red]✗[/red] {exc}")
            raise typer.Exit(code=1) from exc
        console.print(f"[green]✓[/green] {msg}")
        return

    print(generate_markdown(session), end="")


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init() -> None:
    """Generate a starter .diffreview.toml in the repo root."""
    from diffreview.config.defaults import DEFAULT_TOML
    from diffreview.config.loader import CONFIG_FILENAME

    repo_root = _resolve_repo_root()
    config_path = repo_root / CONFIG_FILENAME

    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"diffreview {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """diffreview — review pending changes before you commit them."""
