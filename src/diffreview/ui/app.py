"""Textual application: panels, modal editors and command mode."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Static, TextArea

from diffreview.config.schema import DiffReviewConfig
from diffreview.engine.controller import FocusedPanel, ReviewController
from diffreview.git.adapter import GitError
from diffreview.git.models import DiffFile
from diffreview.output.clipboard import ClipboardError, ExportError, export_to_clipboard
from diffreview.review.models import CommentType, LineSide
from diffreview.review.persistence import SessionError, save_session
from diffreview.ui.keybindings import Action, InputMode, map_key_to_action
from diffreview.ui.render import (
    comment_badge,
    render_diff,
    render_file_list,
    render_header,
    render_help,
    render_status_bar,
)

DiffLoader = Callable[[], List[DiffFile]]


class MessageType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class CommentScreen(ModalScreen[Optional[Tuple[str, CommentType]]]):
    """Multi-line comment editor. Dismisses with ``(text, type)`` or None."""

    CSS = """
    CommentScreen {
        align: center middle;
    }
    #dialog {
        width: 70%;
        max-width: 100;
        height: auto;
        border: round #3a86ff;
        padding: 1 2;
        background: #0b0f19;
    }
    #comment_input {
        height: 8;
    }
    """

    BINDINGS = [
        Binding("ctrl+s", "submit", "Save", priority=True),
        Binding("ctrl+t", "cycle_type", "Type", priority=True),
        Binding("escape", "cancel", "Cancel", priority=True),
    ]

    def __init__(self, title: str, comment_type: CommentType = CommentType.NOTE) -> None:
        super().__init__()
        self.dialog_title = title
        self.comment_type = comment_type

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Static(f"[b]{self.dialog_title}[/b]")
            yield Static(comment_badge(self.comment_type), id="comment_type")
            yield TextArea(id="comment_input")
            yield Static("[dim]ctrl+s save · ctrl+t type · esc cancel[/dim]")

    def on_mount(self) -> None:
        self.query_one("#comment_input", TextArea).focus()

    def action_submit(self) -> None:
        text = self.query_one("#comment_input", TextArea).text
        if not text.strip():
            self.dismiss(None)
            return
        self.dismiss((text, self.comment_type))

    def action_cycle_type(self) -> None:
        self.comment_type = self.comment_type.cycle()
        self.query_one("#comment_type", Static).update(comment_badge(self.comment_type))

    def action_cancel(self) -> None:
        self.dismiss(None)


class ConfirmScreen(ModalScreen[bool]):
    CSS = """
    ConfirmScreen {
        align: center middle;
    }
    #dialog {
        width: auto;
        height: auto;
        border: round #f72585;
        padding: 1 2;
        background: #0b0f19;
    }
    """

    def __init__(self, question: str) -> None:
        super().__init__()
        self.question = question

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Static(f"[b]{self.question}[/b]")
            yield Static("[dim](y)es / (n)o[/dim]")

    def on_key(self, event: events.Key) -> None:
        action = map_key_to_action(event.key, InputMode.CONFIRM, event.character)
        if action == Action.NONE:
            return
        event.stop()
        self.dismiss(action == Action.CONFIRM_YES)


class HelpScreen(ModalScreen[None]):
    CSS = """
    HelpScreen {
        align: center middle;
    }
    #dialog {
        width: 60;
        height: auto;
        border: round #4cc9f0;
        padding: 1 2;
        background: #0b0f19;
    }
    """

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Static(render_help())

    def on_key(self, event: events.Key) -> None:
        if map_key_to_action(event.key, InputMode.HELP, event.character) == Action.TOGGLE_HELP:
            event.stop()
            self.dismiss(None)


class ReviewApp(App[None]):
    CSS = """
    Screen { layout: vertical; }
    #header { height: 1; background: #1d3557; }
    #main { height: 1fr; }
    #file_list { width: 20%; height: 100%; border-right: solid #4cc9f0; }
    #diff_view { width: 1fr; height: 100%; }
    #status_bar { height: 1; }
    #command_input { height: 1; border: none; padding: 0; display: none; }
    """

    BINDINGS = [
        Binding("tab", "toggle_focus", "Focus", show=False, priority=True),
    ]

    # nothing focused until command mode
    AUTO_FOCUS = None

    def __init__(
        self,
        controller: ReviewController,
        config: DiffReviewConfig,
        *,
        repo_root: Path,
        branch_name: Optional[str] = None,
        diff_loader: Optional[DiffLoader] = None,
    ) -> None:
        super().__init__()
        self.controller = controller
        self.config = config
        self.repo_root = repo_root
        self.branch_name = branch_name
        self.diff_loader = diff_loader

        self.input_mode = InputMode.NORMAL
        self.pending_key: Optional[str] = None
        self.message: Optional[str] = None
        self.message_type = MessageType.INFO

    # ── layout ───────────────────────────────────────────────────────────

    def compose(self) -> ComposeResult:
        yield Static("", id="header")
        with Horizontal(id="main"):
            yield Static("", id="file_list")
            yield Static("", id="diff_view")
        yield Static("", id="status_bar")
        yield Input(placeholder=":", id="command_input")

    def on_mount(self) -> None:
        self.query_one("#file_list", Static).styles.width = f"{self.config.ui.file_list_width}%"
        self.call_after_refresh(self._sync_viewport)
        if self.config.ui.show_help_on_start:
            self.push_screen(HelpScreen())
        self.refresh_view()

    def on_resize(self, event: events.Resize) -> None:
        self.call_after_refresh(self._sync_viewport)

    def _sync_viewport(self) -> None:
        height = self.query_one("#diff_view", Static).content_size.height
        self.controller.set_viewport_height(height)
        self.refresh_view()

    def refresh_view(self) -> None:
        controller = self.controller
        self.query_one("#header", Static).update(render_header(controller, self.branch_name))
        self.query_one("#file_list", Static).update(render_file_list(controller))
        self.query_one("#diff_view", Static).update(render_diff(controller))
        self.query_one("#status_bar", Static).update(
            render_status_bar(controller, self.input_mode.value, self.message, self.message_type.value)
        )

    def set_message(self, text: str, message_type: MessageType = MessageType.INFO) -> None:
        self.message = text
        self.message_type = message_type

    # ── keys ─────────────────────────────────────────────────────────────

    def on_key(self, event: events.Key) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_mode == InputMode.COMMAND:
            if map_key_to_action(event.key, InputMode.COMMAND) == Action.EXIT_MODE:
                event.stop()
                self._leave_command_mode()
                self.refresh_view()
            return

        action = map_key_to_action(event.key, InputMode.NORMAL, event.character)
        if action == Action.NONE and self.pending_key is None:
            return
        event.stop()
        self._dispatch(action)
        self.refresh_view()

    def _dispatch(self, action: Action) -> None:
        controller = self.controller
        nav = self.config.navigation

        pending, self.pending_key = self.pending_key, None
        if pending == "z" and action == Action.PENDING_Z:
            controller.center_cursor()
            return
        if pending == "d" and action == Action.PENDING_D:
            self._delete_comment()
            return

        if controller.focused_panel == FocusedPanel.FILE_LIST:
            if action == Action.CURSOR_DOWN:
                controller.file_list_down()
                return
            if action == Action.CURSOR_UP:
                controller.file_list_up()
                return
            if action == Action.SELECT_FILE:
                controller.jump_to_file(controller.file_list_selected)
                controller.toggle_focus()
                return

        if action == Action.CURSOR_DOWN:
            controller.cursor_down()
        elif action == Action.CURSOR_UP:
            controller.cursor_up()
        elif action == Action.HALF_PAGE_DOWN:
            controller.scroll_down(nav.half_page_lines)
        elif action == Action.HALF_PAGE_UP:
            controller.scroll_up(nav.half_page_lines)
        elif action == Action.PAGE_DOWN:
            controller.scroll_down(nav.page_lines)
        elif action == Action.PAGE_UP:
            controller.scroll_up(nav.page_lines)
        elif action == Action.GO_TO_TOP:
            controller.go_to_top()
        elif action == Action.GO_TO_BOTTOM:
            controller.go_to_bottom()
        elif action == Action.NEXT_FILE:
            controller.next_file()
        elif action == Action.PREV_FILE:
            controller.prev_file()
        elif action == Action.NEXT_HUNK:
            controller.next_hunk()
        elif action == Action.PREV_HUNK:
            controller.prev_hunk()
        elif action == Action.SCROLL_LEFT:
            controller.scroll_left(nav.horizontal_step)
        elif action == Action.SCROLL_RIGHT:
            controller.scroll_right(nav.horizontal_step)
        elif action == Action.PENDING_Z:
            self.pending_key = "z"
        elif action == Action.PENDING_D:
            self.pending_key = "d"
        elif action == Action.TOGGLE_FOCUS:
            controller.toggle_focus()
        elif action == Action.TOGGLE_REVIEWED:
            self._toggle_reviewed()
        elif action == Action.ADD_LINE_COMMENT:
            self._open_line_comment()
        elif action == Action.ADD_FILE_COMMENT:
            self._open_file_comment()
        elif action == Action.EXPORT_TO_CLIPBOARD:
            self._export()
        elif action == Action.ENTER_COMMAND_MODE:
            self._enter_command_mode()
        elif action == Action.TOGGLE_HELP:
            self.push_screen(HelpScreen())
        elif action == Action.EXIT_MODE:
            self.message = None
        elif action == Action.QUIT:
            self.exit()

    def action_toggle_focus(self) -> None:
        if isinstance(self.screen, ModalScreen) or self.input_mode != InputMode.NORMAL:
            return
        self.controller.toggle_focus()
        self.refresh_view()

    # ── review actions ───────────────────────────────────────────────────

    def _default_comment_type(self) -> CommentType:
        return CommentType(self.config.comments.default_type)

    def _toggle_reviewed(self) -> None:
        reviewed = self.controller.toggle_reviewed()
        if reviewed is None:
            self.set_message("No file selected", MessageType.WARNING)
        else:
            self.set_message("Marked as reviewed" if reviewed else "Marked as not reviewed")

    def _open_line_comment(self) -> None:
        target = self.controller.get_line_at_cursor()
        if target is None:
            self.set_message("Move cursor to a diff line to add a line comment", MessageType.WARNING)
            return
        line, side = target
        marker = f"~{line}" if side == LineSide.OLD else str(line)

        def _on_dismiss(result: Optional[Tuple[str, CommentType]]) -> None:
            if result is None:
                return
            text, comment_type = result
            try:
                self.controller.add_line_comment(line, side, text, comment_type)
            except ValueError as exc:
                self.set_message(str(exc), MessageType.WARNING)
            else:
                self.set_message(f"Comment added on line {marker}")
            self.refresh_view()

        title = f"Comment on {self.controller.current_file_path()}:{marker}"
        self.push_screen(CommentScreen(title, self._default_comment_type()), callback=_on_dismiss)

    def _open_file_comment(self) -> None:
        path = self.controller.current_file_path()
        if path is None:
            self.set_message("No file selected", MessageType.WARNING)
            return

        def _on_dismiss(result: Optional[Tuple[str, CommentType]]) -> None:
            if result is None:
                return
            text, comment_type = result
            try:
                self.controller.add_file_comment(text, comment_type)
            except ValueError as exc:
                self.set_message(str(exc), MessageType.WARNING)
            else:
                self.set_message("File comment added")
            self.refresh_view()

        self.push_screen(CommentScreen(f"Comment on {path}", self._default_comment_type()), callback=_on_dismiss)

    def _delete_comment(self) -> None:
        if self.controller.delete_comment_at_cursor():
            self.set_message("Comment deleted")
        else:
            self.set_message("No comment at cursor", MessageType.WARNING)

    # ── collaborators ────────────────────────────────────────────────────

    def _save(self) -> bool:
        try:
            path = save_session(
                self.controller.session,
                repo_root=self.repo_root,
                directory=self.config.session.directory,
            )
        except SessionError as exc:
            self.set_message(f"Save failed: {exc}", MessageType.ERROR)
            return False
        self.controller.dirty = False
        self.set_message(f"Review saved to {path}")
        return True

    def _export(self) -> None:
        try:
            self.set_message(export_to_clipboard(self.controller.session))
        except ExportError as exc:
            self.set_message(str(exc), MessageType.WARNING)
        except ClipboardError as exc:
            self.set_message(f"Clipboard error: {exc}", MessageType.ERROR)

    def _reload(self) -> None:
        if self.diff_loader is None:
            self.set_message("Reload is not available", MessageType.WARNING)
            return
        try:
            files = self.diff_loader()
        except GitError as exc:
            self.set_message(f"Reload failed: {exc}", MessageType.ERROR)
            return
        if not files:
            self.set_message("No changes to review", MessageType.WARNING)
            return
        count = self.controller.reload(files)
        self.set_message(f"Reloaded {count} file{'s' if count != 1 else ''}")

    # ── command mode ─────────────────────────────────────────────────────

    def _enter_command_mode(self) -> None:
        self.input_mode = InputMode.COMMAND
        command_input = self.query_one("#command_input", Input)
        command_input.value = ""
        command_input.display = True
        command_input.focus()

    def _leave_command_mode(self) -> None:
        self.input_mode = InputMode.NORMAL
        command_input = self.query_one("#command_input", Input)
        command_input.display = False
        command_input.value = ""
        self.set_focus(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "command_input":
            return
        command = event.value.strip()
        self._leave_command_mode()
        self.run_command(command)
        self.refresh_view()

    def run_command(self, command: str) -> None:
        if command in ("q", "quit"):
            self.exit()
        elif command in ("w", "write"):
            self._save()
        elif command in ("x", "wq"):
            if not self._save():
                return
            if self.controller.session.has_comments():
                self.push_screen(ConfirmScreen("Copy review to clipboard?"), callback=self._copy_then_quit)
            else:
                self.exit()
        elif command in ("e", "reload"):
            self._reload()
        elif command in ("clip", "export"):
            self._export()
        elif command:
            self.set_message(f"Unknown command: {command}", MessageType.ERROR)

    def _copy_then_quit(self, copy: Optional[bool]) -> None:
        if copy:
            self._export()
        self.exit()
