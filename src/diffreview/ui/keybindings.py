"""Key → action mapping, per input mode.

Keys use textual's names (``"j"``, ``"ctrl+d"``, ``"left_curly_bracket"``...).
Printable characters are also matched through ``character`` so that
shifted symbols work regardless of how the terminal reports them.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


class InputMode(str, Enum):
    NORMAL = "normal"
    COMMAND = "command"
    HELP = "help"
    CONFIRM = "confirm"


class Action(str, Enum):
    # Navigation
    CURSOR_DOWN = "cursor_down"
    CURSOR_UP = "cursor_up"
    HALF_PAGE_DOWN = "half_page_down"
    HALF_PAGE_UP = "half_page_up"
    PAGE_DOWN = "page_down"
    PAGE_UP = "page_up"
    GO_TO_TOP = "go_to_top"
    GO_TO_BOTTOM = "go_to_bottom"
    NEXT_FILE = "next_file"
    PREV_FILE = "prev_file"
    NEXT_HUNK = "next_hunk"
    PREV_HUNK = "prev_hunk"
    PENDING_Z = "pending_z"
    SCROLL_LEFT = "scroll_left"
    SCROLL_RIGHT = "scroll_right"

    # Panel focus
    TOGGLE_FOCUS = "toggle_focus"
    SELECT_FILE = "select_file"

    # Review actions
    TOGGLE_REVIEWED = "toggle_reviewed"
    ADD_LINE_COMMENT = "add_line_comment"
    ADD_FILE_COMMENT = "add_file_comment"
    PENDING_D = "pending_d"
    EXPORT_TO_CLIPBOARD = "export_to_clipboard"

    # Session / modes
    QUIT = "quit"
    ENTER_COMMAND_MODE = "enter_command_mode"
    EXIT_MODE = "exit_mode"
    TOGGLE_HELP = "toggle_help"
    CONFIRM_YES = "confirm_yes"
    CONFIRM_NO = "confirm_no"

    NONE = "none"


_NORMAL_KEYS: Dict[str, Action] = {
    "j": Action.CURSOR_DOWN,
    "down": Action.CURSOR_DOWN,
    "k": Action.CURSOR_UP,
    "up": Action.CURSOR_UP,
    "ctrl+d": Action.HALF_PAGE_DOWN,
    "ctrl+u": Action.HALF_PAGE_UP,
    "ctrl+f": Action.PAGE_DOWN,
    "pagedown": Action.PAGE_DOWN,
    "ctrl+b": Action.PAGE_UP,
    "pageup": Action.PAGE_UP,
    "g": Action.GO_TO_TOP,
    "home": Action.GO_TO_TOP,
    "G": Action.GO_TO_BOTTOM,
    "end": Action.GO_TO_BOTTOM,
    "z": Action.PENDING_Z,
    "}": Action.NEXT_FILE,
    "{": Action.PREV_FILE,
    "]": Action.NEXT_HUNK,
    "[": Action.PREV_HUNK,
    "h": Action.SCROLL_LEFT,
    "left": Action.SCROLL_LEFT,
    "l": Action.SCROLL_RIGHT,
    "right": Action.SCROLL_RIGHT,
    "tab": Action.TOGGLE_FOCUS,
    "enter": Action.SELECT_FILE,
    "r": Action.TOGGLE_REVIEWED,
    "c": Action.ADD_LINE_COMMENT,
    "C": Action.ADD_FILE_COMMENT,
    "d": Action.PENDING_D,
    "y": Action.EXPORT_TO_CLIPBOARD,
    ":": Action.ENTER_COMMAND_MODE,
    "?": Action.TOGGLE_HELP,
    "escape": Action.EXIT_MODE,
    "q": Action.QUIT,
}

_HELP_KEYS: Dict[str, Action] = {
    "escape": Action.TOGGLE_HELP,
    "q": Action.TOGGLE_HELP,
    "?": Action.TOGGLE_HELP,
}

_CONFIRM_KEYS: Dict[str, Action] = {
    "y": Action.CONFIRM_YES,
    "Y": Action.CONFIRM_YES,
    "enter": Action.CONFIRM_YES,
    "n": Action.CONFIRM_NO,
    "N": Action.CONFIRM_NO,
    "escape": Action.CONFIRM_NO,
}

# Command mode text entry is owned by the Input widget; only these escape it.
_COMMAND_KEYS: Dict[str, Action] = {
    "escape": Action.EXIT_MODE,
}

_KEYMAPS: Dict[InputMode, Dict[str, Action]] = {
    InputMode.NORMAL: _NORMAL_KEYS,
    InputMode.COMMAND: _COMMAND_KEYS,
    InputMode.HELP: _HELP_KEYS,
    InputMode.CONFIRM: _CONFIRM_KEYS,
}


def map_key_to_action(key: str, mode: InputMode, character: Optional[str] = None) -> Action:
    """Return the action bound to *key* (or its *character*) in *mode*."""
    keymap = _KEYMAPS[mode]
    if key in keymap:
        return keymap[key]
    if character and character.isprintable() and character in keymap:
        return keymap[character]
    return Action.NONE
