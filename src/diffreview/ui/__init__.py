"""Terminal UI — key mapping, rendering and the textual application."""

from diffreview.ui.app import CommentScreen, ConfirmScreen, HelpScreen, MessageType, ReviewApp
from diffreview.ui.keybindings import Action, InputMode, map_key_to_action

__all__ = [
    "Action",
    "CommentScreen",
    "ConfirmScreen",
    "HelpScreen",
    "InputMode",
    "MessageType",
    "ReviewApp",
    "map_key_to_action",
]
