"""diffreview — review pending changes in a git working tree from the terminal."""

__version__ = "0.1.0"
