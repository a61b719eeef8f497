"""Starter .diffreview.toml template."""

DEFAULT_TOML = """\
# diffreview configuration
version = "1.0"

[navigation]
half_page_lines = 15      # ctrl+d / ctrl+u
page_lines = 30           # ctrl+f / ctrl+b
horizontal_step = 4       # h / l

[comments]
default_type = "note"     # note | suggestion | issue | praise

[session]
# directory = "~/.local/share/diffreview/reviews"
discard_stale = true      # drop saved sessions recorded against another HEAD

[ui]
file_list_width = 20      # percent of the screen
show_help_on_start = false
"""
