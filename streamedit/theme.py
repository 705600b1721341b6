"""Terminal color constants (GitHub dark palette)."""

ACCENT = "#7FA6D9"
BORDER = "#30363D"
DIM = "#6E7681"
MUTED = "#8B949E"
SUCCESS = "#57DB9C"
WARN = "#E3B341"
ERROR = "#F85149"
INFO = "#58A6FF"
TOOL_BORDER = "dim"
