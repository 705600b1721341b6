"""streamedit: interpret streamed tool calls and SEARCH/REPLACE edits."""

__version__ = "1.0.0"

from .content import ContentItem, TextItem, ToolInvocation
from .diff import AppliedBlock, DiffReconstructor, reconstruct, reconstruct_blocks
from .edit_session import FileEditSession
from .errors import (
    ConfigError,
    IncompleteAtFinalization,
    InvalidStateTransition,
    NoMatchFound,
    NonMonotonicMatch,
    ReconstructionError,
    StreamEditError,
    UnresolvableMarker,
)
from .matching import Match, locate
from .parser import ToolCallStreamParser
from .tools import ScanDirection, ToolCatalog, default_catalog

__all__ = [
    "__version__",
    "ContentItem", "TextItem", "ToolInvocation",
    "AppliedBlock", "DiffReconstructor", "reconstruct", "reconstruct_blocks",
    "FileEditSession",
    "StreamEditError", "ConfigError", "ReconstructionError",
    "InvalidStateTransition", "UnresolvableMarker", "NoMatchFound",
    "NonMonotonicMatch", "IncompleteAtFinalization",
    "Match", "locate",
    "ToolCallStreamParser",
    "ScanDirection", "ToolCatalog", "default_catalog",
]
