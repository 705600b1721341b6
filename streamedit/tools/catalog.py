"""Recognized tool names, per-tool parameters and closing-tag scan policy."""

from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from .schemas import TOOL_SCHEMAS


class ScanDirection(str, Enum):
    """Where to look for a parameter's closing tag."""
    FORWARD = "forward"
    BACKWARD = "backward"


class ToolCatalog:
    """Lookup of tool names and the parameter names each tool accepts.

    Parameter order follows the schema declaration. A parameter marked
    BACKWARD has its closing tag located from the end of the buffer rather
    than by the first occurrence after the opening tag.
    """

    def __init__(self, tools: Dict[str, Iterable[str]],
                 backward_params: Iterable[Tuple[str, str]] = ()):
        self._tools: Dict[str, Tuple[str, ...]] = {
            name: tuple(params) for name, params in tools.items()
        }
        self._backward = frozenset(backward_params)
        for tool_name, param in self._backward:
            if param not in self._tools.get(tool_name, ()):
                raise ValueError(f"Unknown tool parameter for backward scan: {tool_name}.{param}")

    @classmethod
    def from_schemas(cls, schemas: Optional[List[dict]] = None) -> "ToolCatalog":
        """Build a catalog from JSON-schema style tool definitions."""
        tools: Dict[str, List[str]] = {}
        backward: List[Tuple[str, str]] = []
        for schema in TOOL_SCHEMAS if schemas is None else schemas:
            fn = schema.get("function", {})
            name = fn.get("name")
            if not name:
                continue
            properties = fn.get("parameters", {}).get("properties", {})
            tools[name] = list(properties)
            for param, prop in properties.items():
                if prop.get("scan") == ScanDirection.BACKWARD.value:
                    backward.append((name, param))
        return cls(tools, backward)

    @classmethod
    def from_mapping(cls, tools: Dict[str, Iterable[str]],
                     backward_params: Iterable[str] = ()) -> "ToolCatalog":
        """Build a catalog from ``{tool: [params]}`` and ``tool.param`` strings."""
        pairs = []
        for entry in backward_params:
            tool_name, sep, param = str(entry).partition(".")
            if not sep or not tool_name or not param:
                raise ValueError(f"Expected 'tool.param', got {entry!r}")
            pairs.append((tool_name, param))
        return cls(tools, pairs)

    @property
    def tool_names(self) -> List[str]:
        return list(self._tools)

    def is_tool(self, name: str) -> bool:
        return name in self._tools

    def params_for(self, tool_name: str) -> Tuple[str, ...]:
        return self._tools.get(tool_name, ())

    def accepts(self, tool_name: str, param: str) -> bool:
        return param in self._tools.get(tool_name, ())

    def scan_direction(self, tool_name: str, param: str) -> ScanDirection:
        if (tool_name, param) in self._backward:
            return ScanDirection.BACKWARD
        return ScanDirection.FORWARD

    def backward_params(self) -> List[str]:
        return sorted(f"{tool}.{param}" for tool, param in self._backward)

    def to_mapping(self) -> Dict[str, List[str]]:
        return {name: list(params) for name, params in self._tools.items()}


def default_catalog() -> ToolCatalog:
    return ToolCatalog.from_schemas(TOOL_SCHEMAS)
