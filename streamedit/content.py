"""Content items produced by the tool-call stream parser."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union


@dataclass
class TextItem:
    content: str
    partial: bool = False


@dataclass
class ToolInvocation:
    name: str
    params: Dict[str, str] = field(default_factory=dict)
    partial: bool = True

    def get(self, param: str) -> Optional[str]:
        return self.params.get(param)


ContentItem = Union[TextItem, ToolInvocation]
