"""Incremental parser for tool invocations in streamed model output.

The model writes tool calls as angle-bracket tags::

    Some prose.
    <replace_in_file>
    <path>src/app.py</path>
    <diff>
    ...
    </diff>
    </replace_in_file>

``ToolCallStreamParser.parse_chunk`` is called with the whole text received
so far, every time more arrives. It keeps a checkpoint past everything that
is final, so only the in-progress tail is rebuilt on each call, and the
resulting item sequence depends only on the buffer, never on where chunk
boundaries fell.
"""

import logging
from typing import List, Optional

from .content import ContentItem, TextItem, ToolInvocation
from .tools import ScanDirection, ToolCatalog, default_catalog

logger = logging.getLogger(__name__)

__all__ = ["ToolCallStreamParser"]


class ToolCallStreamParser:
    """Turns a growing text buffer into text spans and tool invocations."""

    def __init__(self, catalog: Optional[ToolCatalog] = None):
        self.catalog = catalog or default_catalog()
        self._items: List[ContentItem] = []
        self._checkpoint = 0
        self._message = ""

    @property
    def message(self) -> str:
        """Everything received since the last reset."""
        return self._message

    @property
    def items(self) -> List[ContentItem]:
        return self._items

    def feed(self, chunk: str) -> List[ContentItem]:
        """Append a delta to the buffer and parse."""
        return self.parse_chunk(self._message + chunk)

    def parse_chunk(self, buffer: str) -> List[ContentItem]:
        """Parse the cumulative buffer and return the full item sequence."""
        if not buffer.startswith(self._message):
            logger.debug("Buffer no longer extends the parsed message, reparsing from scratch")
            self.reset()
        self._message = buffer

        if self._items and self._items[-1].partial:
            self._items.pop()

        text = buffer
        current: Optional[ToolInvocation] = None
        text_start = self._checkpoint
        i = self._checkpoint

        while True:
            i = text.find("<", i)
            if i == -1:
                break
            tag_end = text.find(">", i)
            if tag_end == -1:
                break  # incomplete tag, wait for more input
            tag = text[i + 1:tag_end]

            if current is not None:
                if tag == f"/{current.name}":
                    current.partial = False
                    current = None
                    i = tag_end + 1
                    self._checkpoint = i
                    text_start = i
                elif self.catalog.accepts(current.name, tag):
                    i = self._read_param(current, tag, tag_end)
                else:
                    i += 1
                continue

            if self.catalog.is_tool(tag):
                self._push_text(text[text_start:i], partial=False)
                current = ToolInvocation(name=tag)
                self._items.append(current)
                self._checkpoint = i
                i = tag_end + 1
                text_start = i
            else:
                i += 1

        if current is None and text_start < len(text):
            self._push_text(text[text_start:], partial=True)

        return self._items

    def finalize(self) -> List[ContentItem]:
        """Mark the trailing item final once the stream has ended."""
        if self._items and self._items[-1].partial:
            self._items[-1].partial = False
        self._checkpoint = len(self._message)
        return self._items

    def reset(self) -> None:
        """Clear all state before a new message."""
        self._items = []
        self._checkpoint = 0
        self._message = ""

    def _read_param(self, tool: ToolInvocation, param: str, tag_end: int) -> int:
        """Store ``param``'s value on ``tool`` and return the scan position after it."""
        text = self._message
        closing = f"</{param}>"
        value_start = tag_end + 1

        if self.catalog.scan_direction(tool.name, param) is ScanDirection.BACKWARD:
            # Raw file content may contain its own closing tag; take the last
            # one before this tool's closing tag.
            bound = text.find(f"</{tool.name}>", value_start)
            if bound == -1:
                bound = len(text)
            close_at = text.rfind(closing, value_start, bound)
            if close_at == -1 and bound < len(text):
                tool.params[param] = text[value_start:bound].strip()
                return bound
        else:
            close_at = text.find(closing, value_start)

        if close_at == -1:
            tool.params[param] = text[value_start:].strip()
            return len(text)

        tool.params[param] = text[value_start:close_at].strip()
        return close_at + len(closing)

    def _push_text(self, text: str, partial: bool) -> None:
        text = text.strip()
        if text:
            self._items.append(TextItem(content=text, partial=partial))
