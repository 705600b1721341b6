"""Cleanup helpers for model-written text before it is applied or displayed."""

import re
from functools import lru_cache

__all__ = [
    "fix_model_html_escaping", "remove_invalid_chars", "strip_code_fences",
    "remove_partial_closing_tag", "remove_incomplete_tag_at_end",
]

_HTML_ENTITIES = {
    "&gt;": ">",
    "&lt;": "<",
    "&quot;": '"',
    "&amp;": "&",
    "&apos;": "'",
}
_HTML_ENTITY_RE = re.compile("|".join(re.escape(entity) for entity in _HTML_ENTITIES))
_TAG_NAME_RE = re.compile(r"^[a-zA-Z_]+$")


def fix_model_html_escaping(text: str) -> str:
    """Turn HTML entities some models emit back into the characters they stand for."""
    return _HTML_ENTITY_RE.sub(lambda m: _HTML_ENTITIES[m.group(0)], text)


def remove_invalid_chars(text: str) -> str:
    """Drop U+FFFD replacement characters left by broken decoding."""
    return text.replace("\ufffd", "")


def strip_code_fences(content: str, fence: str = "```") -> str:
    """Remove a markdown fence wrapped around a whole file (```python ... ```)."""
    if content.startswith(fence):
        content = "\n".join(content.split("\n")[1:]).strip()
    if content.endswith(fence):
        content = "\n".join(content.split("\n")[:-1]).strip()
    return content


@lru_cache(maxsize=64)
def _partial_closing_tag_re(tag: str) -> re.Pattern:
    optional_chars = "".join(f"(?:{re.escape(char)})?" for char in tag)
    return re.compile(rf"\s?</?{optional_chars}$")


def remove_partial_closing_tag(tag: str, text: str, partial: bool = True) -> str:
    """Hide a half-streamed ``</tag`` at the end of a partial parameter value."""
    if not partial or not text:
        return text or ""
    return _partial_closing_tag_re(tag).sub("", text)


def remove_incomplete_tag_at_end(content: str) -> str:
    """Hide a trailing ``<`` or ``<tag_name`` that has not been closed yet."""
    start = content.rfind("<")
    if start == -1:
        return content
    tag = content[start:]
    if ">" in tag:
        return content
    name = tag[2:].strip() if tag.startswith("</") else tag[1:].strip()
    if tag in ("<", "</") or _TAG_NAME_RE.match(name):
        return content[:start].strip()
    return content
