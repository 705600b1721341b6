"""Search match strategies for SEARCH/REPLACE blocks.

Strategies, tried in order from a forward-only start offset:
empty search, exact substring, line-trimmed window, block anchor.
"""

from typing import List, NamedTuple, Optional

from .errors import NoMatchFound


class Match(NamedTuple):
    """Half-open character span ``[start, end)`` in the original content."""
    start: int
    end: int
    strategy: str = "exact"


def _trim_trailing_empty(lines: List[str]) -> List[str]:
    end = len(lines)
    while end > 0 and lines[end - 1] == "":
        end -= 1
    return lines[:end]


def line_index_at(lines: List[str], offset: int) -> int:
    """Return the index of the line containing character ``offset``."""
    position = 0
    line_no = 0
    while position < offset and line_no < len(lines):
        position += len(lines[line_no]) + 1
        line_no += 1
    return line_no - 1 if position > offset else line_no


def _span_length(lines: List[str], start: int, count: int) -> int:
    """Characters covered by ``count`` lines from ``start``, newlines included."""
    return sum(len(line) + 1 for line in lines[start:start + count])


def empty_search_match(original: str, search: str) -> Optional[Match]:
    if search:
        return None
    # Empty original: pure insertion. Otherwise the whole file is replaced.
    return Match(0, len(original), "empty")


def exact_match(original: str, search: str, from_offset: int = 0) -> Optional[Match]:
    index = original.find(search, from_offset)
    if index == -1:
        return None
    return Match(index, index + len(search), "exact")


def line_trimmed_match(original: str, search: str, from_offset: int = 0) -> Optional[Match]:
    """Match line by line, ignoring leading and trailing whitespace on each line."""
    lines = original.split("\n")
    search_lines = _trim_trailing_empty(search.split("\n"))
    wanted = [line.strip() for line in search_lines]
    count = len(wanted)

    for i in range(line_index_at(lines, from_offset), len(lines) - count + 1):
        if all(lines[i + j].strip() == wanted[j] for j in range(count)):
            start = _span_length(lines, 0, i)
            end = start + _span_length(lines, i, count)
            return Match(start, min(end, len(original)), "line_trimmed")
    return None


def block_anchor_match(original: str, search: str, from_offset: int = 0) -> Optional[Match]:
    """Match blocks of 3+ lines by their first and last lines only.

    Interior lines may differ; the block must span the same number of lines.
    """
    search_lines = _trim_trailing_empty(search.split("\n"))
    count = len(search_lines)
    if count < 3:
        return None

    lines = original.split("\n")
    first = search_lines[0].strip()
    last = search_lines[-1].strip()

    for i in range(line_index_at(lines, from_offset), len(lines) - count + 1):
        if lines[i].strip() != first or lines[i + count - 1].strip() != last:
            continue
        start = _span_length(lines, 0, i)
        end = start
        for k in range(count):
            end += len(lines[i + k])
            # No newline after the final line of a file without one.
            if k < count - 1 or i + k < len(lines) - 1:
                end += 1
        return Match(start, end, "block_anchor")
    return None


def locate(original: str, search: str, from_offset: int = 0) -> Match:
    """Find where ``search`` sits in ``original`` at or after ``from_offset``.

    Raises:
        NoMatchFound: when no strategy locates the block.
    """
    match = empty_search_match(original, search)
    if match is not None:
        return match

    for strategy in (exact_match, line_trimmed_match, block_anchor_match):
        match = strategy(original, search, from_offset)
        if match is not None:
            return match

    raise NoMatchFound(search)
