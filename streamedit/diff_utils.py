"""Line and character comparisons between a file and its reconstruction."""

import difflib
from typing import Iterable, List, Sequence, Tuple

from .theme import ERROR, SUCCESS

Opcode = Tuple[str, int, int, int, int]
Span = Tuple[str, bool]

STRATEGY_LABELS = {
    "exact": "exact",
    "empty": "whole file",
    "line_trimmed": "whitespace-insensitive",
    "block_anchor": "anchored on first/last line",
}


def _matcher(old: Sequence[str], new: Sequence[str]) -> difflib.SequenceMatcher:
    return difflib.SequenceMatcher(None, old, new, autojunk=False)


def change_hunks(old_lines: List[str], new_lines: List[str], context: int = 3) -> List[List[Opcode]]:
    """Group line opcodes into hunks with ``context`` unchanged lines around them."""
    return list(_matcher(old_lines, new_lines).get_grouped_opcodes(context))


def count_changes(old_content: str, new_content: str) -> Tuple[int, int]:
    """Return ``(added, removed)`` line counts."""
    added = removed = 0
    old_lines = old_content.splitlines()
    new_lines = new_content.splitlines()
    for tag, i1, i2, j1, j2 in _matcher(old_lines, new_lines).get_opcodes():
        if tag != "equal":
            removed += i2 - i1
            added += j2 - j1
    return added, removed


def char_spans(old_line: str, new_line: str) -> Tuple[List[Span], List[Span]]:
    """Split both lines into ``(text, changed)`` runs for inline highlighting."""
    old_spans: List[Span] = []
    new_spans: List[Span] = []
    for tag, i1, i2, j1, j2 in _matcher(old_line, new_line).get_opcodes():
        changed = tag != "equal"
        if i2 > i1:
            old_spans.append((old_line[i1:i2], changed))
        if j2 > j1:
            new_spans.append((new_line[j1:j2], changed))
    return old_spans, new_spans


def similar(line1: str, line2: str, threshold: float = 0.4) -> bool:
    """Whether a replaced line is close enough to its old form to highlight inline."""
    return _matcher(line1, line2).ratio() >= threshold


def format_change_summary(added: int, removed: int) -> str:
    """Rich markup such as ``+3, -1``."""
    parts = []
    if added:
        parts.append(f"[{SUCCESS}]+{added}[/{SUCCESS}]")
    if removed:
        parts.append(f"[{ERROR}]-{removed}[/{ERROR}]")
    return ", ".join(parts) if parts else "no changes"


def describe_block(block) -> str:
    """One-line description of an applied SEARCH block."""
    label = STRATEGY_LABELS.get(block.strategy, block.strategy)
    if block.strategy == "empty":
        return label
    if block.line_count <= 1:
        return f"line {block.first_line}, {label}"
    return f"lines {block.first_line}-{block.last_line}, {label}"


def is_fuzzy(block) -> bool:
    """Whether the block needed a fallback strategy to be located."""
    return block.strategy not in ("exact", "empty")


def fuzzy_blocks(blocks: Iterable) -> List:
    return [b for b in blocks if is_fuzzy(b)]
