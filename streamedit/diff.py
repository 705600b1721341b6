"""Rebuild file content from a streamed SEARCH/REPLACE diff.

The diff format uses three marker lines::

    <<<<<<< SEARCH
    [text to find in the original file]
    =======
    [text to put in its place]
    >>>>>>> REPLACE

``reconstruct`` is called with the cumulative diff text every time more of it
streams in. Each call builds a fresh ``DiffReconstructor`` and replays every
line, so the output depends only on the text seen so far. Replacement lines
are written to the result as soon as their block's match is known, which lets
callers show the edit while it is still arriving. With ``is_final`` the rest
of the original content is appended and any open block is an error.

Blocks must reference forward-ordered, non-overlapping regions of the file.
Model output sometimes mangles a marker (``<<<<< SEARCH``, ``=====``); one such
marker per block is repaired from the lines buffered since the previous clean
marker.
"""

import logging
import re
from enum import IntFlag
from typing import List, NamedTuple, Optional, Tuple

from .errors import (
    IncompleteAtFinalization,
    InvalidStateTransition,
    NoMatchFound,
    NonMonotonicMatch,
    UnresolvableMarker,
)
from .matching import Match, locate

logger = logging.getLogger(__name__)

__all__ = [
    "SEARCH_MARKER", "SEPARATOR_MARKER", "REPLACE_MARKER",
    "Phase", "AppliedBlock", "DiffReconstructor", "reconstruct", "reconstruct_blocks",
]

SEARCH_MARKER = "<<<<<<< SEARCH"
SEPARATOR_MARKER = "======="
REPLACE_MARKER = ">>>>>>> REPLACE"
MARKERS = (SEARCH_MARKER, SEPARATOR_MARKER, REPLACE_MARKER)

_LENIENT_SEARCH = re.compile(r"^<{3,}\s*SEARCH\s*$")
_LENIENT_SEPARATOR = re.compile(r"^={3,}\s*$")
_LENIENT_REPLACE = re.compile(r"^>{3,}\s*REPLACE\s*$")


class Phase(IntFlag):
    """Block state as two independent bits: SEARCH seen, REPLACE seen."""
    IDLE = 0
    SEARCH = 1
    REPLACE = 2


_IN_REPLACE = Phase.SEARCH | Phase.REPLACE


class AppliedBlock(NamedTuple):
    """Where one SEARCH block landed in the original file (1-based lines)."""
    first_line: int
    line_count: int
    strategy: str

    @property
    def last_line(self) -> int:
        return self.first_line + max(self.line_count, 1) - 1

_PHASE_NAMES = {
    Phase.IDLE: "Idle",
    Phase.SEARCH: "Search",
    Phase.REPLACE: "Replace",
    _IN_REPLACE: "Replace",
}

_TRANSITIONS = {
    (Phase.IDLE, Phase.SEARCH): Phase.SEARCH,
    (Phase.SEARCH, Phase.REPLACE): _IN_REPLACE,
    (_IN_REPLACE, Phase.IDLE): Phase.IDLE,
}


def _marker_kind(line: str) -> Optional[str]:
    """Name the marker a non-canonical line resembles, if any."""
    if _LENIENT_SEARCH.match(line):
        return "SEARCH"
    if _LENIENT_SEPARATOR.match(line):
        return "======="
    if _LENIENT_REPLACE.match(line):
        return "REPLACE"
    return None


def _last_matching(lines: List[str], pattern: re.Pattern) -> int:
    for index in range(len(lines) - 1, -1, -1):
        if pattern.match(lines[index]):
            return index
    return -1


class DiffReconstructor:
    """Line-driven state machine applying SEARCH/REPLACE blocks to one file."""

    def __init__(self, original_content: str):
        self.original_content = original_content
        self.last_processed_index = 0
        self.result = ""
        self.phase = Phase.IDLE
        self.search_lines: List[str] = []
        self.replace_lines: List[str] = []
        self.pending_unrecognized: List[str] = []
        self.current_match: Optional[Match] = None
        self.applied: List[AppliedBlock] = []
        self._repairing = False

    # ── Happy path ──────────────────────────────

    def process_line(self, line: str) -> None:
        if line == SEARCH_MARKER:
            self._on_search_marker()
        elif line == SEPARATOR_MARKER:
            self._on_separator_marker()
        elif line == REPLACE_MARKER:
            self._on_replace_marker()
        elif self.phase & Phase.REPLACE:
            self.replace_lines.append(line)
            self.result += line + "\n"
        elif self.phase & Phase.SEARCH:
            self.search_lines.append(line)
        else:
            self.pending_unrecognized.append(line)

    def finish(self, is_final: bool) -> str:
        """Return the content built so far, completing it when ``is_final``."""
        if not is_final:
            return self.result

        if self.phase & Phase.REPLACE and _last_matching(self.replace_lines, _LENIENT_REPLACE) != -1:
            self._repair_closing_marker()
        if self.phase != Phase.IDLE:
            raise IncompleteAtFinalization(_PHASE_NAMES[self.phase])
        self._settle_pending()

        self.result += self.original_content[self.last_processed_index:]
        return self.result

    def _on_search_marker(self) -> None:
        if self.phase & Phase.REPLACE:
            self._repair_closing_marker()
        if self.phase == Phase.IDLE:
            self._settle_pending()
        self._transition(Phase.SEARCH)
        self.search_lines = []
        self.replace_lines = []

    def _on_separator_marker(self) -> None:
        if self.phase == Phase.IDLE:
            self._repair_search_marker()
        self._transition(Phase.REPLACE)
        self._begin_replace()

    def _on_replace_marker(self) -> None:
        if not self.phase & Phase.REPLACE:
            self._repair_separator()
        self._transition(Phase.IDLE)
        self._finish_block()

    def _transition(self, target: Phase) -> None:
        new_phase = _TRANSITIONS.get((self.phase, target))
        if new_phase is None:
            raise InvalidStateTransition(_PHASE_NAMES[self.phase], _PHASE_NAMES[target])
        self.phase = new_phase

    def _begin_replace(self) -> None:
        search = "".join(line + "\n" for line in self.search_lines)
        try:
            match = locate(self.original_content, search, self.last_processed_index)
        except NoMatchFound:
            earlier = self._locate_earlier(search)
            if earlier is None:
                raise
            raise NonMonotonicMatch(search, earlier.start, self.last_processed_index) from None

        if match.start < self.last_processed_index:
            raise NonMonotonicMatch(search, match.start, self.last_processed_index)
        if match.strategy not in ("exact", "empty"):
            logger.debug("SEARCH block matched by %s strategy at %d:%d",
                         match.strategy, match.start, match.end)

        self.result += self.original_content[self.last_processed_index:match.start]
        self.current_match = match
        self.applied.append(self._describe(match))

    def _describe(self, match: Match) -> AppliedBlock:
        matched = self.original_content[match.start:match.end]
        line_count = matched.count("\n")
        if matched and not matched.endswith("\n"):
            line_count += 1
        first_line = self.original_content.count("\n", 0, match.start) + 1
        return AppliedBlock(first_line, line_count, match.strategy)

    def _locate_earlier(self, search: str) -> Optional[Match]:
        """Return a match before the processed region, if the block has one."""
        if self.last_processed_index == 0:
            return None
        try:
            match = locate(self.original_content, search, 0)
        except NoMatchFound:
            return None
        return match if match.start < self.last_processed_index else None

    def _finish_block(self) -> None:
        match = self.current_match
        matched = self.original_content[match.start:match.end]
        # Replacing a final line that had no newline keeps it without one.
        if self.replace_lines and matched and not matched.endswith("\n"):
            self.result = self.result[:-1]
        self.last_processed_index = match.end
        self.search_lines = []
        self.replace_lines = []
        self.current_match = None

    # ── Marker repair ───────────────────────────

    def _refeed(self, lines: List[str]) -> None:
        self._repairing = True
        try:
            for line in lines:
                self.process_line(line)
        finally:
            self._repairing = False

    def _guard_compound(self, marker: str) -> None:
        if self._repairing:
            raise UnresolvableMarker(
                marker, "Only one malformed marker per block can be repaired."
            )

    def _repair_search_marker(self) -> None:
        """A separator arrived outside a block: recover a mangled SEARCH line."""
        self._guard_compound("SEARCH")
        index = _last_matching(self.pending_unrecognized, _LENIENT_SEARCH)
        if index == -1:
            raise UnresolvableMarker(
                "SEARCH", "Found a ======= separator with no SEARCH marker before it."
            )
        logger.info("Repairing malformed SEARCH marker %r", self.pending_unrecognized[index])
        tail = self.pending_unrecognized[index + 1:]
        self.pending_unrecognized = self.pending_unrecognized[:index]
        self._refeed([SEARCH_MARKER] + tail)

    def _repair_separator(self) -> None:
        """A closing marker arrived before the separator: recover a mangled one."""
        self._guard_compound("=======")
        if self.phase == Phase.IDLE:
            raise UnresolvableMarker(
                "SEARCH", "Found a REPLACE marker outside any SEARCH/REPLACE block."
            )
        index = _last_matching(self.search_lines, _LENIENT_SEPARATOR)
        if index == -1:
            raise UnresolvableMarker(
                "=======", "Found a REPLACE marker with no ======= separator before it."
            )
        logger.info("Repairing malformed separator %r", self.search_lines[index])
        tail = self.search_lines[index + 1:]
        self.search_lines = self.search_lines[:index]
        self._refeed([SEPARATOR_MARKER] + tail)

    def _repair_closing_marker(self) -> None:
        """A block is still open: recover a mangled closing REPLACE line."""
        self._guard_compound("REPLACE")
        index = _last_matching(self.replace_lines, _LENIENT_REPLACE)
        if index == -1:
            raise UnresolvableMarker(
                "REPLACE", "A new SEARCH block started before the previous block was closed."
            )
        logger.info("Repairing malformed REPLACE marker %r", self.replace_lines[index])
        tail = self.replace_lines[index + 1:]
        emitted = sum(len(line) + 1 for line in self.replace_lines[index:])
        self.result = self.result[:len(self.result) - emitted]
        self.replace_lines = self.replace_lines[:index]
        self._refeed([REPLACE_MARKER] + tail)

    def _settle_pending(self) -> None:
        """Drop inert text seen between blocks; reject leftover marker-like lines."""
        stray = [line for line in self.pending_unrecognized if line.strip()]
        self.pending_unrecognized = []
        for line in stray:
            kind = _marker_kind(line)
            if kind is not None:
                raise UnresolvableMarker(
                    kind, f"Could not place the malformed marker line {line!r} in a complete block."
                )
        if stray:
            logger.debug("Ignoring %d line(s) outside SEARCH/REPLACE blocks", len(stray))


def reconstruct_blocks(
    diff_text: str, original_content: str, is_final: bool = False
) -> Tuple[str, List[AppliedBlock]]:
    """Like :func:`reconstruct`, also returning where each block was applied."""
    lines = diff_text.split("\n")
    trailing = None
    # An unfinished marker at the very end may still be growing.
    if lines[-1][:1] in ("<", "=", ">") and lines[-1] not in MARKERS:
        trailing = lines.pop()

    machine = DiffReconstructor(original_content)
    for line in lines:
        machine.process_line(line)
    # Once final, a mangled closing marker can still close the open block.
    if is_final and trailing is not None and machine.phase & Phase.REPLACE \
            and _LENIENT_REPLACE.match(trailing):
        machine.process_line(trailing)
    return machine.finish(is_final), machine.applied


def reconstruct(diff_text: str, original_content: str, is_final: bool = False) -> str:
    """Apply the SEARCH/REPLACE blocks in ``diff_text`` to ``original_content``.

    Args:
        diff_text: Cumulative diff text received so far.
        original_content: Full text of the file before the edit.
        is_final: ``True`` once the diff is complete.

    Returns:
        The best-effort new content, or the exact new content when final.

    Raises:
        ReconstructionError: on any structural or matching failure.
    """
    return reconstruct_blocks(diff_text, original_content, is_final)[0]
