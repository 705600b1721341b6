"""Structured error types for stream interpretation and diff reconstruction."""

from typing import Optional


class StreamEditError(Exception):
    """Base error for all streamedit operations."""
    pass


class ConfigError(StreamEditError):
    """Raised when a configuration value or file cannot be used."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"{key}: {message}")


class ReconstructionError(StreamEditError):
    """A SEARCH/REPLACE diff could not be applied to the original content.

    Always terminal for the current reconstruction attempt. ``search_text``
    holds the offending SEARCH block when one is involved.
    """

    def __init__(self, message: str, search_text: Optional[str] = None):
        self.search_text = search_text
        super().__init__(message)


class InvalidStateTransition(ReconstructionError):
    """A marker line arrived in a state that does not accept it."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Invalid state transition from {current} to {requested}.\n"
            "Valid transitions are:\n"
            "- Idle → Search (<<<<<<< SEARCH)\n"
            "- Search → Replace (=======)\n"
            "- Replace → Idle (>>>>>>> REPLACE)"
        )


class UnresolvableMarker(ReconstructionError):
    """A marker was missing or mangled beyond what repair can recover."""

    def __init__(self, marker: str, detail: str):
        self.marker = marker
        super().__init__(f"Malformed SEARCH/REPLACE block: missing valid {marker} marker. {detail}")


class NoMatchFound(ReconstructionError):
    """None of the matching strategies located the SEARCH text."""

    def __init__(self, search_text: str):
        super().__init__(
            f"The SEARCH block:\n{search_text.rstrip()}\n...does not match anything in the file.",
            search_text=search_text,
        )


class NonMonotonicMatch(ReconstructionError):
    """A SEARCH block matched content before the previous block's end."""

    def __init__(self, search_text: str, start: int, last_processed: int):
        self.start = start
        self.last_processed = last_processed
        super().__init__(
            f"The SEARCH block:\n{search_text.rstrip()}\n...matched content at offset {start}, "
            f"before the end of the previous edit (offset {last_processed}). "
            "SEARCH/REPLACE blocks must appear in the order they occur in the file.",
            search_text=search_text,
        )


class IncompleteAtFinalization(ReconstructionError):
    """The diff ended while a SEARCH/REPLACE block was still open."""

    def __init__(self, state: str):
        self.state = state
        super().__init__(
            f"File processing incomplete - SEARCH/REPLACE operation still active ({state}) during finalization"
        )


def format_tool_error(message: str) -> str:
    """Wrap an error message in the envelope the model sees for failed tools."""
    return f"The tool execution failed with the following error:\n<error>\n{message}\n</error>"


def format_diff_error(error: Exception, rel_path: str, original_content: Optional[str]) -> str:
    """Build corrective feedback for a failed diff edit.

    The file is assumed reverted, so the untouched original content is handed
    back to the model as the new baseline.
    """
    path = rel_path.replace("\\", "/")
    return format_tool_error(
        f"{error}\n\n"
        "This is likely because the SEARCH block content doesn't match exactly with what's in the file, "
        "or if you used multiple SEARCH/REPLACE blocks they may not have been in the order they appear in the file.\n\n"
        f"The file was reverted to its original state:\n\n"
        f"<file_content path=\"{path}\">\n{original_content or ''}\n</file_content>\n\n"
        "Now that you have the latest state of the file, try the operation again with fewer, "
        "more precise SEARCH blocks. For large files especially, limit yourself to <5 SEARCH/REPLACE "
        "blocks at a time, then wait for the result before making additional edits.\n"
        "(If you run into this error 3 times in a row, you may use the write_to_file tool as a fallback.)"
    )
