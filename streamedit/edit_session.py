"""Preview and apply file edits as their tool invocations stream in."""

from typing import List, Optional

from .content import ToolInvocation
from .diff import AppliedBlock, reconstruct_blocks
from .diff_utils import fuzzy_blocks
from .errors import format_diff_error
from .logger import edit_logger
from .text_utils import (
    fix_model_html_escaping,
    remove_invalid_chars,
    remove_partial_closing_tag,
    strip_code_fences,
)
from .tools import FILE_EDIT_TOOLS

__all__ = ["FileEditSession"]


class FileEditSession:
    """Tracks one ``write_to_file`` or ``replace_in_file`` call for one file.

    ``original_content`` is ``None`` when the file does not exist yet.
    ``config`` is a :class:`streamedit.config.Config`; without one the
    defaults apply (fences stripped, no HTML unescaping).
    """

    def __init__(self, path: str, original_content: Optional[str] = None, config=None):
        self.path = path
        self.original_content = original_content
        self.config = config
        self.preview: Optional[str] = None
        self.blocks: List[AppliedBlock] = []
        self.log = edit_logger(path)

    @property
    def edit_type(self) -> str:
        return "create" if self.original_content is None else "modify"

    def update(self, invocation: ToolInvocation) -> Optional[str]:
        """Rebuild the preview from the invocation's current parameters.

        Returns ``None`` until the invocation carries a path and either a
        ``diff`` or ``content`` value.

        Raises:
            ValueError: for a tool that does not edit files.
            ReconstructionError: when the diff cannot be applied.
        """
        if invocation.name not in FILE_EDIT_TOOLS:
            raise ValueError(f"{invocation.name} does not edit files")
        if not invocation.get("path"):
            return None

        final = not invocation.partial
        diff = invocation.get("diff")
        content = invocation.get("content")

        if diff is not None:
            diff = self._clean(remove_partial_closing_tag("diff", diff, not final))
            self.preview, self.blocks = reconstruct_blocks(diff, self.original_content or "", final)
        elif content is not None:
            content = self._clean(remove_partial_closing_tag("content", content, not final))
            if self._strip_fences():
                content = strip_code_fences(content)
            if final and not content.endswith("\n"):
                content += "\n"
            self.preview = content
        else:
            return None

        if final:
            loose = fuzzy_blocks(self.blocks)
            if loose:
                self.log.info("%d of %d block(s) needed a fallback match", len(loose), len(self.blocks))
            self.log.debug("Completed %s edit", self.edit_type)
        return self.preview

    def feedback(self, error: Exception) -> str:
        """Corrective message for the model after a failed edit."""
        return format_diff_error(error, self.path, self.original_content)

    def _strip_fences(self) -> bool:
        if self.config is None:
            return True
        return self.config.strip_code_fences

    def _clean(self, text: str) -> str:
        if self.config is not None and self.config.should_unescape_html():
            text = fix_model_html_escaping(text)
        return remove_invalid_chars(text)
