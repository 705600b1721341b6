"""Tests for streamed file edit previews."""

import logging

import pytest

from streamedit.config import Config
from streamedit.content import ToolInvocation
from streamedit.diff import REPLACE_MARKER, SEARCH_MARKER, SEPARATOR_MARKER
from streamedit.edit_session import FileEditSession
from streamedit.errors import NoMatchFound

ORIGINAL = "def greet():\n    return 'hi'\n"
DIFF = (
    f"{SEARCH_MARKER}\n    return 'hi'\n{SEPARATOR_MARKER}\n"
    f"    return 'hello'\n{REPLACE_MARKER}\n"
)


def write(content, partial=True, path="src/new.py"):
    return ToolInvocation("write_to_file", {"path": path, "content": content}, partial=partial)


def replace(diff, partial=True, path="src/greet.py"):
    return ToolInvocation("replace_in_file", {"path": path, "diff": diff}, partial=partial)


class TestEditType:

    def test_missing_file_is_create(self):
        assert FileEditSession("a.py").edit_type == "create"

    def test_existing_file_is_modify(self):
        assert FileEditSession("a.py", "").edit_type == "modify"


class TestWriteToFile:

    def test_waits_for_path_and_content(self):
        session = FileEditSession("src/new.py")
        assert session.update(ToolInvocation("write_to_file", {})) is None
        assert session.update(ToolInvocation("write_to_file", {"path": "src/new.py"})) is None
        assert session.preview is None

    def test_final_content_gets_one_trailing_newline(self):
        session = FileEditSession("src/new.py")
        assert session.update(write("print(1)", partial=False)) == "print(1)\n"
        assert session.update(write("print(1)\n", partial=False)) == "print(1)\n"

    def test_partial_content_preview(self):
        session = FileEditSession("src/new.py")
        assert session.update(write("print(1)\npri</cont")) == "print(1)\npri"
        assert session.preview == "print(1)\npri"

    def test_code_fences_stripped(self):
        session = FileEditSession("src/new.py")
        assert session.update(write("```python\nprint(1)\n```", partial=False)) == "print(1)\n"

    def test_code_fences_kept_when_disabled(self):
        session = FileEditSession("src/new.py", config=Config(strip_code_fences=False))
        result = session.update(write("```\nx\n```", partial=False))
        assert result == "```\nx\n```\n"

    def test_invalid_chars_removed(self):
        session = FileEditSession("src/new.py")
        assert session.update(write("a\ufffdb", partial=False)) == "ab\n"


class TestHtmlUnescape:

    def test_unescaped_for_other_models(self):
        session = FileEditSession("a.py", config=Config(model_id="deepseek-chat"))
        assert session.update(write("if a &lt; b: pass", partial=False)) == "if a < b: pass\n"

    def test_kept_for_claude(self):
        session = FileEditSession("a.py", config=Config(model_id="claude-sonnet"))
        assert session.update(write("x = '&lt;'", partial=False)) == "x = '&lt;'\n"

    def test_never_without_config(self):
        session = FileEditSession("a.py")
        assert session.update(write("&amp;", partial=False)) == "&amp;\n"

    def test_applies_to_diffs(self):
        original = "if a < b:\n    pass\n"
        diff = f"{SEARCH_MARKER}\nif a &lt; b:\n{SEPARATOR_MARKER}\nif a &lt;= b:\n{REPLACE_MARKER}\n"
        session = FileEditSession("a.py", original, Config(html_unescape="always"))
        assert session.update(replace(diff, partial=False)) == "if a <= b:\n    pass\n"


class TestReplaceInFile:

    def test_final_diff(self):
        session = FileEditSession("src/greet.py", ORIGINAL)
        result = session.update(replace(DIFF, partial=False))
        assert result == "def greet():\n    return 'hello'\n"

    def test_streaming_diff(self):
        session = FileEditSession("src/greet.py", ORIGINAL)
        previews = [session.update(replace(DIFF[:end])) for end in range(0, len(DIFF), 7)]
        assert previews[0] == ""
        final = session.update(replace(DIFF, partial=False))
        assert final == "def greet():\n    return 'hello'\n"

    def test_half_streamed_closing_tag_ignored(self):
        session = FileEditSession("src/greet.py", ORIGINAL)
        result = session.update(replace(DIFF + "</di"))
        assert result == "def greet():\n    return 'hello'\n"

    def test_diff_creates_new_file(self):
        diff = f"{SEARCH_MARKER}\n{SEPARATOR_MARKER}\nx = 1\n{REPLACE_MARKER}\n"
        session = FileEditSession("new.py")
        assert session.update(replace(diff, partial=False, path="new.py")) == "x = 1\n"

    def test_errors_propagate(self):
        session = FileEditSession("src/greet.py", ORIGINAL)
        bad = f"{SEARCH_MARKER}\nnope\n{SEPARATOR_MARKER}\nx\n{REPLACE_MARKER}\n"
        with pytest.raises(NoMatchFound):
            session.update(replace(bad, partial=False))

    def test_other_tools_rejected(self):
        with pytest.raises(ValueError):
            FileEditSession("a").update(ToolInvocation("read_file", {"path": "a"}))


class TestFeedback:

    def test_feedback_carries_original_content(self):
        session = FileEditSession("src\\greet.py", ORIGINAL)
        message = session.feedback(NoMatchFound("nope\n"))
        assert message.startswith("The tool execution failed")
        assert "<error>" in message
        assert '<file_content path="src/greet.py">' in message
        assert ORIGINAL in message
        assert "nope" in message


class TestBlockReport:

    def test_blocks_follow_the_latest_update(self):
        session = FileEditSession("src/greet.py", ORIGINAL)
        session.update(replace(f"{SEARCH_MARKER}\n    return 'hi'\n"))
        assert session.blocks == []
        session.update(replace(DIFF, partial=False))
        assert [(b.first_line, b.strategy) for b in session.blocks] == [(2, "exact")]

    def test_loose_match_is_logged(self, caplog, monkeypatch):
        monkeypatch.setattr(logging.getLogger("streamedit"), "propagate", True)
        loose = DIFF.replace("    return 'hi'\n", "    return 'hi'   \n", 1)
        session = FileEditSession("src/greet.py", ORIGINAL)
        with caplog.at_level(logging.INFO, logger="streamedit.edit"):
            session.update(replace(loose, partial=False))
        assert session.blocks[0].strategy == "line_trimmed"
        assert "[src/greet.py] 1 of 1 block(s) needed a fallback match" in caplog.text

    def test_content_edits_have_no_blocks(self):
        session = FileEditSession("src/new.py")
        session.update(write("x = 1", partial=False))
        assert session.blocks == []
