"""Tests for error formatting and logger setup."""

import logging

from streamedit.errors import (
    ConfigError,
    IncompleteAtFinalization,
    InvalidStateTransition,
    NoMatchFound,
    NonMonotonicMatch,
    ReconstructionError,
    StreamEditError,
    UnresolvableMarker,
    format_diff_error,
    format_tool_error,
)
from streamedit.logger import (
    DEFAULT_LOG_FILE,
    EditLogAdapter,
    _resolve_log_path,
    edit_logger,
    level_for,
    setup_logger,
)


class TestErrorHierarchy:

    def test_reconstruction_errors(self):
        errors = [
            InvalidStateTransition("Idle", "Replace"),
            UnresolvableMarker("SEARCH", "detail"),
            NoMatchFound("x\n"),
            NonMonotonicMatch("x\n", 0, 5),
            IncompleteAtFinalization("Search"),
        ]
        for error in errors:
            assert isinstance(error, ReconstructionError)
            assert isinstance(error, StreamEditError)

    def test_config_error_is_not_reconstruction_error(self):
        error = ConfigError("verbose", "bad")
        assert not isinstance(error, ReconstructionError)
        assert str(error) == "verbose: bad"

    def test_messages(self):
        assert "Idle → Search" in str(InvalidStateTransition("Search", "Search"))
        assert str(UnresolvableMarker("=======", "Oops.")) == (
            "Malformed SEARCH/REPLACE block: missing valid ======= marker. Oops."
        )
        assert "does not match anything in the file" in str(NoMatchFound("foo\n"))
        assert "offset 0" in str(NonMonotonicMatch("foo\n", 0, 10))
        assert "(Replace)" in str(IncompleteAtFinalization("Replace"))


class TestFormatting:

    def test_tool_error_envelope(self):
        assert format_tool_error("boom") == (
            "The tool execution failed with the following error:\n<error>\nboom\n</error>"
        )

    def test_diff_error_for_new_file(self):
        message = format_diff_error(NoMatchFound("a\n"), "new.py", None)
        assert '<file_content path="new.py">\n\n</file_content>' in message
        assert "write_to_file tool as a fallback" in message


class TestLogger:

    def test_verbosity_levels(self):
        assert level_for(0) == logging.WARNING
        assert level_for(1) == logging.INFO
        assert level_for(2) == logging.DEBUG
        assert level_for(7) == logging.DEBUG
        assert level_for(-1) == logging.WARNING

    def test_console_only_follows_verbosity(self):
        logger = setup_logger(1, name="streamedit.test.info")
        assert logger.level == logging.INFO
        assert logger.propagate is False
        assert len(logger.handlers) == 1

    def test_quiet_by_default(self):
        logger = setup_logger(name="streamedit.test.quiet")
        assert logger.level == logging.WARNING

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logger(name="streamedit.test.repeat")
        logger = setup_logger(name="streamedit.test.repeat")
        assert len(logger.handlers) == 1

    def test_file_records_debug_while_console_stays_quiet(self, tmp_path):
        log_path = tmp_path / "logs" / "run.log"
        logger = setup_logger(0, log_file=str(log_path), name="streamedit.test.file")
        console_handler, file_handler = logger.handlers
        assert console_handler.level == logging.WARNING
        assert file_handler.level == logging.DEBUG

        logger.debug("block matched loosely")
        file_handler.flush()
        assert "block matched loosely" in log_path.read_text(encoding="utf-8")
        setup_logger(name="streamedit.test.file")

    def test_resolve_log_path(self, tmp_path):
        assert _resolve_log_path(False) is None
        assert _resolve_log_path(None) is None
        assert _resolve_log_path("") is None
        assert _resolve_log_path(True) == DEFAULT_LOG_FILE
        assert _resolve_log_path(tmp_path / "x.log") == tmp_path / "x.log"


class TestEditLogger:

    def test_prefixes_target_path(self):
        adapter = edit_logger("src/app.py")
        assert isinstance(adapter, EditLogAdapter)
        msg, kwargs = adapter.process("applied %d block(s)", {})
        assert msg == "[src/app.py] applied %d block(s)"
        assert kwargs == {}

    def test_records_reach_the_streamedit_tree(self, caplog, monkeypatch):
        monkeypatch.setattr(logging.getLogger("streamedit"), "propagate", True)
        adapter = edit_logger("a.py")
        with caplog.at_level(logging.INFO, logger="streamedit.edit"):
            adapter.info("done")
        assert "[a.py] done" in caplog.text
