from __future__ import annotations

import io
import logging
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest

from kiwiko.utils import logger as logger_module
from kiwiko.utils.logger import (
    ROOT_LOGGER_NAME,
    ColoredFormatter,
    _stream_supports_color,
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
    verbosity_to_level,
)


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Restore the kiwiko root logger after each test."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(root.handlers)
    level = root.level
    propagate = root.propagate
    configured = logger_module._logging_configured
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    root.propagate = propagate
    logger_module._logging_configured = configured


def _record(level: int = logging.WARNING, msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="kiwiko.test",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.mark.unit
class TestGetLogger:
    """Tests for get_logger."""

    @pytest.mark.parametrize("name", [None, "", "kiwiko"])
    def test_root_logger(self, name) -> None:
        assert get_logger(name).name == "kiwiko"

    def test_bare_name_is_namespaced(self) -> None:
        assert get_logger("registry").name == "kiwiko.registry"

    def test_qualified_name_kept(self) -> None:
        assert get_logger("kiwiko.core.ranges").name == "kiwiko.core.ranges"

    def test_same_instance(self) -> None:
        assert get_logger("http") is get_logger("kiwiko.http")


@pytest.mark.unit
class TestVerbosityToLevel:
    """Tests for verbosity_to_level."""

    @pytest.mark.parametrize(
        "verbose,level",
        [(-1, logging.WARNING), (0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
    )
    def test_mapping(self, verbose: int, level: int) -> None:
        assert verbosity_to_level(verbose) == level


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging and disable_logging."""

    def test_installs_single_handler(self) -> None:
        stream = io.StringIO()

        setup_logging(level=logging.INFO, stream=stream)
        setup_logging(level=logging.INFO, stream=stream)

        root = logging.getLogger(ROOT_LOGGER_NAME)
        assert len(root.handlers) == 1
        assert root.propagate is False
        assert is_logging_configured() is True

    def test_messages_reach_stream(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        stream = io.StringIO()
        setup_logging(level=logging.INFO, stream=stream)

        get_logger("analyzer").info("Analyzing %s", "demo@1.0.0")
        get_logger("analyzer").debug("hidden")

        output = stream.getvalue()
        assert "INFO: Analyzing demo@1.0.0" in output
        assert "hidden" not in output

    def test_verbose_format_includes_logger_name(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        stream = io.StringIO()
        setup_logging(level=logging.DEBUG, verbose=True, stream=stream)

        get_logger("registry").debug("fetching")

        assert "kiwiko.registry - DEBUG - fetching" in stream.getvalue()

    def test_disable_logging(self) -> None:
        stream = io.StringIO()
        setup_logging(level=logging.INFO, stream=stream)

        disable_logging()
        get_logger("analyzer").warning("silenced")

        assert stream.getvalue() == ""
        assert is_logging_configured() is False


@pytest.mark.unit
class TestColoredFormatter:
    """Tests for ColoredFormatter."""

    def test_plain_when_color_disabled(self) -> None:
        formatter = ColoredFormatter("%(levelname)s: %(message)s", use_color=False)

        assert formatter.format(_record()) == "WARNING: hello"

    def test_colors_level_on_tty(self) -> None:
        formatter = ColoredFormatter("%(levelname)s: %(message)s")
        record = _record(logging.ERROR)

        with patch.object(logger_module, "_stream_supports_color", return_value=True):
            formatted = formatter.format(record)

        assert formatted.startswith("\033[31mERROR\033[0m")
        assert record.levelname == "ERROR"


@pytest.mark.unit
class TestStreamSupportsColor:
    """Tests for _stream_supports_color."""

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        stream = MagicMock()
        stream.isatty.return_value = True

        assert _stream_supports_color(stream) is False

    def test_tty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("CI", raising=False)
        stream = MagicMock()
        stream.isatty.return_value = True

        assert _stream_supports_color(stream) is True

    def test_closed_stream(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("CI", raising=False)
        stream = MagicMock()
        stream.isatty.side_effect = ValueError("closed")

        assert _stream_supports_color(stream) is False
