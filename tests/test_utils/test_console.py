from __future__ import annotations

import io
import sys
from typing import Generator
from unittest.mock import patch

import pytest
from rich.console import Console

from kiwiko.utils import console as console_module
from kiwiko.utils.console import (
    KIWIKO_THEME,
    _get_console,
    _should_use_color,
    colorize_update_type,
    confirm,
    format_flag,
    get_raw_console,
    print_error,
    print_info,
    print_section,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def reset_console() -> Generator[None, None, None]:
    """Clear the console singleton around every test."""
    reconfigure_console()
    yield
    reconfigure_console()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("CI", raising=False)


@pytest.fixture
def output(monkeypatch: pytest.MonkeyPatch) -> io.StringIO:
    """Route console output into a buffer without color codes."""
    buffer = io.StringIO()
    recording = Console(
        file=buffer,
        theme=KIWIKO_THEME,
        no_color=True,
        highlight=False,
        width=120,
    )
    monkeypatch.setattr(console_module, "_console", recording)
    return buffer


# ==============================================================================
# Theme and color detection
# ==============================================================================


@pytest.mark.unit
class TestTheme:
    """Tests for KIWIKO_THEME."""

    @pytest.mark.parametrize(
        "style_name",
        ["success", "error", "warning", "info", "dim", "highlight", "section"],
    )
    def test_theme_defines_style(self, style_name: str) -> None:
        assert style_name in KIWIKO_THEME.styles


@pytest.mark.unit
class TestShouldUseColor:
    """Tests for _should_use_color."""

    def test_no_color_disables(self, clean_env: None, monkeypatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")

        assert _should_use_color() is False

    def test_ci_disables(self, clean_env: None, monkeypatch) -> None:
        monkeypatch.setenv("CI", "true")

        assert _should_use_color() is False

    def test_tty_enables(self, clean_env: None) -> None:
        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color() is True

    def test_non_tty_disables(self, clean_env: None) -> None:
        with patch.object(sys.stdout, "isatty", return_value=False):
            assert _should_use_color() is False

    def test_isatty_errors_disable(self, clean_env: None) -> None:
        with patch.object(sys.stdout, "isatty", side_effect=OSError("closed")):
            assert _should_use_color() is False


@pytest.mark.unit
class TestConsoleLifecycle:
    """Tests for the console singleton."""

    def test_singleton(self) -> None:
        assert _get_console() is _get_console()
        assert get_raw_console() is _get_console()

    def test_reconfigure_creates_new_instance(self) -> None:
        first = get_raw_console()

        reconfigure_console()

        assert get_raw_console() is not first

    def test_no_color_respected_after_reconfigure(self, clean_env, monkeypatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        reconfigure_console()

        assert get_raw_console().no_color is True


# ==============================================================================
# Status messages
# ==============================================================================


@pytest.mark.unit
class TestStatusMessages:
    """Tests for the print_* helpers."""

    @pytest.mark.parametrize(
        "func,prefix",
        [
            (print_success, "[OK]"),
            (print_error, "[ERROR]"),
            (print_warning, "[WARNING]"),
            (print_info, "[INFO]"),
        ],
        ids=["success", "error", "warning", "info"],
    )
    def test_default_prefix(self, output: io.StringIO, func, prefix: str) -> None:
        func("something happened")

        assert f"{prefix} something happened" in output.getvalue()

    def test_custom_prefix(self, output: io.StringIO) -> None:
        print_success("done", prefix=">>")

        assert output.getvalue().strip() == ">> done"


@pytest.mark.unit
class TestPrintSection:
    """Tests for print_section."""

    def test_prints_title_and_bullets(self, output: io.StringIO) -> None:
        print_section("Optimization suggestions", ["first", "second"])

        text = output.getvalue()
        assert "Optimization suggestions" in text
        assert "• first" in text
        assert "• second" in text

    def test_empty_lines_show_placeholder(self, output: io.StringIO) -> None:
        print_section("Hints", [], empty="Nothing to report")

        assert "Nothing to report" in output.getvalue()

    def test_accepts_generators(self, output: io.StringIO) -> None:
        print_section("Numbers", (str(n) for n in range(3)))

        text = output.getvalue()
        assert "• 0" in text
        assert "• 2" in text


@pytest.mark.unit
class TestPrintTable:
    """Tests for print_table."""

    def test_empty_data_prints_nothing(self, output: io.StringIO) -> None:
        print_table([], title="Empty")

        assert output.getvalue() == ""

    def test_headers_from_first_row(self, output: io.StringIO) -> None:
        print_table(
            [
                {"Package": "react", "Latest": "18.2.0"},
                {"Package": "lodash", "Latest": "4.17.21"},
            ],
            title="Available Updates",
        )

        text = output.getvalue()
        assert "Available Updates" in text
        assert "Package" in text
        assert "react" in text
        assert "4.17.21" in text

    def test_explicit_headers_order_and_missing_values(
        self, output: io.StringIO
    ) -> None:
        print_table(
            [{"b": "second", "a": "first"}],
            headers=["a", "b", "c"],
        )

        text = output.getvalue()
        assert text.index("first") < text.index("second")

    def test_row_lines(self, output: io.StringIO) -> None:
        print_table([{"name": "x"}, {"name": "y"}], show_row_lines=True)

        text = output.getvalue()
        assert text.index("x") < text.index("y")
        assert "\u251c" in text


# ==============================================================================
# Interaction and markup
# ==============================================================================


@pytest.mark.unit
class TestConfirm:
    """Tests for confirm."""

    @pytest.mark.parametrize("answer", ["y", "yes", "YES", " s ", "si"])
    def test_yes_answers(self, output: io.StringIO, answer: str) -> None:
        with patch("builtins.input", return_value=answer):
            assert confirm("Install?") is True

    @pytest.mark.parametrize("answer", ["n", "no", "NO"])
    def test_no_answers(self, output: io.StringIO, answer: str) -> None:
        with patch("builtins.input", return_value=answer):
            assert confirm("Install?", default=True) is False

    @pytest.mark.parametrize("default", [True, False])
    def test_empty_and_unknown_use_default(
        self, output: io.StringIO, default: bool
    ) -> None:
        with patch("builtins.input", return_value=""):
            assert confirm("Install?", default=default) is default
        with patch("builtins.input", return_value="maybe"):
            assert confirm("Install?", default=default) is default

    @pytest.mark.parametrize("error", [KeyboardInterrupt, EOFError])
    def test_interrupt_returns_false(self, output: io.StringIO, error) -> None:
        with patch("builtins.input", side_effect=error):
            assert confirm("Install?", default=True) is False

    def test_prompt_suffix_reflects_default(self, output: io.StringIO) -> None:
        with patch("builtins.input", return_value="y"):
            confirm("Install Volta?", default=True)

        assert "Install Volta? [Y/n]:" in output.getvalue()


@pytest.mark.unit
class TestMarkupHelpers:
    """Tests for colorize_update_type and format_flag."""

    @pytest.mark.parametrize(
        "update_type,color",
        [("major", "red"), ("minor", "yellow"), ("patch", "green"), ("new", "cyan")],
    )
    def test_known_update_types(self, update_type: str, color: str) -> None:
        assert colorize_update_type(update_type) == f"[{color}]{update_type}[/{color}]"

    def test_case_insensitive_lookup_keeps_label(self) -> None:
        assert colorize_update_type("Major") == "[red]Major[/red]"

    def test_same_is_dimmed(self) -> None:
        assert colorize_update_type("same") == "[dim]same[/dim]"

    def test_unknown_update_type_unchanged(self) -> None:
        assert colorize_update_type("unknown") == "unknown"

    def test_format_flag_defaults(self) -> None:
        assert format_flag(True) == "[green]✓[/green]"
        assert format_flag(False) == "[red]✗[/red]"

    def test_format_flag_custom_labels(self) -> None:
        assert format_flag(False, yes="ok", no="bad") == "[red]bad[/red]"
