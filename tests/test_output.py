"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- JSON, plain, and rich rendering of payloads
- Output file redirection
- Global instance management
"""

from __future__ import annotations

import json

import pytest

from respcache import output as output_module
from respcache.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("respcache.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("respcache.output._is_tty", lambda: True)


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager().format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert OutputManager().format == OutputFormat.RICH

    def test_auto_resolves_to_plain_when_tty_but_no_color(self, tty):
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_data("a1b2c3d4")
        captured = capfd.readouterr()
        assert captured.out == "a1b2c3d4\n"
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("cleared namespace")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "cleared namespace" in captured.err

    def test_error_prefix(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).error("boom")
        assert capfd.readouterr().err == "Error: boom\n"


class TestQuietAndVerbose:
    @pytest.mark.parametrize("method", ["info", "success", "suggest"])
    def test_quiet_suppresses(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        getattr(mgr, method)("hidden")
        assert capfd.readouterr().err == ""

    @pytest.mark.parametrize("method", ["warning", "error"])
    def test_quiet_does_not_suppress(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        getattr(mgr, method)("shown")
        assert "shown" in capfd.readouterr().err

    def test_debug_hidden_by_default(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).debug("cache hit")
        assert capfd.readouterr().err == ""

    def test_debug_shown_with_verbose(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
        mgr.debug("cache hit")
        assert capfd.readouterr().err == "[debug] cache hit\n"
        assert mgr.is_verbose


# ------------------------------------------------------------------ #
# Payload rendering
# ------------------------------------------------------------------ #


class TestJsonFormat:
    def test_dict_as_json(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON, no_color=True).format_response({"id": 1, "done": False})
        assert json.loads(capfd.readouterr().out) == {"id": 1, "done": False}

    def test_string_that_is_json(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON, no_color=True).format_response('[1, 2]')
        assert json.loads(capfd.readouterr().out) == [1, 2]

    def test_plain_string_passes_through(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON, no_color=True).format_response("<html/>")
        assert capfd.readouterr().out == "<html/>\n"


class TestPlainFormat:
    def test_dict_as_key_value(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response({"id": 1, "title": "x"})
        assert capfd.readouterr().out.splitlines() == ["id\t1", "title\tx"]

    def test_list_of_dicts_as_rows(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(
            [{"id": 1, "title": "a"}, {"id": 2, "title": "b"}]
        )
        assert capfd.readouterr().out.splitlines() == ["1\ta", "2\tb"]

    def test_list_of_primitives(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(["a", "b"])
        assert capfd.readouterr().out.splitlines() == ["a", "b"]


class TestRichFormat:
    def test_dict_produces_output(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).format_response({"title": "x"})
        out = capfd.readouterr().out
        assert "title" in out
        assert "x" in out

    def test_string_printed_without_markup(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).format_response("[bold]raw[/bold]")
        assert "[bold]raw[/bold]" in capfd.readouterr().out


class TestOutputFile:
    def test_format_response_writes_to_file(self, tmp_path, capfd, non_tty):
        outfile = tmp_path / "out.json"
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True, output_file=str(outfile))
        mgr.format_response({"id": 1})
        assert capfd.readouterr().out == ""
        assert json.loads(outfile.read_text(encoding="utf-8")) == {"id": 1}

    def test_print_data_appends(self, tmp_path, non_tty):
        outfile = tmp_path / "hashes.txt"
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, output_file=str(outfile))
        mgr.print_data("811c9dc5")
        mgr.print_data("e40c292c\n")
        assert outfile.read_text(encoding="utf-8") == "811c9dc5\ne40c292c\n"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self, non_tty):
        reset_output()
        assert isinstance(get_output(), OutputManager)
        assert get_output() is get_output()

    def test_set_output_is_used_by_convenience_functions(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        output_module.print_data("via global")
        output_module.warning("careful")
        captured = capfd.readouterr()
        assert captured.out == "via global\n"
        assert captured.err == "Warning: careful\n"
