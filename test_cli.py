#!/usr/bin/env python3
"""
Tests for the command-line entry point and output writing.

Network access is always mocked; the saved sample page stands in for the
live class reference.
"""

import os
import stat
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from ardour_emmylua.cli import main
from ardour_emmylua.exceptions import FetchError
from ardour_emmylua.fetcher import DEFAULT_REFERENCE_URL, fetch_reference
from ardour_emmylua.main import StubGenerator

SAMPLE_PATH = Path(__file__).parent / "sample_luaref.html"

ENV_VARS = [
    "ARDOUR_LUA_REFERENCE_URL",
    "ARDOUR_LUA_CLASS_DOC",
    "ARDOUR_LUA_FUNCTION_DOC",
    "ARDOUR_LUA_TIMEOUT",
    "ARDOUR_LUA_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _response(content: bytes = b"", error: Exception = None) -> MagicMock:
    response = MagicMock()
    response.content = content
    if error is not None:
        response.raise_for_status.side_effect = error
    return response


# --- Arguments ---

def test_missing_output_argument(tmp_path, capsys):
    """No output path: usage on stderr, exit code 2, nothing written."""
    with patch("ardour_emmylua.fetcher.requests.get") as get:
        assert main([]) == 2
    get.assert_not_called()
    assert "Please, specify output file" in capsys.readouterr().err
    assert list(tmp_path.iterdir()) == []


def test_too_many_output_arguments(tmp_path):
    first, second = tmp_path / "a.lua", tmp_path / "b.lua"
    assert main([str(first), str(second), "--html-file", str(SAMPLE_PATH)]) == 2
    assert not first.exists()
    assert not second.exists()


def test_invalid_log_level(tmp_path, monkeypatch):
    monkeypatch.setenv("ARDOUR_LUA_LOG_LEVEL", "LOUD")
    output = tmp_path / "ardour.lua"
    assert main([str(output), "--html-file", str(SAMPLE_PATH)]) == 2
    assert not output.exists()


# --- Successful runs ---

def test_saved_page(tmp_path):
    output = tmp_path / "ardour.lua"
    assert main([str(output), "--html-file", str(SAMPLE_PATH)]) == 0

    text = output.read_text(encoding="utf-8")
    assert text.startswith("--[[\n\nEmmyLua annotations for the Ardour Lua scripting interface.")
    assert (
        "\n--]]\n\n"
        "-- This is an AUTOMATICALLY generated file by web-scraping\n"
        f"-- {DEFAULT_REFERENCE_URL}\n\n"
        "---@class ARDOUR\n"
    ) in text
    # Bundled overrides are merged in
    assert "--- User comments:\n---The global Session object" in text
    assert "---@return ARDOUR.RouteList @the list of routes Iterate it with :iter().\n" in text
    assert [path.name for path in tmp_path.iterdir()] == ["ardour.lua"]


def test_fetched_page(tmp_path):
    output = tmp_path / "ardour.lua"
    url = "https://example.org/class_reference/"
    response = _response(SAMPLE_PATH.read_bytes())

    with patch("ardour_emmylua.fetcher.requests.get", return_value=response) as get:
        assert main([str(output), "--url", url, "--timeout", "5"]) == 0

    assert get.call_args.args == (url,)
    assert get.call_args.kwargs["timeout"] == 5.0
    assert f"-- {url}\n\n" in output.read_text(encoding="utf-8")


def test_override_files_from_environment(tmp_path, monkeypatch):
    class_doc = tmp_path / "classdoc.json"
    class_doc.write_text('{"Editor": "The editor window."}', encoding="utf-8")
    function_doc = tmp_path / "functiondoc.json"
    function_doc.write_text('{"Editor:access_action:0": "group:action group"}', encoding="utf-8")
    monkeypatch.setenv("ARDOUR_LUA_CLASS_DOC", str(class_doc))
    monkeypatch.setenv("ARDOUR_LUA_FUNCTION_DOC", str(function_doc))

    output = tmp_path / "ardour.lua"
    assert main([str(output), "--html-file", str(SAMPLE_PATH)]) == 0

    text = output.read_text(encoding="utf-8")
    assert "---\n--- User comments:\n---The editor window.\n---@class Editor\n" in text
    assert "---@param group string @(C type: std::string) action group\n" in text
    assert "The global Session object" not in text


# --- Failures ---

def test_network_failure(tmp_path, capsys):
    output = tmp_path / "ardour.lua"
    with patch(
        "ardour_emmylua.fetcher.requests.get",
        side_effect=requests.ConnectionError("connection refused")
    ):
        assert main([str(output)]) == 1
    assert not output.exists()
    assert "Failed to fetch" in capsys.readouterr().err


def test_http_error_status(tmp_path):
    output = tmp_path / "ardour.lua"
    response = _response(error=requests.HTTPError("404 Client Error"))
    with patch("ardour_emmylua.fetcher.requests.get", return_value=response):
        assert main([str(output)]) == 1
    assert not output.exists()


def test_structure_error_keeps_previous_output(tmp_path):
    """A page the extractor rejects must not clobber the last good output."""
    page = tmp_path / "broken.html"
    page.write_text(
        '<div id="luaref"><h3 id="ARDOUR:Foo" class="cls class">ARDOUR:Foo</h3></div>',
        encoding="utf-8"
    )
    output = tmp_path / "ardour.lua"
    output.write_text("previous", encoding="utf-8")

    assert main([str(output), "--html-file", str(page)]) == 1
    assert output.read_text(encoding="utf-8") == "previous"


def test_unreadable_override_file(tmp_path):
    output = tmp_path / "ardour.lua"
    missing = tmp_path / "missing.json"
    assert main([str(output), "--html-file", str(SAMPLE_PATH), "--class-doc", str(missing)]) == 1
    assert not output.exists()


def test_missing_html_file(tmp_path):
    output = tmp_path / "ardour.lua"
    assert main([str(output), "--html-file", str(tmp_path / "nope.html")]) == 1
    assert not output.exists()


# --- Fetcher and writer ---

def test_fetch_error_carries_url():
    with patch(
        "ardour_emmylua.fetcher.requests.get",
        side_effect=requests.Timeout("timed out")
    ):
        with pytest.raises(FetchError) as exc_info:
            fetch_reference("https://example.org/ref/", timeout=1)
    assert exc_info.value.url == "https://example.org/ref/"


def test_write_output_replaces_file(tmp_path):
    target = tmp_path / "out.lua"
    target.write_text("old", encoding="utf-8")
    StubGenerator.write_output(target, "new ✓\n")
    assert target.read_text(encoding="utf-8") == "new ✓\n"
    assert [path.name for path in tmp_path.iterdir()] == ["out.lua"]


@pytest.fixture
def umask_022():
    previous = os.umask(0o022)
    yield
    os.umask(previous)


def test_new_output_file_follows_umask(tmp_path, umask_022):
    target = StubGenerator.write_output(tmp_path / "ardour.lua", "x")
    assert stat.S_IMODE(target.stat().st_mode) == 0o644


def test_existing_output_file_keeps_its_mode(tmp_path, umask_022):
    target = tmp_path / "ardour.lua"
    target.write_text("old", encoding="utf-8")
    target.chmod(0o640)

    StubGenerator.write_output(target, "new")

    assert stat.S_IMODE(target.stat().st_mode) == 0o640
    assert target.read_text(encoding="utf-8") == "new"


def test_cli_output_is_world_readable(tmp_path, umask_022):
    output = tmp_path / "ardour.lua"
    assert main([str(output), "--html-file", str(SAMPLE_PATH)]) == 0
    assert stat.S_IMODE(output.stat().st_mode) == 0o644


def test_failed_write_leaves_no_partial_file(tmp_path):
    target = tmp_path / "out.lua"
    target.write_text("old", encoding="utf-8")
    with patch("ardour_emmylua.main.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(OSError):
            StubGenerator.write_output(target, "new")
    assert target.read_text(encoding="utf-8") == "old"
    assert os.listdir(tmp_path) == ["out.lua"]
