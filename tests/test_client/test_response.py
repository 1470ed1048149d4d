"""Tests for response unwrapping and display."""

from __future__ import annotations

import json

import httpx
import pytest

from respcache.client.response import extract_response_data, format_api_response
from respcache.output import OutputFormat, OutputManager, set_output


class TestExtractResponseData:
    def test_json(self) -> None:
        assert extract_response_data(httpx.Response(200, json={"a": 1})) == {"a": 1}

    def test_text(self) -> None:
        assert extract_response_data(httpx.Response(200, text="<html></html>")) == "<html></html>"

    def test_empty(self) -> None:
        assert extract_response_data(httpx.Response(204)) is None


class TestFormatApiResponse:
    def test_json_payload(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_output(OutputManager(format=OutputFormat.JSON, no_color=True))
        format_api_response({"id": 1})
        assert json.loads(capsys.readouterr().out) == {"id": 1}

    def test_empty_payload_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        format_api_response(None)
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "empty response" in captured.err
