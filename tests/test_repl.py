"""Tests for the interactive chat loop."""

from unittest.mock import AsyncMock, MagicMock, patch

import click
import pytest

from toolrelay.errors import ToolInvocationError
from toolrelay.repl import ChatREPL


def _make_mock_client():
    client = MagicMock()
    client.config.model = "gemini-2.0-flash"
    client.catalog.names = ["get_dataset_metadata"]
    client.process_query = AsyncMock(return_value="answer")
    return client


def _lines(*lines):
    """A read_line callable that returns each line, then aborts like EOF."""
    it = iter(lines)

    def read_line():
        try:
            return next(it)
        except StopIteration:
            raise click.Abort()
    return read_line


@pytest.mark.asyncio
async def test_quit_stops_loop():
    client = _make_mock_client()
    repl = ChatREPL(client, read_line=_lines("  QuIt  ", "never read"))
    await repl.run()
    client.process_query.assert_not_awaited()


@pytest.mark.asyncio
async def test_eof_stops_loop():
    client = _make_mock_client()
    repl = ChatREPL(client, read_line=_lines("hello"))
    await repl.run()
    client.process_query.assert_awaited_once_with("hello")
    assert repl.handled == 1


@pytest.mark.asyncio
async def test_blank_lines_skipped():
    client = _make_mock_client()
    repl = ChatREPL(client, read_line=_lines("", "   ", "quit"))
    await repl.run()
    client.process_query.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_query_reported_and_loop_continues():
    client = _make_mock_client()
    client.process_query.side_effect = [
        ToolInvocationError("get_dataset_metadata", "exploded"),
        "second answer",
    ]
    repl = ChatREPL(client, read_line=_lines("first", "second", "quit"))

    with patch("toolrelay.repl.render_error") as mock_error, \
            patch("toolrelay.repl.render_response") as mock_response:
        await repl.run()

    assert "exploded" in mock_error.call_args.args[0]
    mock_response.assert_called_once_with("second answer")
    assert repl.failed == 1
    assert repl.handled == 1


@pytest.mark.asyncio
async def test_unexpected_error_does_not_end_loop():
    client = _make_mock_client()
    client.process_query.side_effect = [KeyError("boom"), "fine"]
    repl = ChatREPL(client, read_line=_lines("a", "b", "quit"))

    with patch("toolrelay.repl.render_error") as mock_error:
        await repl.run()

    assert mock_error.call_args.args[0].startswith("KeyError")
    assert repl.handled == 1


@pytest.mark.asyncio
async def test_ctrl_c_at_prompt_stops_loop():
    client = _make_mock_client()
    reads = iter(["hello"])

    def read_line():
        for line in reads:
            return line
        raise KeyboardInterrupt()

    repl = ChatREPL(client, read_line=read_line)
    await repl.run()

    client.process_query.assert_awaited_once_with("hello")
    assert repl.handled == 1
