"""
Tests for the reply decoder

These tests verify read_reply() against canned lines:
- each reply marker (+ : $ * -)
- nil and empty bulk strings
- malformed replies

Run with: python -m pytest tests/test_decoder.py -v
"""

import pytest

from respool.exceptions import ProtocolError, ServerError
from respool.protocol.decoder import read_reply, strip_terminator
from tests.conftest import LineSource


@pytest.mark.asyncio
class TestSimpleReplies:
    """Test single-line replies."""

    async def test_simple_string(self):
        assert await read_reply(LineSource(b"+OK").read_line) == ["OK"]

    async def test_simple_string_with_spaces(self):
        assert await read_reply(LineSource(b"+hello there").read_line) == ["hello there"]

    async def test_integer_kept_as_text(self):
        assert await read_reply(LineSource(b":42").read_line) == ["42"]
        assert await read_reply(LineSource(b":-3").read_line) == ["-3"]

    async def test_error_reply(self):
        with pytest.raises(ServerError) as exc_info:
            await read_reply(LineSource(b"-ERR unknown command 'FOO'").read_line)
        assert exc_info.value.message == "ERR unknown command 'FOO'"


@pytest.mark.asyncio
class TestBulkReplies:
    """Test bulk string replies."""

    async def test_bulk_string(self):
        source = LineSource(b"$3", b"123")
        assert await read_reply(source.read_line) == ["123"]
        assert source.remaining == 0

    async def test_bulk_round_trip(self):
        raw = b"$3\r\n123\r\n"
        lines = [strip_terminator(part + b"\n") for part in raw.split(b"\n") if part]
        assert await read_reply(LineSource(*lines).read_line) == ["123"]

    async def test_nil_bulk(self):
        source = LineSource(b"$-1", b"+next")
        assert await read_reply(source.read_line) == [""]
        # Nothing beyond the header belongs to a nil reply
        assert source.remaining == 1

    async def test_empty_bulk_consumes_payload_line(self):
        source = LineSource(b"$0", b"", b"+next")
        assert await read_reply(source.read_line) == [""]
        assert await read_reply(source.read_line) == ["next"]

    async def test_bad_length(self):
        with pytest.raises(ProtocolError):
            await read_reply(LineSource(b"$abc").read_line)


@pytest.mark.asyncio
class TestArrayReplies:
    """Test array replies, flattened into one list."""

    async def test_array_of_bulks(self):
        source = LineSource(b"*2", b"$1", b"5", b"$1", b"4")
        assert await read_reply(source.read_line) == ["5", "4"]
        assert source.remaining == 0

    async def test_empty_array(self):
        source = LineSource(b"*0", b"+next")
        assert await read_reply(source.read_line) == []
        assert source.remaining == 1

    async def test_nil_array(self):
        assert await read_reply(LineSource(b"*-1").read_line) == []

    async def test_array_keeps_empty_elements(self):
        source = LineSource(b"*2", b"$0", b"", b"$1", b"x")
        assert await read_reply(source.read_line) == ["", "x"]

    async def test_bad_count(self):
        with pytest.raises(ProtocolError):
            await read_reply(LineSource(b"*two").read_line)


@pytest.mark.asyncio
class TestMalformedReplies:
    """Test replies the decoder must reject."""

    async def test_unknown_marker(self):
        with pytest.raises(ProtocolError, match="bad response"):
            await read_reply(LineSource(b"?what").read_line)

    async def test_empty_line(self):
        with pytest.raises(ProtocolError):
            await read_reply(LineSource(b"").read_line)

    async def test_undecodable_payload(self):
        with pytest.raises(ProtocolError):
            await read_reply(LineSource(b"+\xff\xfe").read_line)


class TestStripTerminator:
    """Test CRLF handling."""

    def test_strips_crlf(self):
        assert strip_terminator(b"+OK\r\n") == b"+OK"

    def test_empty_line_with_crlf(self):
        assert strip_terminator(b"\r\n") == b""

    def test_missing_cr(self):
        with pytest.raises(ProtocolError, match="terminator"):
            strip_terminator(b"+OK\n")

    def test_too_short(self):
        with pytest.raises(ProtocolError):
            strip_terminator(b"\n")
