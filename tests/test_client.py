"""
Tests for the interactive client helpers

Run with: python -m pytest tests/test_client.py -v
"""

from respool.client import format_reply, parse_args
from respool.config.settings import settings


class TestFormatReply:
    """Test reply rendering."""

    def test_single_value(self):
        assert format_reply(["OK"]) == "OK"

    def test_nil(self):
        assert format_reply([""]) == "(nil)"

    def test_empty_list(self):
        assert format_reply([]) == "(empty list)"

    def test_list(self):
        assert format_reply(["5", "4"]) == '1) "5"\n2) "4"'


class TestParseArgs:
    """Test command line parsing."""

    def test_defaults(self):
        args = parse_args([])
        assert args.host == settings.HOST
        assert args.port == settings.PORT
        assert args.max_conns == settings.MAX_CONN_NUM

    def test_overrides(self):
        args = parse_args(["--port", "7000", "--db", "2", "--max-conns", "8", "--timeout", "1.5"])
        assert args.port == 7000
        assert args.db == 2
        assert args.max_conns == 8
        assert args.timeout == 1.5
