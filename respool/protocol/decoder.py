"""
Reply Decoder

Classifies and parses one reply by its type marker. The decoder holds
no state: it pulls lines through the read_line coroutine it is given,
so the same code runs against a socket or a list of canned lines.

Reply format (one CRLF-terminated line per step):
    +OK                 -> ["OK"]
    :42                 -> ["42"]
    $3 / 123            -> ["123"]
    $-1                 -> [""]
    $0 / (empty)        -> [""]
    *2 / $1 / a / $1 / b -> ["a", "b"]
    -ERR message        -> ServerError("ERR message")

Bulk payloads are delimited by the following line rather than by
counting bytes, so payloads containing CR or LF are not supported.
Arrays are flattened and every element is assumed to be a bulk string.
"""

from typing import Awaitable, Callable, List

from ..exceptions import ProtocolError, ServerError

SIMPLE = b"+"
ERROR = b"-"
INTEGER = b":"
BULK = b"$"
ARRAY = b"*"

ReadLine = Callable[[], Awaitable[bytes]]


def strip_terminator(raw: bytes) -> bytes:
    """
    Remove the trailing CRLF from a raw line.

    Raises:
        ProtocolError: If the line does not end with CR LF
    """
    if len(raw) < 2 or raw[-2:] != b"\r\n":
        raise ProtocolError("bad response line terminator")
    return raw[:-2]


def _parse_int(field: bytes) -> int:
    try:
        return int(field)
    except ValueError:
        raise ProtocolError("bad response") from None


def _decode(data: bytes, encoding: str) -> str:
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as exc:
        raise ProtocolError(f"bad response encoding: {exc}") from None


async def read_reply(read_line: ReadLine, encoding: str = "utf-8") -> List[str]:
    """
    Read and decode exactly one reply.

    Args:
        read_line: Coroutine function returning the next line, CRLF removed
        encoding: Text encoding of the payloads

    Returns:
        The reply as a flat list of strings.

    Raises:
        ServerError: The reply is an error reply
        ProtocolError: Unknown marker, empty line or unparsable length
    """
    line = await read_line()
    marker, rest = line[:1], line[1:]

    if marker == SIMPLE or marker == INTEGER:
        return [_decode(rest, encoding)]

    if marker == BULK:
        length = _parse_int(rest)
        if length < 0:
            return [""]
        payload = await read_line()
        if length == 0:
            return [""]
        return [_decode(payload, encoding)]

    if marker == ARRAY:
        count = _parse_int(rest)
        values: List[str] = []
        for _ in range(2 * count):
            item = await read_line()
            if item[:1] == BULK:
                # Length header of the next element
                continue
            values.append(_decode(item, encoding))
        return values

    if marker == ERROR:
        raise ServerError(_decode(rest, encoding))

    raise ProtocolError("bad response")
