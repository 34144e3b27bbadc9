"""
Request Encoder

Requests go out as multi-bulk arrays, each argument prefixed by its
byte length, so values may contain spaces or any other bytes:

    *3\r\n$3\r\nSET\r\n$3\r\nkey\r\n$11\r\nhello world\r\n
"""

from typing import Any, Iterable, List

CRLF = b"\r\n"


def to_arg(value: Any, encoding: str = "utf-8") -> bytes:
    """
    Format one argument by its natural textual representation.

    Bytes are sent verbatim, strings are encoded, integers and
    everything else go through str().
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode(encoding)
    return str(value).encode(encoding)


def build_args(verb: str, key: Any, *values: Any) -> List[Any]:
    """
    Build an argument vector from a verb, a key and positional values.

    Examples:
        >>> build_args("LPUSH", "list5", 4, 5)
        ['LPUSH', 'list5', 4, 5]
    """
    return [verb, key, *values]


def encode_command(args: Iterable[Any], encoding: str = "utf-8") -> bytes:
    """
    Encode an argument vector as a multi-bulk request.

    Raises:
        ValueError: If args is empty
    """
    parts = [to_arg(arg, encoding) for arg in args]
    if not parts:
        raise ValueError("empty command")

    out = [b"*%d" % len(parts), CRLF]
    for part in parts:
        out.append(b"$%d" % len(part))
        out.append(CRLF)
        out.append(part)
        out.append(CRLF)
    return b"".join(out)


def split_inline(command: str) -> List[str]:
    """
    Split an inline command line ("SET key3 34323523") into arguments.

    Raises:
        ValueError: If the command has no words
    """
    parts = command.split()
    if not parts:
        raise ValueError("empty command")
    return parts
