"""Protocol module for respool."""

from .decoder import ARRAY, BULK, ERROR, INTEGER, SIMPLE, read_reply, strip_terminator
from .encoder import build_args, encode_command, split_inline, to_arg

__all__ = [
    "SIMPLE",
    "ERROR",
    "INTEGER",
    "BULK",
    "ARRAY",
    "read_reply",
    "strip_terminator",
    "build_args",
    "encode_command",
    "split_inline",
    "to_arg",
]
