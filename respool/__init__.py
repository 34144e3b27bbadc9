"""
respool: Pooled asyncio client for RESP key-value stores

A small client for Redis-style servers: a bounded pool of persistent
TCP connections plus the reply decoder and request encoder needed to
issue commands and read their replies.
"""

from .commands import KVCommands
from .config.settings import PoolConfig
from .exceptions import (
    ConnectFailed,
    OperationTimeout,
    PoolClosed,
    PoolExhausted,
    ProtocolError,
    ReadFailed,
    RespoolError,
    ServerError,
    WriteFailed,
)
from .network.connection import Connection
from .network.pool import ConnectionPool, new_pool

__version__ = "1.0.0"

__all__ = [
    "Connection",
    "ConnectionPool",
    "KVCommands",
    "PoolConfig",
    "new_pool",
    "RespoolError",
    "ConnectFailed",
    "WriteFailed",
    "ReadFailed",
    "ProtocolError",
    "ServerError",
    "OperationTimeout",
    "PoolExhausted",
    "PoolClosed",
]
