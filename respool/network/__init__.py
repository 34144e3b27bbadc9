"""Network module for respool."""

from .connection import Connection, ConnState
from .pool import ConnectionPool, new_pool

__all__ = ["Connection", "ConnState", "ConnectionPool", "new_pool"]
