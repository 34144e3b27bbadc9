"""
Command Helpers

Typed shortcuts for common commands, layered on ConnectionPool.execute().

Writers (set, push, sadd, ...) propagate errors from the pool. The
plain readers get() and get_int() log the failure and fall back to an
empty string or 0, so callers that only want "the value, if any" do
not need their own error handling.
"""

import logging
from typing import Any, List

from .exceptions import RespoolError
from .network.pool import ConnectionPool
from .protocol.encoder import build_args

logger = logging.getLogger(__name__)

SET_CONDITIONS = ("NX", "XX")


def _first(reply: List[str]) -> str:
    return reply[0] if reply else ""


def _to_int(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        return 0


class KVCommands:
    """
    Command helpers bound to one pool.

    Usage:
        kv = KVCommands(pool)
        await kv.set("key3", 34323523)
        await kv.get_int("key3")          # 34323523
        await kv.lpush("list5", 4, 5)
        await kv.lrange("list5")          # ["5", "4"]
    """

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    async def ping(self) -> str:
        """Check the server is answering; returns "PONG"."""
        return _first(await self.pool.execute("PING"))

    async def set(
            self,
            key: str,
            value: Any,
            ex: int = 0,
            px: int = 0,
            condition: str = "",
    ) -> bool:
        """
        Store a value.

        Args:
            key: Key to store under
            value: Value, sent by its textual representation
            ex: Expiry in seconds (0 = none)
            px: Expiry in milliseconds (0 = none)
            condition: "NX" (only if absent), "XX" (only if present) or ""

        Returns:
            True if the value was stored, False if the condition failed.
        """
        args = build_args("SET", key, value)
        if ex > 0:
            args += ["EX", ex]
        if px > 0:
            args += ["PX", px]
        if condition:
            condition = condition.upper()
            if condition not in SET_CONDITIONS:
                raise ValueError(f"invalid SET condition: {condition!r}")
            args.append(condition)

        return _first(await self.pool.execute(*args)) == "OK"

    async def get(self, key: str) -> str:
        """Get a string value; "" when missing or when the command fails."""
        try:
            return _first(await self.pool.execute("GET", key))
        except RespoolError as exc:
            logger.warning(f"GET {key} failed: {exc}")
            return ""

    async def get_int(self, key: str) -> int:
        """Get an integer value; 0 when missing, not a number, or on failure."""
        return _to_int(await self.get(key))

    async def delete(self, *keys: str) -> int:
        """Delete keys; returns how many existed."""
        return _to_int(_first(await self.pool.execute("DEL", *keys)))

    async def exists(self, key: str) -> bool:
        return _first(await self.pool.execute("EXISTS", key)) == "1"

    async def push(self, key: str, *values: Any, right: bool = False) -> int:
        """
        Push values onto a list.

        Args:
            key: List key
            *values: Values pushed in order
            right: Push on the tail (RPUSH) instead of the head (LPUSH)

        Returns:
            Length of the list after the push.
        """
        if not values:
            raise ValueError("push needs at least one value")
        verb = "RPUSH" if right else "LPUSH"
        return _to_int(_first(await self.pool.execute(*build_args(verb, key, *values))))

    async def lpush(self, key: str, *values: Any) -> int:
        return await self.push(key, *values, right=False)

    async def rpush(self, key: str, *values: Any) -> int:
        return await self.push(key, *values, right=True)

    async def lpop(self, key: str) -> str:
        """Pop from the head of a list; "" when the list is empty."""
        return _first(await self.pool.execute("LPOP", key))

    async def rpop(self, key: str) -> str:
        """Pop from the tail of a list; "" when the list is empty."""
        return _first(await self.pool.execute("RPOP", key))

    async def lrange(self, key: str, start: int = 0, stop: int = -1) -> List[str]:
        return await self.pool.execute("LRANGE", key, start, stop)

    async def sadd(self, key: str, *members: Any) -> int:
        """Add members to a set; returns how many were new."""
        if not members:
            raise ValueError("sadd needs at least one member")
        return _to_int(_first(await self.pool.execute(*build_args("SADD", key, *members))))

    async def smembers(self, key: str) -> List[str]:
        return await self.pool.execute("SMEMBERS", key)
