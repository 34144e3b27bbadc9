"""
Connection Pool Module

A bounded pool of persistent connections shared by many concurrent
tasks. Two pieces of shared state are kept, each changed only in
stretches with no await (so every change is atomic on the event loop),
with one asyncio.Condition to wake tasks waiting for them:

- the idle queue: open connections waiting for a caller,
  at most ``idle_conn_num`` long
- the outstanding counter: every open (or opening) connection, idle
  or checked out, at most ``max_conn_num``

A connection moves RESERVED -> IDLE <-> CHECKED_OUT -> CLOSED. Once
handed out by acquire() it belongs to that caller alone until it comes
back through release() or close_conn().
"""

import asyncio
import logging
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Any, AsyncIterator, Deque, List, Optional, Set

from ..config.settings import PoolConfig, settings
from ..exceptions import ConnectFailed, PoolClosed, PoolExhausted, ServerError
from ..protocol.encoder import split_inline
from .connection import Connection

logger = logging.getLogger(__name__)


class ConnectionPool:
    """
    Pool of connections to one server and database.

    Usage:
        pool = await ConnectionPool.create("127.0.0.1", 6379, database=0)
        await pool.execute("SET key3 34323523")
        reply = await pool.execute("GET", "key3")   # ["34323523"]
        await pool.close()

    Backpressure: when max_conn_num connections are open and none is
    idle, acquire() waits until one is released or closed. The wait is
    unbounded unless config.acquire_timeout is set, and it can always be
    cancelled.

    Attributes:
        host: Server host
        port: Server port
        database: Database index every handed-out connection has selected
        config: Pool sizing and timeouts
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            database: int = None,
            config: PoolConfig = None,
    ):
        """
        Initialize an empty pool. Use create() to also open the
        minimum number of connections.
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.database = database if database is not None else settings.DATABASE
        self.config = config if config is not None else PoolConfig()

        self._idle: Deque[Connection] = deque()
        self._checked_out: Set[Connection] = set()
        self._outstanding = 0
        self._cond = asyncio.Condition()
        self._closed = False

    @classmethod
    async def create(
            cls,
            host: str = None,
            port: int = None,
            database: int = None,
            config: PoolConfig = None,
    ) -> "ConnectionPool":
        """
        Create a pool and eagerly open config.min_conn_num connections.

        Partial success is fine; the pool only fails when it was asked
        for at least one connection and could open none.

        Raises:
            ConnectFailed: No connection could be established
        """
        pool = cls(host, port, database, config)
        await pool._fill()
        return pool

    async def _fill(self) -> None:
        wanted = self.config.min_conn_num
        for i in range(wanted):
            try:
                conn = await self._open()
            except ConnectFailed as exc:
                logger.warning(f"Eager connection {i + 1}/{wanted} failed: {exc}")
                continue
            self._outstanding += 1
            self._idle.append(conn)

        if wanted > 0 and not self._idle:
            raise ConnectFailed(f"cannot connect to server {self.host}:{self.port}")
        logger.info(
            f"Pool ready for {self.host}:{self.port}/{self.database} "
            f"with {len(self._idle)} idle connection(s)"
        )

    async def _open(self) -> Connection:
        return await Connection.open(
            self.host,
            self.port,
            database=self.database,
            timeout=self.config.timeout,
            read_buffer_size=self.config.read_buffer_size,
            encoding=self.config.encoding,
        )

    async def _checkout(self) -> Optional[Connection]:
        """
        Pop an idle connection, or reserve a slot and return None.

        Waits while the pool is at max_conn_num with nothing idle.
        """
        loop = asyncio.get_running_loop()
        deadline = None
        if self.config.acquire_timeout > 0:
            deadline = loop.time() + self.config.acquire_timeout

        async with self._cond:
            while True:
                if self._closed:
                    raise PoolClosed("pool is closed")

                if self._idle:
                    conn = self._idle.popleft()
                    self._checked_out.add(conn)
                    return conn

                if self._outstanding < self.config.max_conn_num:
                    self._outstanding += 1
                    return None

                if deadline is None:
                    await self._cond.wait()
                    continue

                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise PoolExhausted(
                        f"no connection available within {self.config.acquire_timeout}s "
                        f"(max_conn_num={self.config.max_conn_num})"
                    )
                try:
                    await asyncio.wait_for(self._cond.wait(), timeout=remaining)
                except asyncio.TimeoutError:
                    pass

    async def _free_slot(self) -> None:
        self._outstanding -= 1
        async with self._cond:
            self._cond.notify_all()

    async def acquire(self) -> Connection:
        """
        Check a connection out of the pool.

        1. Reuse an idle connection, selecting the pool's database on it
           if it has drifted to another one.
        2. Otherwise open a new connection if a slot is free.
        3. Otherwise wait for a connection to be released or closed.

        Raises:
            ConnectFailed: Dialling, or re-selecting the database, failed
            PoolExhausted: acquire_timeout expired while waiting
            PoolClosed: The pool is closed
        """
        conn = await self._checkout()

        if conn is None:
            try:
                conn = await self._open()
            except BaseException:
                await self._free_slot()
                raise
            self._checked_out.add(conn)
            logger.debug(f"Opened {conn!r} ({self._outstanding} outstanding)")
            return conn

        if conn.database != self.database:
            logger.debug(f"Re-selecting database {self.database} on {conn!r}")
            try:
                await conn.select(self.database)
            except asyncio.CancelledError:
                await self.close_conn(conn, abort=True)
                raise
            except Exception as exc:
                await self.close_conn(conn, abort=True)
                raise ConnectFailed(f"cannot select database {self.database}: {exc}") from exc

        return conn

    async def release(self, conn: Connection) -> None:
        """
        Return a checked-out connection to the idle queue.

        A closed connection, or one that does not fit in the full idle
        queue, is closed instead and its slot freed. Connections that
        are not checked out from this pool are ignored.
        """
        async with self._cond:
            if conn not in self._checked_out:
                return
            if (not conn.closed and not self._closed
                    and len(self._idle) < self.config.idle_conn_num):
                self._checked_out.remove(conn)
                self._idle.append(conn)
                self._cond.notify_all()
                return

        await self.close_conn(conn)

    async def close_conn(self, conn: Connection, abort: bool = False) -> None:
        """
        Close a pooled connection and free its slot.

        The slot is freed before the socket is closed, so a close that is
        cancelled or fails still leaves the counts right. Works for idle
        and checked-out connections; calling it again does nothing.

        Args:
            conn: Connection to close
            abort: Drop the socket without flushing unsent data
        """
        freed = self._forget(conn)
        try:
            if freed:
                async with self._cond:
                    self._cond.notify_all()
        finally:
            await conn.close(abort=abort)

    def _forget(self, conn: Connection) -> bool:
        """Drop conn from the pool's books. True if it held a slot."""
        if conn in self._checked_out:
            self._checked_out.remove(conn)
        elif conn in self._idle:
            self._idle.remove(conn)
        else:
            return False
        self._outstanding -= 1
        return True

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[Connection]:
        """
        Check out a connection for the duration of an ``async with`` block.

        The connection goes back to the pool when the block finishes or
        raises ServerError (an error reply leaves the connection usable).
        Any other exception, cancellation included, closes it.

        Usage:
            async with pool.connection() as conn:
                await conn.execute("PING")
        """
        conn = await self.acquire()
        try:
            yield conn
        except ServerError:
            await self.release(conn)
            raise
        except BaseException:
            await self.close_conn(conn, abort=True)
            raise
        else:
            await self.release(conn)

    async def execute(self, command: str, *args: Any) -> List[str]:
        """
        Run one command on a pooled connection and return its reply.

        Args:
            command: Either a whole inline command ("GET key3"), split on
                whitespace, or just the verb when args are given
            *args: Arguments sent verbatim, so they may contain spaces

        Returns:
            The reply as a flat list of strings.

        Raises:
            ServerError: The server answered with an error reply
            ConnectFailed, WriteFailed, ReadFailed, ProtocolError,
            OperationTimeout: The connection was closed, not reused
            PoolExhausted, PoolClosed: No connection could be acquired

        Examples:
            >>> await pool.execute("LPUSH list5 4")
            ['1']
            >>> await pool.execute("SET", "greeting", "hello world")
            ['OK']
        """
        argv = [command, *args] if args else split_inline(command)

        async with self.connection() as conn:
            reply = await conn.execute(*argv)
            if str(argv[0]).upper() == "SELECT" and len(argv) == 2:
                # The connection now sits on another database; acquire()
                # switches it back before handing it out again.
                conn.database = int(argv[1])
            return reply

    async def close(self) -> None:
        """
        Close the pool and every idle connection.

        Waiting acquirers get PoolClosed. Connections still checked out
        are closed when they are released.
        """
        async with self._cond:
            self._closed = True
            idle = list(self._idle)
            self._idle.clear()
            self._outstanding -= len(idle)
            self._cond.notify_all()

        for conn in idle:
            await conn.close()
        logger.info(f"Pool for {self.host}:{self.port} closed ({len(idle)} idle connection(s))")

    @property
    def closed(self) -> bool:
        """True once close() has run."""
        return self._closed

    @property
    def idle_count(self) -> int:
        """Connections currently in the idle queue."""
        return len(self._idle)

    @property
    def outstanding(self) -> int:
        """Open or opening connections, idle and checked out."""
        return self._outstanding

    def stats(self) -> dict:
        """
        Get pool statistics.

        Returns:
            Dictionary with the target, limits and current connection counts.
        """
        return {
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "closed": self._closed,
            "idle": len(self._idle),
            "checked_out": len(self._checked_out),
            "outstanding": self._outstanding,
            "min_conn_num": self.config.min_conn_num,
            "idle_conn_num": self.config.idle_conn_num,
            "max_conn_num": self.config.max_conn_num,
        }

    async def __aenter__(self) -> "ConnectionPool":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


async def new_pool(
        host: str = None,
        port: int = None,
        database: int = None,
        min_conn_num: int = None,
        config: PoolConfig = None,
) -> ConnectionPool:
    """
    Create a ready pool.

    Args:
        host: Server host (default from settings)
        port: Server port (default from settings)
        database: Database index (default from settings)
        min_conn_num: Overrides config.min_conn_num when given
        config: Pool sizing and timeouts (default PoolConfig())

    Raises:
        ConnectFailed: No connection could be established
        ValueError: The sizing is inconsistent

    Usage:
        pool = await new_pool("127.0.0.1", 6379, 0, min_conn_num=2)
    """
    config = config if config is not None else PoolConfig()
    if min_conn_num is not None:
        config = replace(config, min_conn_num=min_conn_num)
    return await ConnectionPool.create(host, port, database, config)
