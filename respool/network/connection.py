"""
Connection Module

One persistent TCP connection to the store. A Connection is owned by a
single holder at a time (the pool or the caller that checked it out),
so it does no locking of its own.
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from enum import Enum
from typing import Any, Awaitable, List, TypeVar

from ..config.settings import settings
from ..exceptions import (
    ConnectFailed,
    OperationTimeout,
    ProtocolError,
    ReadFailed,
    WriteFailed,
)
from ..protocol.decoder import read_reply, strip_terminator
from ..protocol.encoder import encode_command

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConnState(Enum):
    """Lifecycle of a connection. CLOSED is terminal."""
    OPEN = "open"
    CLOSED = "closed"


class Connection:
    """
    A single connection to a RESP server.

    Usage:
        conn = await Connection.open("127.0.0.1", 6379, database=1)
        reply = await conn.execute("GET", "key3")
        await conn.close()

    Attributes:
        host: Server host
        port: Server port
        database: Database index last selected on this connection
        state: OPEN or CLOSED
        timeout: Deadline in seconds for each read and write (0 = none)
    """

    def __init__(
            self,
            reader: StreamReader,
            writer: StreamWriter,
            host: str = "",
            port: int = 0,
            database: int = 0,
            timeout: float = 0,
            encoding: str = settings.ENCODING,
    ):
        self.host = host
        self.port = port
        self.database = database
        self.timeout = timeout
        self.encoding = encoding
        self.state = ConnState.OPEN
        self._reader = reader
        self._writer = writer

    @classmethod
    async def open(
            cls,
            host: str,
            port: int,
            database: int = 0,
            timeout: float = 0,
            read_buffer_size: int = settings.READ_BUFFER_SIZE,
            encoding: str = settings.ENCODING,
    ) -> "Connection":
        """
        Dial the server and select the database.

        Args:
            host: Server host
            port: Server port
            database: Database index to select (0 needs no SELECT)
            timeout: Deadline in seconds for dialling and each read/write.
                0 disables deadlines and I/O blocks indefinitely.
            read_buffer_size: Longest reply line accepted
            encoding: Text encoding for requests and replies

        Raises:
            ConnectFailed: Dial failed, timed out, or SELECT failed
        """
        try:
            dial = asyncio.open_connection(host, port, limit=read_buffer_size)
            if timeout > 0:
                reader, writer = await asyncio.wait_for(dial, timeout=timeout)
            else:
                reader, writer = await dial
        except asyncio.TimeoutError:
            raise ConnectFailed(f"timed out connecting to {host}:{port}") from None
        except OSError as exc:
            raise ConnectFailed(f"cannot connect to {host}:{port}: {exc}") from exc

        conn = cls(reader, writer, host, port, 0, timeout, encoding)
        logger.debug(f"Connected to {host}:{port}")

        if database != 0:
            try:
                await conn.select(database)
            except asyncio.CancelledError:
                await conn.close(abort=True)
                raise
            except Exception as exc:
                await conn.close(abort=True)
                raise ConnectFailed(f"cannot select database {database}: {exc}") from exc

        return conn

    @property
    def closed(self) -> bool:
        """True once close() has run."""
        return self.state is ConnState.CLOSED

    async def _io(self, aw: Awaitable[T]) -> T:
        """Await one I/O step, enforcing the deadline if there is one."""
        if self.timeout <= 0:
            return await aw
        try:
            return await asyncio.wait_for(aw, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise OperationTimeout(
                f"no progress on {self.host}:{self.port} within {self.timeout}s"
            ) from None

    async def send_command(self, *args: Any) -> None:
        """
        Write one request.

        Raises:
            WriteFailed: The connection is closed or the write failed
            OperationTimeout: The write did not drain before the deadline
        """
        data = encode_command(args, self.encoding)
        if self.closed or self._writer.is_closing():
            raise WriteFailed("cannot send command to server: connection closed")
        try:
            self._writer.write(data)
            await self._io(self._writer.drain())
        except OSError as exc:
            raise WriteFailed(f"cannot send command to server: {exc}") from exc

    async def read_line(self) -> bytes:
        """
        Read one CRLF-terminated line, without the terminator.

        Raises:
            ProtocolError: Bad terminator, line too long or end of input
            ReadFailed: The socket read failed
            OperationTimeout: No line arrived before the deadline
        """
        try:
            raw = await self._io(self._reader.readuntil(b"\n"))
        except asyncio.LimitOverrunError:
            raise ProtocolError("bad response title: line too long") from None
        except asyncio.IncompleteReadError:
            raise ProtocolError("bad response: connection closed by server") from None
        except OSError as exc:
            raise ReadFailed(f"cannot read reply: {exc}") from exc
        return strip_terminator(raw)

    async def read_reply(self) -> List[str]:
        """Read and decode exactly one reply."""
        return await read_reply(self.read_line, self.encoding)

    async def execute(self, *args: Any) -> List[str]:
        """Send one request and return its decoded reply."""
        await self.send_command(*args)
        return await self.read_reply()

    async def select(self, database: int) -> None:
        """Switch this connection to another database index."""
        await self.execute("SELECT", database)
        self.database = database

    async def close(self, abort: bool = False) -> bool:
        """
        Close the socket.

        Safe to call more than once: only the first call closes anything.

        Args:
            abort: Drop the socket at once, discarding unsent data. Used
                after I/O errors, when the peer may never read the rest.
                A graceful close still aborts once the deadline expires.

        Returns:
            True if this call closed the connection, False if it was
            already closed.
        """
        if self.state is ConnState.CLOSED:
            return False
        self.state = ConnState.CLOSED

        if abort:
            self._writer.transport.abort()
        else:
            self._writer.close()
        try:
            if abort or self.timeout <= 0:
                await self._writer.wait_closed()
            else:
                await asyncio.wait_for(self._writer.wait_closed(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.debug(f"Unsent data to {self.host}:{self.port} did not drain, aborting")
            self._writer.transport.abort()
        except OSError as exc:
            logger.debug(f"Error while closing {self.host}:{self.port}: {exc}")
        logger.debug(f"Closed connection to {self.host}:{self.port}")
        return True

    def __repr__(self) -> str:
        return (f"Connection(host={self.host!r}, port={self.port}, "
                f"database={self.database}, state={self.state.value})")
