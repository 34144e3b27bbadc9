"""Error types raised by the connection pool and its connections."""


class RespoolError(Exception):
    """Base class for every error raised by respool."""


class ConnectFailed(RespoolError):
    """Dialling the server failed, or SELECT failed on a pooled connection."""


class WriteFailed(RespoolError):
    """A request could not be written to the socket."""


class ReadFailed(RespoolError):
    """The socket failed while reading a reply."""


class ProtocolError(RespoolError):
    """The server sent something that is not a valid reply."""


class ServerError(RespoolError):
    """
    The server answered with an error reply ("-ERR ...").

    Attributes:
        message: Payload of the error reply, without the "-" marker
    """

    def __init__(self, message: str):
        super().__init__(f"server: {message}")
        self.message = message


class OperationTimeout(RespoolError):
    """A read or write did not finish before the connection's deadline."""


class PoolExhausted(RespoolError):
    """No connection became available within the acquire timeout."""


class PoolClosed(RespoolError):
    """The pool was closed while (or before) acquiring a connection."""
