"""
respool Configuration Settings

Defaults are read from the environment once, at import time, and are
frozen afterwards. Pool sizing is never tuned globally: every pool gets
its own PoolConfig.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    """Client defaults."""

    # Server address
    HOST: str = os.environ.get("RESPOOL_HOST", "127.0.0.1")
    PORT: int = int(os.environ.get("RESPOOL_PORT", "6379"))
    DATABASE: int = int(os.environ.get("RESPOOL_DB", "0"))

    # Pool sizing
    MIN_CONN_NUM: int = int(os.environ.get("RESPOOL_MIN_CONNS", "2"))
    IDLE_CONN_NUM: int = int(os.environ.get("RESPOOL_IDLE_CONNS", "3"))
    MAX_CONN_NUM: int = int(os.environ.get("RESPOOL_MAX_CONNS", "4"))

    # Timeouts in seconds (0 = block forever)
    TIMEOUT: float = float(os.environ.get("RESPOOL_TIMEOUT", "0"))
    ACQUIRE_TIMEOUT: float = float(os.environ.get("RESPOOL_ACQUIRE_TIMEOUT", "0"))

    # Connection settings
    READ_BUFFER_SIZE: int = 4096  # Longest reply line accepted
    ENCODING: str = "utf-8"

    # Logging settings
    DEBUG: bool = os.environ.get("RESPOOL_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("RESPOOL_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()


@dataclass(frozen=True)
class PoolConfig:
    """
    Sizing and timeouts for one ConnectionPool.

    Attributes:
        min_conn_num: Connections opened eagerly when the pool is created
        idle_conn_num: Capacity of the idle queue
        max_conn_num: Upper bound on open connections (idle + checked out)
        timeout: Deadline in seconds for dialling and each read/write (0 = none)
        acquire_timeout: Longest wait in acquire() before PoolExhausted (0 = none)
        read_buffer_size: Longest reply line accepted before ProtocolError
        encoding: Text encoding for requests and replies
    """
    min_conn_num: int = settings.MIN_CONN_NUM
    idle_conn_num: int = settings.IDLE_CONN_NUM
    max_conn_num: int = settings.MAX_CONN_NUM
    timeout: float = settings.TIMEOUT
    acquire_timeout: float = settings.ACQUIRE_TIMEOUT
    read_buffer_size: int = settings.READ_BUFFER_SIZE
    encoding: str = settings.ENCODING

    def __post_init__(self):
        """Validate min <= idle <= max and the timeouts."""
        if self.min_conn_num < 0:
            raise ValueError(f"min_conn_num must be >= 0, got {self.min_conn_num}")
        if self.max_conn_num < 1:
            raise ValueError(f"max_conn_num must be >= 1, got {self.max_conn_num}")
        if not self.min_conn_num <= self.idle_conn_num <= self.max_conn_num:
            raise ValueError(
                "pool sizes must satisfy min_conn_num <= idle_conn_num <= max_conn_num, "
                f"got {self.min_conn_num}/{self.idle_conn_num}/{self.max_conn_num}"
            )
        if self.timeout < 0 or self.acquire_timeout < 0:
            raise ValueError("timeouts must be >= 0")
        if self.read_buffer_size < 16:
            raise ValueError(f"read_buffer_size too small: {self.read_buffer_size}")
