"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import socket
from contextlib import closing
from typing import AsyncGenerator, List

import pytest
import pytest_asyncio

from respool.config.settings import PoolConfig
from respool.network.pool import ConnectionPool
from tests.fake_server import FakeRespServer


def find_free_port() -> int:
    """Find a port nothing listens on."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class LineSource:
    """
    Feeds canned lines to the reply decoder, the way Connection.read_line does.

    Usage:
        source = LineSource(b"$3", b"123")
        reply = await read_reply(source.read_line)
    """

    def __init__(self, *lines: bytes):
        self.lines = list(lines)
        self.consumed = 0

    async def read_line(self) -> bytes:
        line = self.lines[self.consumed]
        self.consumed += 1
        return line

    @property
    def remaining(self) -> int:
        return len(self.lines) - self.consumed


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def dead_port() -> int:
    """A port with no server behind it."""
    return find_free_port()


@pytest_asyncio.fixture
async def fake_server() -> AsyncGenerator[FakeRespServer, None]:
    """
    Start a fake RESP server on a free port.

    The server is stopped, and its client sockets closed, after the test.
    """
    srv = FakeRespServer()
    await srv.start()

    yield srv

    await srv.stop()


# ============================================================================
# Pool Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def pool_factory(fake_server: FakeRespServer):
    """
    Factory fixture creating pools against the fake server.

    Defaults to min/idle/max = 2/3/4; keyword arguments override any
    PoolConfig field. Every pool created is closed after the test.

    Usage:
        async def test_something(pool_factory):
            pool = await pool_factory(max_conn_num=1, idle_conn_num=1, min_conn_num=1)
    """
    pools: List[ConnectionPool] = []

    async def factory(database: int = 0, **overrides) -> ConnectionPool:
        values = {"min_conn_num": 2, "idle_conn_num": 3, "max_conn_num": 4}
        values.update(overrides)
        pool = await ConnectionPool.create(
            "127.0.0.1", fake_server.port, database, PoolConfig(**values)
        )
        pools.append(pool)
        return pool

    yield factory

    for pool in pools:
        await pool.close()


@pytest_asyncio.fixture
async def pool(pool_factory) -> ConnectionPool:
    """A pool with the default 2/3/4 sizing on database 0."""
    return await pool_factory()


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
