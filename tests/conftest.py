"""Shared fixtures: a mock parliament website and ready-made collaborators."""

import asyncio
import logging
import socket
import threading
from collections.abc import Generator
from contextlib import closing

import pytest
from aiohttp import web

from roster.common.fetch_client import FetchClient
from roster.data_types import ScrapeConfig
from roster.storage import Connection
from tests.mock_server import create_app


def find_free_port() -> int:
    """Find a free port on localhost.

    Returns:
        An available port number.
    """
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class AioHttpTestServer:
    """Wrapper to run aiohttp server in a background thread."""

    def __init__(self, app: web.Application, port: int) -> None:
        self.app = app
        self.port = port
        self.host = "127.0.0.1"
        self._loop: asyncio.AbstractEventLoop | None = None
        self._runner: web.AppRunner | None = None
        self._thread: threading.Thread | None = None
        self._started = threading.Event()

    @property
    def url(self) -> str:
        """Get the base URL of the server."""
        return f"http://{self.host}:{self.port}"

    def start(self) -> None:
        """Start the server in a background thread."""
        self._thread = threading.Thread(target=self._run_server, daemon=True)
        self._thread.start()
        if not self._started.wait(timeout=5.0):
            raise RuntimeError("Mock server did not start")

    def _run_server(self) -> None:
        """Run the server in an asyncio event loop."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        async def start() -> None:
            self._runner = web.AppRunner(self.app)
            await self._runner.setup()
            site = web.TCPSite(self._runner, self.host, self.port)
            await site.start()

        self._loop.run_until_complete(start())
        self._started.set()
        self._loop.run_forever()

    def stop(self) -> None:
        """Stop the server and clean up resources."""
        if self._loop and self._runner:
            future = asyncio.run_coroutine_threadsafe(
                self._runner.cleanup(), self._loop
            )
            try:
                future.result(timeout=2.0)
            except Exception:
                pass  # Best effort cleanup

        if self._loop:
            self._loop.call_soon_threadsafe(self._loop.stop)

        if self._thread:
            self._thread.join(timeout=2.0)


@pytest.fixture
def parliament_server() -> Generator[AioHttpTestServer, None, None]:
    """Create and start an aiohttp server running the mock parliament site.

    This fixture starts a real HTTP server on a random port, so strategies
    and the fetch client are exercised with real HTTP requests.

    Yields:
        AioHttpTestServer instance with the mock site running.
    """
    server = AioHttpTestServer(create_app(), find_free_port())
    server.start()
    yield server
    server.stop()


@pytest.fixture
def server_url(parliament_server: AioHttpTestServer) -> str:
    """Get the base URL of the test server.

    Returns:
        The base URL string (e.g., "http://127.0.0.1:8080").
    """
    return parliament_server.url


@pytest.fixture
def fetch_logger() -> logging.Logger:
    return logging.getLogger("tests.fetch")


@pytest.fixture
def fetch_client(
    fetch_logger: logging.Logger,
) -> Generator[FetchClient, None, None]:
    """A FetchClient with a short timeout and no retry delay."""
    client = FetchClient(fetch_logger, timeout=5.0, retry_delay=0.0)
    yield client
    client.close()


@pytest.fixture
def site_config(server_url: str):
    """Build a ScrapeConfig pointed at the mock server.

    Returns:
        A function taking scrape options as keyword arguments.
    """

    def build(**options: str) -> ScrapeConfig:
        return ScrapeConfig({"base_url": server_url, **options})

    return build


@pytest.fixture
def sqlite_connection() -> Generator[Connection, None, None]:
    connection = Connection("sqlite", ":memory:")
    yield connection
    connection.close()
