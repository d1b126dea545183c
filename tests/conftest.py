"""
Pytest configuration and shared fixtures for HTTP module tests.

Provides an echo server (reflects the raw request it received, sets and reads
a ``session_id`` cookie) and a raw server that cuts its response body short,
both running on their own event loop thread, plus module and host fixtures
wired to them.
"""

import asyncio
import os
import sys
import threading
from pathlib import Path

import pytest
from aiohttp import web

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Configure test environment
os.environ['ENVIRONMENT'] = 'test'

from hosthttp import HttpModule, LegacyHttpModule, TableHost
from hosthttp.logging import LoggingConfig, configure_logging


def dump_request(request: web.Request, body: bytes) -> str:
    """Raw request dump: request line, headers as received, blank line, body."""
    lines = [f"{request.method} {request.raw_path} HTTP/{request.version.major}.{request.version.minor}"]
    for name, value in request.raw_headers:
        lines.append(f"{name.decode('latin-1')}: {value.decode('latin-1')}")
    return "\r\n".join(lines) + "\r\n\r\n" + body.decode("utf-8", errors="replace")


async def echo(request: web.Request) -> web.Response:
    body = await request.read()
    response = web.Response(text=dump_request(request, body))
    response.headers["X-Request-Method"] = request.method
    response.headers["X-Request-Uri"] = request.raw_path
    return response


async def set_cookie(request: web.Request) -> web.Response:
    response = web.Response(text="cookie set")
    response.set_cookie("session_id", "12345")
    return response


async def get_cookie(request: web.Request) -> web.Response:
    value = request.cookies.get("session_id")
    if value is None:
        return web.Response(text="no cookie")
    return web.Response(text=f"session_id={value}")


async def redirect(request: web.Request) -> web.Response:
    raise web.HTTPFound("/get_cookie")


async def redirect_loop(request: web.Request) -> web.Response:
    raise web.HTTPFound("/loop")


async def multi(request: web.Request) -> web.Response:
    response = web.Response(text="multi")
    response.headers.add("X-Multi", "one")
    response.headers.add("X-Multi", "two")
    response.headers.add("Set-Cookie", "dup=first; Path=/")
    response.headers.add("Set-Cookie", "dup=second; Path=/")
    return response


async def slow(request: web.Request) -> web.Response:
    delay = float(request.query.get("delay", "0.1"))
    await asyncio.sleep(delay)
    return web.Response(text=request.query.get("tag", ""))


async def truncated_body(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    """Announces a 100 byte body, sends 5 bytes and hangs up."""
    await reader.readuntil(b"\r\n\r\n")
    writer.write(b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\nContent-Length: 100\r\n\r\nhello")
    await writer.drain()
    writer.close()


def create_echo_app() -> web.Application:
    app = web.Application()
    app.router.add_route("*", "/set_cookie", set_cookie)
    app.router.add_route("*", "/get_cookie", get_cookie)
    app.router.add_route("*", "/redirect", redirect)
    app.router.add_route("*", "/loop", redirect_loop)
    app.router.add_route("*", "/multi", multi)
    app.router.add_route("*", "/slow", slow)
    app.router.add_route("*", "/{tail:.*}", echo)
    return app


class EchoServer:
    """aiohttp echo server on a private loop thread."""

    def __init__(self):
        self.loop = asyncio.new_event_loop()
        self.thread = threading.Thread(target=self.loop.run_forever, name="echo-server", daemon=True)
        self.runner = None
        self.port = None
        self.raw_server = None
        self.raw_port = None

    async def _start(self) -> None:
        self.runner = web.AppRunner(create_echo_app())
        await self.runner.setup()
        site = web.TCPSite(self.runner, "127.0.0.1", 0)
        await site.start()
        self.port = self.runner.addresses[0][1]

        self.raw_server = await asyncio.start_server(truncated_body, "127.0.0.1", 0)
        self.raw_port = self.raw_server.sockets[0].getsockname()[1]

    async def _stop(self) -> None:
        self.raw_server.close()
        await self.raw_server.wait_closed()
        await self.runner.cleanup()

    def start(self) -> None:
        self.thread.start()
        asyncio.run_coroutine_threadsafe(self._start(), self.loop).result()

    def stop(self) -> None:
        asyncio.run_coroutine_threadsafe(self._stop(), self.loop).result()
        self.loop.call_soon_threadsafe(self.loop.stop)
        self.thread.join()
        self.loop.close()

    @property
    def address(self) -> str:
        return f"127.0.0.1:{self.port}"

    def url(self, path: str = "/") -> str:
        return f"http://{self.address}{path}"

    def truncated_url(self) -> str:
        return f"http://127.0.0.1:{self.raw_port}/"


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """Set up test-appropriate logging configuration."""
    configure_logging(LoggingConfig(environment="test", min_level="WARNING"))


@pytest.fixture(scope="session")
def echo_server():
    server = EchoServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def http_module():
    module = HttpModule()
    yield module
    module.close()


@pytest.fixture
def legacy_module():
    module = LegacyHttpModule()
    yield module
    module.close()


@pytest.fixture
def http(http_module):
    """The module table as a host script sees it after ``require("http")``."""
    host = TableHost()
    host.preload_module("http", http_module.loader)
    return host.require("http")
