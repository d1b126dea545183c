"""
HTTP Session

One aiohttp client and one cookie jar per module instance. Host calls are
synchronous, so the session runs its own event loop on a daemon thread and
callers block on submitted coroutines. Every request of the module, batch
items included, goes through the same client and therefore the same jar.

The loop thread and client are released by ``close()``, or by a finalizer
when an unclosed session is garbage collected or the interpreter exits.
"""

import asyncio
import threading
import weakref
from collections import deque
from dataclasses import dataclass, replace
from typing import Awaitable, Dict, Optional, TypeVar

import aiohttp
from aiohttp.abc import AbstractCookieJar
from yarl import URL

from ..config import HttpModuleConfig
from ..exceptions import BodyReadError, HttpModuleError, TransportError
from ..logging import get_logger
from .response_encoder import encode_response
from .structs import PreparedRequest, Response, SessionMetrics

T = TypeVar('T')


def describe_error(error: BaseException) -> str:
    """Transport error text; falls back to the exception type when the message is empty."""
    return str(error) or type(error).__name__


@dataclass
class LoopState:
    """Loop, loop thread and client of one session. Holds no reference back to the session."""
    loop: asyncio.AbstractEventLoop
    thread: threading.Thread
    client: Optional[aiohttp.ClientSession] = None


def _run_loop(loop: asyncio.AbstractEventLoop) -> None:
    asyncio.set_event_loop(loop)
    loop.run_forever()


async def _close_client(state: LoopState) -> None:
    if state.client is not None and not state.client.closed:
        await state.client.close()
    # Let connector transports finish closing
    await asyncio.sleep(0)


def shutdown_loop(state: LoopState) -> None:
    """Close the client, stop the loop and join the loop thread."""
    if threading.current_thread() is state.thread:
        state.loop.stop()
        return
    try:
        asyncio.run_coroutine_threadsafe(_close_client(state), state.loop).result()
    finally:
        state.loop.call_soon_threadsafe(state.loop.stop)
        state.thread.join()
        state.loop.close()


class Session:
    """
    Per-module HTTP session.

    The aiohttp client, cookie jar and concurrency semaphore are created
    lazily on the session loop. The cookie jar outlives client re-creation.
    """

    def __init__(self, config: Optional[HttpModuleConfig] = None):
        self.config = config or HttpModuleConfig()
        self.config.validate()

        # Session management
        self._cookie_jar: Optional[AbstractCookieJar] = None
        self._semaphore: Optional[asyncio.Semaphore] = None

        # Performance monitoring
        self._metrics = SessionMetrics()
        self._latency_samples = deque(maxlen=1000)

        self.logger = get_logger('hosthttp.session')

        loop = asyncio.new_event_loop()
        thread = threading.Thread(
            target=_run_loop, args=(loop,), name=f"hosthttp-session-{id(self):x}", daemon=True
        )
        self._state = LoopState(loop=loop, thread=thread)
        thread.start()
        self._finalizer = weakref.finalize(self, shutdown_loop, self._state)
        self.logger.debug("Session started", thread=thread.name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    @property
    def thread(self) -> threading.Thread:
        return self._state.thread

    def run(self, coro: Awaitable[T]) -> T:
        """Run a coroutine on the session loop and block until it finishes."""
        if self.closed:
            coro.close()
            raise RuntimeError("Session is closed")
        if threading.current_thread() is self._state.thread:
            coro.close()
            raise RuntimeError("Session.run() called from the session loop")
        return asyncio.run_coroutine_threadsafe(coro, self._state.loop).result()

    async def _ensure_client(self) -> aiohttp.ClientSession:
        """Ensure the aiohttp client exists; the cookie jar is created once."""
        if self._cookie_jar is None:
            if self.config.persist_cookies:
                self._cookie_jar = aiohttp.CookieJar(unsafe=self.config.unsafe_cookies)
            else:
                self._cookie_jar = aiohttp.DummyCookieJar()

        client = self._state.client
        if client is None or client.closed:
            default_headers = dict(self.config.default_headers or {})
            if self.config.user_agent:
                default_headers['User-Agent'] = self.config.user_agent

            client = aiohttp.ClientSession(
                cookie_jar=self._cookie_jar,
                headers=default_headers or None,
            )
            self._state.client = client
            self._semaphore = asyncio.Semaphore(self.config.max_concurrent)
        return client

    async def send(self, request: PreparedRequest) -> Response:
        """
        Perform one request and read the whole body.

        Request bodies are sent with chunked transfer encoding.

        Raises:
            TransportError: Connection, DNS, TLS, protocol or redirect failure
            BodyReadError: Body could not be read after the status arrived
        """
        client = await self._ensure_client()

        async with self._semaphore:
            try:
                async with client.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    cookies=request.cookies or None,
                    data=request.body,
                    chunked=True if request.body is not None else None,
                    allow_redirects=self.config.follow_redirects,
                    max_redirects=self.config.max_redirects,
                ) as response:
                    try:
                        body = await response.read()
                    except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
                        raise BodyReadError(describe_error(e)) from e

                    return encode_response(
                        response.status,
                        str(response.url),
                        response.headers.items(),
                        response.cookies,
                        body,
                    )

            except HttpModuleError:
                raise
            except aiohttp.TooManyRedirects as e:
                raise TransportError(f"stopped after {self.config.max_redirects} redirects") from e
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as e:
                raise TransportError(describe_error(e)) from e
            except Exception as e:
                self.logger.error("Unexpected transport failure",
                                  error_type=type(e).__name__, error=describe_error(e))
                raise TransportError(describe_error(e)) from e

    def cookies_for(self, url: str) -> Dict[str, str]:
        """Cookies the jar would attach to a request for ``url``."""
        async def collect() -> Dict[str, str]:
            if self._cookie_jar is None:
                return {}
            return {name: morsel.value for name, morsel in self._cookie_jar.filter_cookies(URL(url)).items()}

        return self.run(collect())

    def record(self, latency_ms: float, success: bool) -> None:
        """Update request metrics; called on the session loop."""
        self._metrics.total_requests += 1
        if success:
            self._metrics.successful_requests += 1
        else:
            self._metrics.failed_requests += 1

        self._latency_samples.append(latency_ms)
        sorted_samples = sorted(self._latency_samples)
        n = len(sorted_samples)
        self._metrics.avg_latency_ms = sum(sorted_samples) / n
        self._metrics.p95_latency_ms = sorted_samples[min(int(0.95 * n), n - 1)]

    def record_batch(self) -> None:
        self._metrics.batches_executed += 1

    def get_metrics(self) -> SessionMetrics:
        """Snapshot of the current metrics."""
        return replace(self._metrics)

    def reset_metrics(self) -> None:
        self._metrics = SessionMetrics()
        self._latency_samples.clear()

    def close(self) -> None:
        """Close the client, stop the loop and join the loop thread. Idempotent."""
        if not self._finalizer.alive:
            return
        self._finalizer()
        self.logger.debug("Session closed", requests=self._metrics.total_requests)
