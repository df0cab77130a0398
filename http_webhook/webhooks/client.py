"""Shared HTTP client for webhook deliveries.

Host threads call into the forwarder synchronously and must not wait for
remote receivers. All deliveries therefore run on one event loop owned by a
DeliveryRuntime, in a dedicated thread, and share a single
httpx.AsyncClient (and its connection pool) across every session.
"""

import asyncio
import threading
from collections.abc import Coroutine
from concurrent.futures import Future, wait
from typing import Any, TypeVar

import httpx
import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")

CONNECT_TIMEOUT_SECONDS = 1.0


class DeliveryRuntime:
    """Event loop thread plus the HTTP client used by all deliveries.

    Features:
    - Connect timeout of one second; total request time is bounded per
      target by the caller
    - HTTP/2 when the server offers it, HTTP/1.1 otherwise
    - Redirects are always followed
    """

    def __init__(
        self,
        *,
        connect_timeout: float = CONNECT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Start the delivery loop and create the shared client.

        Args:
            connect_timeout: Seconds allowed for establishing a connection.
            transport: Optional transport, e.g. httpx.MockTransport in tests.
        """
        self._connect_timeout = connect_timeout
        self._transport = transport
        self._pending: set[Future[Any]] = set()
        self._lock = threading.Lock()
        self._closed = False
        self._logger = logger.bind(component="delivery_runtime")

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="webhook-delivery",
            daemon=True,
        )
        self._thread.start()
        self._client: httpx.AsyncClient = asyncio.run_coroutine_threadsafe(
            self._create_client(), self._loop
        ).result()

    @property
    def client(self) -> httpx.AsyncClient:
        """The shared HTTP client. Only use it from coroutines run via submit()."""
        return self._client

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_count(self) -> int:
        """Number of submitted deliveries that have not completed."""
        with self._lock:
            return len(self._pending)

    def submit(self, coro: Coroutine[Any, Any, T]) -> Future[T]:
        """Schedule a coroutine on the delivery loop.

        Safe to call from any thread. Does not wait for the coroutine.

        Args:
            coro: Coroutine to run.

        Returns:
            Future completing with the coroutine's result.

        Raises:
            RuntimeError: If the runtime has been closed.
        """
        with self._lock:
            if self._closed:
                coro.close()
                raise RuntimeError("Delivery runtime is closed")
            future = asyncio.run_coroutine_threadsafe(coro, self._loop)
            self._pending.add(future)
        future.add_done_callback(self._discard)
        return future

    def close(self) -> None:
        """Wait for in-flight deliveries, then release the client and loop.

        Deliveries are not cancelled; each is bounded by its own timeout.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            pending = list(self._pending)

        if pending:
            self._logger.info("waiting_for_pending_deliveries", count=len(pending))
            wait(pending)

        asyncio.run_coroutine_threadsafe(self._client.aclose(), self._loop).result()
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join()
        self._loop.close()
        self._logger.debug("delivery_runtime_closed")

    async def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            http2=True,
            follow_redirects=True,
            timeout=httpx.Timeout(None, connect=self._connect_timeout),
            transport=self._transport,
        )

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def _discard(self, future: Future[Any]) -> None:
        with self._lock:
            self._pending.discard(future)
