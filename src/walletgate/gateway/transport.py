"""Rate-limited HTTP transport toward the backend.

All gateway traffic for one host goes through a single
``RateLimitedTransport``: calls queue in arrival order and are released
at no more than ``max_requests_per_second``. Nothing is dropped and
nothing is retried; HTTP errors reach the caller as raised by httpx.

Transports built for successive hosts share one ``RateLimiter``, so a
retired transport that is still draining counts toward the same limit.
"""

import asyncio
import logging
import time
from collections import deque
from typing import Any, Awaitable, Callable, Optional

import httpx

from walletgate.gateway.routes import RouteEntry

logger = logging.getLogger(__name__)

DEFAULT_MAX_RPS = 25

# Smallest wait once the oldest release sits exactly on the window edge
MIN_WAIT = 0.001


class RateLimiter:
    """FIFO sliding-window limiter.

    At most ``max_calls`` acquisitions succeed within any closed window of
    ``period`` seconds: a slot frees strictly after ``period`` has elapsed.
    Waiters are served strictly in arrival order.
    """

    def __init__(
        self,
        max_calls: int = DEFAULT_MAX_RPS,
        period: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if max_calls < 1:
            raise ValueError("max_calls must be at least 1")
        self.max_calls = max_calls
        self.period = period
        self._clock = clock
        self._sleep = sleep
        self._released: deque[float] = deque()
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        async with self._lock:
            while True:
                now = self._clock()
                while self._released and now - self._released[0] > self.period:
                    self._released.popleft()
                if len(self._released) < self.max_calls:
                    self._released.append(now)
                    return
                await self._sleep(max(self.period - (now - self._released[0]), MIN_WAIT))


class RateLimitedTransport:
    """httpx client bound to one backend host behind a ``RateLimiter``.

    A transport is rebuilt, not reconfigured, when the host changes. The
    old one is retired: calls already issued on it, queued or in flight,
    complete against the old host, then its client is closed.
    """

    def __init__(
        self,
        base_url: str,
        max_requests_per_second: int = DEFAULT_MAX_RPS,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        limiter: Optional[RateLimiter] = None,
    ):
        self.base_url = base_url
        self.limiter = limiter or RateLimiter(max_calls=max_requests_per_second)
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self._active = 0
        self._retired = False
        self._closed = False

    @property
    def active(self) -> int:
        """Calls issued on this transport that have not finished."""
        return self._active

    @property
    def retired(self) -> bool:
        return self._retired

    @property
    def closed(self) -> bool:
        return self._closed

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> httpx.Response:
        """Send one request once the limiter releases it.

        Raises:
            httpx.HTTPError: on network failure or a non-2xx status
            RuntimeError: if the transport was already retired
        """
        if self._retired or self._closed:
            raise RuntimeError(f"Transport for {self.base_url} is retired")

        if params is not None:
            params = {k: v for k, v in params.items() if v is not None}

        self._active += 1
        try:
            await self.limiter.acquire()
            logger.debug(f"{method.upper()} {self.base_url}{path}")
            response = await self._client.request(
                method.upper(), path, params=params, json=json
            )
            response.raise_for_status()
            return response
        finally:
            self._active -= 1
            if self._retired and self._active == 0:
                await self._close()

    async def send(self, route: RouteEntry, payload: Optional[dict[str, Any]] = None) -> Any:
        """Call a route and return the decoded JSON body.

        Read methods carry the payload in the query string, the others in
        a JSON body.
        """
        if route.is_read:
            response = await self.request(route.http_method, route.path, params=payload)
        else:
            response = await self.request(route.http_method, route.path, json=payload or {})
        if not response.content:
            return None
        return response.json()

    async def retire(self) -> None:
        """Stop accepting calls; close once outstanding calls finish."""
        if self._retired:
            return
        self._retired = True
        if self._active == 0:
            await self._close()
        else:
            logger.info(
                f"Draining {self._active} call(s) on retired transport {self.base_url}"
            )

    async def aclose(self) -> None:
        """Close immediately, regardless of outstanding calls."""
        self._retired = True
        await self._close()

    async def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._client.aclose()
        logger.debug(f"Closed transport for {self.base_url}")
