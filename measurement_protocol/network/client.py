"""
HTTP client capability used by the transport.

The transport only needs something that can start a request and hand back a
future. ``HttpxAsyncClient`` is the default, backed by an ``httpx.Client``
and a thread pool; any object with the same two methods can be injected
instead.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Protocol

import httpx

from measurement_protocol.config.log_codes import CLIENT_CLOSED, CLIENT_CREATED
from measurement_protocol.constants import DEFAULT_MAX_WORKERS

logger = logging.getLogger(__name__)


class AsyncHttpClient(Protocol):
    def send_async(self, request: httpx.Request, timeout: float) -> Future[httpx.Response]:
        """
        Start sending ``request`` and return a future for its response.

        The future raises the underlying exception (e.g. ``httpx.TimeoutException``)
        when the request fails.
        """
        ...

    def close(self) -> None:
        ...


class HttpxAsyncClient:
    """
    Thread-pool backed client, one worker thread per in-flight request.

    Keyword arguments not consumed here are passed to ``httpx.Client``
    (``proxy``, ``verify``, ``transport``, ...).
    """

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS, **client_kwargs: Any):
        client_kwargs.setdefault("trust_env", False)
        self._client = httpx.Client(**client_kwargs)
        self._pool = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="mp-sender"
        )
        self._closed = False
        logger.debug(CLIENT_CREATED, extra={"max_workers": max_workers})

    def send_async(self, request: httpx.Request, timeout: float) -> Future[httpx.Response]:
        request.extensions = {
            **request.extensions,
            "timeout": httpx.Timeout(timeout).as_dict(),
        }
        return self._pool.submit(self._client.send, request)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        # Let in-flight requests finish before the connection pool goes away
        self._pool.shutdown(wait=True)
        self._client.close()
        logger.debug(CLIENT_CLOSED)

    def __enter__(self) -> HttpxAsyncClient:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def default_client_factory() -> AsyncHttpClient:
    return HttpxAsyncClient()
