from __future__ import annotations

import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import TYPE_CHECKING, Iterator, List, Optional

import httpx

from measurement_protocol.errors import TransportError

if TYPE_CHECKING:
    from measurement_protocol.response import AnalyticsResponse


class PendingRequest:
    """
    Handle to one asynchronous send.

    Owns the future returned by the HTTP client and the originating request.
    Waiting is explicit and happens at most once; the outcome is cached so
    every holder of the handle sees the same response or error.
    """

    def __init__(self, request: httpx.Request, future: Future, timeout: float):
        self.request = request
        self.future = future
        self.timeout = timeout
        self._lock = threading.Lock()
        self._resolved = False
        self._response: Optional[httpx.Response] = None
        self._error: Optional[TransportError] = None

    @property
    def url(self) -> str:
        return str(self.request.url)

    @property
    def resolved(self) -> bool:
        return self._resolved

    @property
    def response(self) -> Optional[httpx.Response]:
        return self._response

    @property
    def error(self) -> Optional[TransportError]:
        return self._error

    def done(self) -> bool:
        """
        Whether the underlying future finished, waited for or not.
        """
        return self.future.done()

    def wait(self, timeout: Optional[float] = None) -> httpx.Response:
        """
        Block until the response is available.

        Args:
            timeout: Seconds to poll for. A poll that runs out raises but leaves
                the request pending, so a later wait can still collect the
                response. Without it the wait lasts for the timeout the
                request was sent with, and running out of that fails the send.

        Returns:
            httpx.Response: The resolved response.

        Raises:
            TransportError: If the request failed or did not finish in time.
        """
        with self._lock:
            if not self._resolved:
                try:
                    self._response = self.future.result(
                        timeout=self.timeout if timeout is None else timeout
                    )
                except FuturesTimeoutError as e:
                    if timeout is not None:
                        raise TransportError(self.url, e) from e
                    # Best effort, a send still queued behind busy workers never goes out
                    self.future.cancel()
                    self._error = TransportError(self.url, e)
                except Exception as e:
                    self._error = TransportError(self.url, e)
                self._resolved = True

        if self._error is not None:
            raise self._error
        return self._response

    def __repr__(self) -> str:
        state = "resolved" if self._resolved else "pending"
        return f"<PendingRequest {self.request.method} {self.url} {state}>"


class PendingRequests:
    """
    Ordered, thread-safe collection of responses whose sends are in flight.

    Registration order is preserved. Nothing is removed until the owner takes
    the whole collection with ``take_all``.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._items: List["AnalyticsResponse"] = []

    def add(self, response: "AnalyticsResponse") -> None:
        with self._lock:
            self._items.append(response)

    def take_all(self) -> List["AnalyticsResponse"]:
        """
        Atomically return every registered response and empty the collection.
        """
        with self._lock:
            items, self._items = self._items, []
        return items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator["AnalyticsResponse"]:
        with self._lock:
            snapshot = list(self._items)
        return iter(snapshot)
