"""
Responses returned by every send.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, NamedTuple, Optional

import httpx

from measurement_protocol.errors import NotReadyError
from measurement_protocol.network.pending import PendingRequest

logger = logging.getLogger(__name__)


class RawResponse(NamedTuple):
    status_code: Optional[int]
    body: str
    headers: Dict[str, str]


class AnalyticsResponse:
    """
    Pairs the originating request with its HTTP response.

    Synchronous sends produce a resolved response right away. Asynchronous
    sends hold a ``PendingRequest`` and stay unresolved until ``wait()`` is
    called on them or the transport drains its pending requests. Reading the
    result before that raises ``NotReadyError``; nothing blocks implicitly.
    """

    def __init__(
        self,
        request: httpx.Request,
        response: Optional[httpx.Response] = None,
        pending: Optional[PendingRequest] = None,
        debug: bool = False,
    ):
        if (response is None) == (pending is None):
            raise ValueError("Exactly one of response or pending must be given")

        self.request = request
        self._response = response
        self._pending = pending
        self._debug = debug

    @property
    def request_url(self) -> str:
        return str(self.request.url)

    @property
    def request_body(self) -> str:
        return self.request.content.decode("utf-8")

    @property
    def is_debug(self) -> bool:
        return self._debug

    @property
    def is_async(self) -> bool:
        return self._pending is not None

    @property
    def resolved(self) -> bool:
        return self._pending is None or self._pending.resolved

    @property
    def pending(self) -> Optional[PendingRequest]:
        return self._pending

    def wait(self, timeout: Optional[float] = None) -> AnalyticsResponse:
        """
        Block until an asynchronous send completes. No-op for synchronous ones.

        An explicit ``timeout`` only bounds this wait, when it runs out the
        send stays pending.

        Raises:
            TransportError: If the request failed or timed out.
        """
        if self._pending is not None:
            self._pending.wait(timeout)
        return self

    def _http_response(self) -> httpx.Response:
        if self._pending is None:
            return self._response

        if not self._pending.resolved:
            raise NotReadyError(self.request_url)

        # Re-raises the TransportError of a failed send
        return self._pending.wait()

    def get_raw_response(self) -> RawResponse:
        """
        Return status code, body and headers of the resolved response.

        Raises:
            NotReadyError: If the send is still pending.
            TransportError: If the asynchronous send failed.
        """
        response = self._http_response()
        return RawResponse(
            status_code=response.status_code,
            body=response.text,
            headers=dict(response.headers),
        )

    def get_http_status_code(self) -> Optional[int]:
        """
        Return the HTTP status code, or None while the send is pending or
        after it failed.
        """
        if not self.resolved:
            return None
        if self._pending is not None and self._pending.error is not None:
            return None
        return self._http_response().status_code

    def get_debug_response(self) -> Optional[Any]:
        """
        Return the decoded hit diagnostics from the validation endpoint.

        Only hits sent in debug mode carry diagnostics. Anything else, including
        pending or failed sends and bodies that are not JSON, gives None.
        """
        if not self._debug or not self.resolved:
            return None

        if self._pending is not None and self._pending.error is not None:
            return None

        body = self._http_response().text
        if not body:
            return None

        try:
            return json.loads(body)
        except ValueError:
            logger.debug("Debug response from %s is not JSON", self.request_url)
            return None

    def __repr__(self) -> str:
        state = "resolved" if self.resolved else "pending"
        return f"<{type(self).__name__} {self.request.method} {self.request_url} {state}>"


class NullAnalyticsResponse(AnalyticsResponse):
    """
    Response of a disabled session. Nothing was sent.
    """

    def __init__(self, request: httpx.Request):
        self.request = request
        self._response = None
        self._pending = None
        self._debug = False

    def get_raw_response(self) -> RawResponse:
        return RawResponse(status_code=None, body="", headers={})

    def get_http_status_code(self) -> Optional[int]:
        return None

    def get_debug_response(self) -> Optional[Any]:
        return None
