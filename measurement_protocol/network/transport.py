"""
Dispatches serialized hits to the collection endpoint.

One call produces exactly one HTTP request. Synchronous sends block until the
response arrives or the timeout elapses; asynchronous sends are registered in
the transport's pending collection and only complete for sure once the caller
drains it. There are no retries.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

import httpx

from measurement_protocol.config.log_codes import (
    CLIENT_UNAVAILABLE,
    COMPLETED,
    DISPATCHED,
    FAILED,
    PENDING_DRAINED,
    PENDING_DRAINING,
    PENDING_REGISTERED,
)
from measurement_protocol.config.options import RequestOptions
from measurement_protocol.constants import (
    BATCH_LINE_SEPARATOR,
    MAX_HITS_PER_BATCH,
    USER_AGENT,
)
from measurement_protocol.errors import (
    BatchLimitError,
    ClientUnavailableError,
    TransportError,
)
from measurement_protocol.logs_helpers import log_call
from measurement_protocol.response import AnalyticsResponse
from .client import AsyncHttpClient, default_client_factory
from .pending import PendingRequest, PendingRequests

logger = logging.getLogger(__name__)

OptionsType = Optional[Union[Mapping[str, Any], RequestOptions]]


class Transport:
    """
    Turns a hit URL (plus an optional batch body) into an in-flight request.

    The HTTP client is resolved lazily: either the injected ``client`` or the
    result of ``client_factory`` on the first send. A client the transport
    builds itself is closed by ``close()``; an injected one is left to the
    caller.
    """

    def __init__(
        self,
        client: Optional[AsyncHttpClient] = None,
        client_factory: Optional[Callable[[], AsyncHttpClient]] = default_client_factory,
        user_agent: str = USER_AGENT,
    ):
        self._client = client
        self._client_factory = client_factory
        self._owns_client = False
        self.user_agent = user_agent
        self._pending = PendingRequests()

    @property
    def pending(self) -> PendingRequests:
        return self._pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def _get_client(self) -> AsyncHttpClient:
        if self._client is not None:
            return self._client

        if self._client_factory is None:
            logger.error(CLIENT_UNAVAILABLE, extra={"reason": "no client factory"})
            raise ClientUnavailableError(reason="No client was injected and no client factory is configured.")

        try:
            client = self._client_factory()
        except Exception as e:
            logger.error(CLIENT_UNAVAILABLE, extra={"reason": str(e)})
            raise ClientUnavailableError(reason=str(e)) from e

        if client is None:
            logger.error(CLIENT_UNAVAILABLE, extra={"reason": "factory returned None"})
            raise ClientUnavailableError(reason="The client factory returned no client.")

        self._client = client
        self._owns_client = True
        return client

    def _headers(self) -> dict:
        return {"User-Agent": self.user_agent}

    @log_call(show_args=True)
    def send_single(
        self, url: str, options: OptionsType = None, debug: bool = False
    ) -> AnalyticsResponse:
        """
        Send one hit carried in the query string of ``url``.

        Args:
            url: Endpoint URL including the encoded hit.
            options: Request options, see ``RequestOptions``.
            debug: Whether the URL targets the validation endpoint.

        Returns:
            AnalyticsResponse: Resolved for synchronous sends, pending otherwise.

        Raises:
            InvalidOptionError: Before anything is sent, on bad options.
            ClientUnavailableError: If no HTTP client can be obtained.
            TransportError: If a synchronous send fails or times out.
        """
        opts = RequestOptions.normalize(options)
        request = httpx.Request("GET", url, headers=self._headers())
        return self._send(request, opts, debug=debug)

    @log_call(show_args=False)
    def send_batch(
        self, url: str, hit_lines: Sequence[str], options: OptionsType = None
    ) -> AnalyticsResponse:
        """
        Send several hits in one request body, one hit per line.

        The batch must hold between 1 and ``MAX_HITS_PER_BATCH`` lines; larger
        batches are rejected, not split.

        Raises:
            BatchLimitError: Before anything is sent, on an empty or oversized batch.
            InvalidOptionError: Before anything is sent, on bad options.
            ClientUnavailableError: If no HTTP client can be obtained.
            TransportError: If a synchronous send fails or times out.
        """
        opts = RequestOptions.normalize(options)

        lines = list(hit_lines)
        if not lines or len(lines) > MAX_HITS_PER_BATCH:
            raise BatchLimitError(len(lines), MAX_HITS_PER_BATCH)

        request = httpx.Request(
            "POST",
            url,
            headers=self._headers(),
            content=BATCH_LINE_SEPARATOR.join(lines).encode("utf-8"),
        )
        return self._send(request, opts, hit_count=len(lines))

    def _send(
        self,
        request: httpx.Request,
        opts: RequestOptions,
        debug: bool = False,
        hit_count: int = 1,
    ) -> AnalyticsResponse:
        client = self._get_client()
        url = str(request.url)

        logger.debug(
            DISPATCHED,
            extra={"url": url, "async": opts.async_, "hits": hit_count},
        )
        try:
            future = client.send_async(request, opts.timeout)
        except Exception as e:
            logger.warning(FAILED, extra={"url": url, "error": repr(e)})
            raise TransportError(url, e) from e

        pending = PendingRequest(request, future, opts.timeout)

        if opts.async_:
            response = AnalyticsResponse(request, pending=pending, debug=debug)
            self._pending.add(response)
            logger.debug(
                PENDING_REGISTERED, extra={"url": url, "pending": len(self._pending)}
            )
            return response

        try:
            http_response = pending.wait()
        except TransportError as e:
            logger.warning(FAILED, extra={"url": url, "error": repr(e.cause)})
            raise

        logger.debug(
            COMPLETED, extra={"url": url, "status_code": http_response.status_code}
        )
        return AnalyticsResponse(request, response=http_response, debug=debug)

    def drain_pending(self, raise_errors: bool = True) -> List[AnalyticsResponse]:
        """
        Wait for every pending send in registration order and clear the
        collection.

        Args:
            raise_errors: Raise the first ``TransportError`` once every pending
                send has been waited for. Each response keeps its own outcome
                either way.

        Returns:
            List[AnalyticsResponse]: The drained responses, now resolved.
        """
        responses = self._pending.take_all()
        logger.debug(PENDING_DRAINING, extra={"pending": len(responses)})

        first_error: Optional[TransportError] = None
        for response in responses:
            try:
                response.wait()
            except TransportError as e:
                logger.warning(FAILED, extra={"url": e.url, "error": repr(e.cause)})
                if first_error is None:
                    first_error = e

        logger.debug(
            PENDING_DRAINED,
            extra={
                "drained": len(responses),
                "failed": sum(1 for r in responses if r.pending.error is not None),
            },
        )

        if raise_errors and first_error is not None:
            raise first_error

        return responses

    def close(self) -> None:
        """
        Close the HTTP client if this transport created it.
        """
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None
            self._owns_client = False

    def __enter__(self) -> Transport:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
