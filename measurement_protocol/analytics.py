"""
Session facade for building and sending Measurement Protocol hits.

Example::

    analytics = Analytics(is_ssl=True)
    analytics.set_protocol_version("1") \\
        .set_tracking_id("UA-26293728-11") \\
        .set_client_id("12345678") \\
        .set_document_path("/mypage")

    response = analytics.set_debug(True).send_pageview()
    print(response.get_debug_response())
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import httpx

from measurement_protocol.config.log_codes import SESSION_DISABLED, SESSION_ENQUEUED
from measurement_protocol.config.options import RequestOptions
from measurement_protocol.constants import (
    BATCH_LINE_SEPARATOR,
    BATCH_PATH,
    COLLECT_PATH,
    DEBUG_COLLECT_PATH,
    ENDPOINT_HOST_HTTP,
    ENDPOINT_HOST_HTTPS,
    HIT_TYPE_EVENT,
    HIT_TYPE_EXCEPTION,
    HIT_TYPE_ITEM,
    HIT_TYPE_PAGEVIEW,
    HIT_TYPE_SCREENVIEW,
    HIT_TYPE_SOCIAL,
    HIT_TYPE_TIMING,
    HIT_TYPE_TRANSACTION,
    MAX_HITS_PER_BATCH,
)
from measurement_protocol.errors import BatchLimitError, ValidationError
from measurement_protocol.network.transport import Transport
from measurement_protocol.parameters import HitParameters
from measurement_protocol.parameters.fields import FIELDS_BY_NAME
from measurement_protocol.response import AnalyticsResponse, NullAnalyticsResponse

logger = logging.getLogger(__name__)

OptionsType = Optional[Union[Mapping[str, Any], RequestOptions]]

# Fields every hit needs, client_id may be replaced by user_id
REQUIRED_FIELDS = ("protocol_version", "tracking_id")

REQUIRED_BY_HIT_TYPE: Dict[str, Tuple[str, ...]] = {
    HIT_TYPE_PAGEVIEW: (),
    HIT_TYPE_SCREENVIEW: ("screen_name",),
    HIT_TYPE_EVENT: ("event_category", "event_action"),
    HIT_TYPE_TRANSACTION: ("transaction_id",),
    HIT_TYPE_ITEM: ("transaction_id", "item_name"),
    HIT_TYPE_SOCIAL: ("social_network", "social_action", "social_action_target"),
    HIT_TYPE_EXCEPTION: (),
    HIT_TYPE_TIMING: (),
}


def validate_hit(hit: HitParameters, hit_type: str) -> None:
    """
    Check that ``hit`` has the minimum fields for ``hit_type``.

    Raises:
        ValidationError: Naming the first missing field.
    """
    if hit_type not in REQUIRED_BY_HIT_TYPE:
        raise ValidationError("hit_type (t)", f"unsupported hit type {hit_type!r}")

    hit.require(*REQUIRED_FIELDS)

    if not hit.get("client_id") and not hit.get("user_id"):
        raise ValidationError(
            "client_id (cid)", "either client_id or user_id is required"
        )

    hit.require(*REQUIRED_BY_HIT_TYPE[hit_type])


class Analytics:
    """
    Builds hits with fluent setters and dispatches them through a Transport.

    ``set_<field>`` calls for every field in the field table are forwarded to
    the session's HitParameters and return the session, so calls chain.
    Sessions may share one Transport to share its pending requests.
    """

    def __init__(
        self,
        is_ssl: bool = False,
        is_disabled: bool = False,
        transport: Optional[Transport] = None,
        parameters: Optional[HitParameters] = None,
        options: OptionsType = None,
    ):
        self.is_ssl = is_ssl
        self.is_disabled = is_disabled
        self.transport = transport if transport is not None else Transport()
        self.parameters = parameters if parameters is not None else HitParameters()
        self._options = RequestOptions.normalize(options)
        self._debug = False
        self._enqueued: List[HitParameters] = []

    # Configuration

    @property
    def options(self) -> RequestOptions:
        return self._options

    @property
    def is_debug(self) -> bool:
        return self._debug

    def set_debug(self, debug: bool) -> Analytics:
        """
        Route single hits to the validation endpoint, which answers with
        hit diagnostics instead of recording the hit.
        """
        self._debug = bool(debug)
        return self

    def set_async_request(self, is_async: bool) -> Analytics:
        self._options = self._options.merge({"async": is_async})
        return self

    def set_options(self, options: OptionsType) -> Analytics:
        self._options = self._options.merge(options)
        return self

    def reset(self) -> Analytics:
        """
        Start a new hit with empty parameters.
        """
        self.parameters = HitParameters()
        return self

    # Hit building

    def set(self, name: str, value: Any, index: Optional[int] = None) -> Analytics:
        self.parameters.set(name, value, index)
        return self

    def get(self, name: str, index: Optional[int] = None) -> Optional[str]:
        return self.parameters.get(name, index)

    def add_product(self, **fields: Any) -> Analytics:
        self.parameters.add_product(**fields)
        return self

    def add_impression(self, list_name: str, **fields: Any) -> Analytics:
        self.parameters.add_impression(list_name, **fields)
        return self

    def add_promotion(self, **fields: Any) -> Analytics:
        self.parameters.add_promotion(**fields)
        return self

    def __getattr__(self, attr: str):
        prefix, _, name = attr.partition("_")
        if name in FIELDS_BY_NAME:
            if prefix == "set":
                def setter(value: Any, index: Optional[int] = None) -> Analytics:
                    self.parameters.set(name, value, index)
                    return self

                setter.__name__ = attr
                return setter

            if prefix == "get":
                def getter(index: Optional[int] = None) -> Optional[str]:
                    return self.parameters.get(name, index)

                getter.__name__ = attr
                return getter

        raise AttributeError(
            f"'{type(self).__name__}' object has no attribute '{attr}'"
        )

    # Endpoints

    def _host(self) -> str:
        return ENDPOINT_HOST_HTTPS if self.is_ssl else ENDPOINT_HOST_HTTP

    def get_endpoint(self) -> str:
        path = DEBUG_COLLECT_PATH if self._debug else COLLECT_PATH
        return f"{self._host()}{path}"

    def get_batch_endpoint(self) -> str:
        return f"{self._host()}{BATCH_PATH}"

    def get_url(self, hit_type: Optional[str] = None) -> str:
        """
        Return the URL a single hit would be sent to, without sending it.
        """
        hit = self.parameters
        if hit_type is not None:
            hit = hit.copy().set("hit_type", hit_type)
        return f"{self.get_endpoint()}?{hit.to_query_string()}"

    # Single hits

    def send_hit(self, hit_type: str, options: OptionsType = None) -> AnalyticsResponse:
        """
        Validate the current hit as ``hit_type`` and send it.

        Args:
            hit_type: One of the protocol hit types.
            options: Per-call request options on top of the session options.

        Returns:
            AnalyticsResponse: The response, pending when sent asynchronously.

        Raises:
            ValidationError: If required fields are missing.
            InvalidOptionError: On invalid options.
            TransportError: If a synchronous send fails.
        """
        opts = self._options.merge(options)

        self.parameters.set("hit_type", hit_type)
        validate_hit(self.parameters, hit_type)

        url = f"{self.get_endpoint()}?{self.parameters.to_query_string()}"

        if self.is_disabled:
            logger.debug(SESSION_DISABLED, extra={"hit_type": hit_type})
            return NullAnalyticsResponse(httpx.Request("GET", url))

        return self.transport.send_single(url, opts, debug=self._debug)

    def send_pageview(self, options: OptionsType = None) -> AnalyticsResponse:
        return self.send_hit(HIT_TYPE_PAGEVIEW, options)

    def send_screenview(self, options: OptionsType = None) -> AnalyticsResponse:
        return self.send_hit(HIT_TYPE_SCREENVIEW, options)

    # App views are screenviews on the wire
    send_appview = send_screenview

    def send_event(self, options: OptionsType = None) -> AnalyticsResponse:
        return self.send_hit(HIT_TYPE_EVENT, options)

    def send_transaction(self, options: OptionsType = None) -> AnalyticsResponse:
        return self.send_hit(HIT_TYPE_TRANSACTION, options)

    def send_item(self, options: OptionsType = None) -> AnalyticsResponse:
        return self.send_hit(HIT_TYPE_ITEM, options)

    def send_social(self, options: OptionsType = None) -> AnalyticsResponse:
        return self.send_hit(HIT_TYPE_SOCIAL, options)

    def send_exception(self, options: OptionsType = None) -> AnalyticsResponse:
        return self.send_hit(HIT_TYPE_EXCEPTION, options)

    def send_timing(self, options: OptionsType = None) -> AnalyticsResponse:
        return self.send_hit(HIT_TYPE_TIMING, options)

    # Batches

    def send_batch(
        self, hits: Sequence[HitParameters], options: OptionsType = None
    ) -> AnalyticsResponse:
        """
        Send pre-built hits in a single batch request, in the given order.

        Every hit must carry its own hit type.

        Raises:
            BatchLimitError: On an empty batch or more than 20 hits.
            ValidationError: If a hit misses required fields.
        """
        opts = self._options.merge(options)

        if not hits or len(hits) > MAX_HITS_PER_BATCH:
            raise BatchLimitError(len(hits), MAX_HITS_PER_BATCH)

        for position, hit in enumerate(hits):
            try:
                hit_type = hit.get("hit_type")
                if hit_type is None:
                    raise ValidationError("hit_type (t)", "required field is missing")
                validate_hit(hit, hit_type)
            except ValidationError as e:
                raise ValidationError(f"hits[{position}].{e.field}", e.constraint) from e

        lines = [hit.to_batch_line() for hit in hits]
        url = self.get_batch_endpoint()

        if self.is_disabled:
            logger.debug(SESSION_DISABLED, extra={"hits": len(lines)})
            return NullAnalyticsResponse(
                httpx.Request("POST", url, content=BATCH_LINE_SEPARATOR.join(lines))
            )

        return self.transport.send_batch(url, lines, opts)

    @property
    def enqueued_count(self) -> int:
        return len(self._enqueued)

    def enqueue_hit(self, hit_type: str) -> Analytics:
        """
        Snapshot the current hit as ``hit_type`` for a later batch send.

        Raises:
            BatchLimitError: If the queue already holds the maximum batch size.
            ValidationError: If required fields are missing.
        """
        if len(self._enqueued) >= MAX_HITS_PER_BATCH:
            raise BatchLimitError(len(self._enqueued) + 1, MAX_HITS_PER_BATCH)

        self.parameters.set("hit_type", hit_type)
        validate_hit(self.parameters, hit_type)
        self._enqueued.append(self.parameters.copy())

        logger.debug(
            SESSION_ENQUEUED, extra={"hit_type": hit_type, "enqueued": len(self._enqueued)}
        )
        return self

    def enqueue_pageview(self) -> Analytics:
        return self.enqueue_hit(HIT_TYPE_PAGEVIEW)

    def enqueue_screenview(self) -> Analytics:
        return self.enqueue_hit(HIT_TYPE_SCREENVIEW)

    enqueue_appview = enqueue_screenview

    def enqueue_event(self) -> Analytics:
        return self.enqueue_hit(HIT_TYPE_EVENT)

    def enqueue_transaction(self) -> Analytics:
        return self.enqueue_hit(HIT_TYPE_TRANSACTION)

    def enqueue_item(self) -> Analytics:
        return self.enqueue_hit(HIT_TYPE_ITEM)

    def enqueue_social(self) -> Analytics:
        return self.enqueue_hit(HIT_TYPE_SOCIAL)

    def enqueue_exception(self) -> Analytics:
        return self.enqueue_hit(HIT_TYPE_EXCEPTION)

    def enqueue_timing(self) -> Analytics:
        return self.enqueue_hit(HIT_TYPE_TIMING)

    def send_enqueued_hits(self, options: OptionsType = None) -> AnalyticsResponse:
        """
        Send every enqueued hit as one batch and empty the queue.

        The queue is kept when the send raises, so it can be retried.
        """
        response = self.send_batch(self._enqueued, options)
        self._enqueued = []
        return response

    def empty_queue(self) -> Analytics:
        self._enqueued = []
        return self

    # Pending requests

    def drain_pending(self, raise_errors: bool = True) -> List[AnalyticsResponse]:
        return self.transport.drain_pending(raise_errors=raise_errors)

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> Analytics:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
