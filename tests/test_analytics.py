import json
import threading

import pytest

from measurement_protocol import Analytics, HitParameters
from measurement_protocol.errors import (
    BatchLimitError,
    InvalidOptionError,
    NotReadyError,
    ValidationError,
)
from measurement_protocol.network.transport import Transport
from measurement_protocol.response import NullAnalyticsResponse


@pytest.fixture
def analytics(transport: Transport) -> Analytics:
    return Analytics(transport=transport)


def build(analytics: Analytics) -> Analytics:
    return (
        analytics.set_protocol_version("1")
        .set_tracking_id("UA-XXXX-1")
        .set_client_id("12345678")
        .set_document_path("/mypage")
    )


@pytest.mark.unit
class TestAnalyticsSingleHits:
    """
    Test sending single hits through the session.
    """

    def test_pageview_end_to_end(self, analytics, fake_client) -> None:
        response = build(analytics).send_pageview({"async": False})

        request = fake_client.requests[0]
        assert request.method == "GET"
        assert "t=pageview&v=1&tid=UA-XXXX-1&cid=12345678&dp=%2Fmypage" in str(request.url)
        assert str(request.url).startswith("http://www.google-analytics.com/collect?")
        assert response.get_raw_response().status_code == 200

    def test_ssl_endpoint(self, transport, fake_client) -> None:
        build(Analytics(is_ssl=True, transport=transport)).send_pageview()

        assert str(fake_client.requests[0].url).startswith(
            "https://ssl.google-analytics.com/collect?"
        )

    def test_setters_chain_and_read_back(self, analytics) -> None:
        assert build(analytics) is analytics
        assert analytics.get_tracking_id() == "UA-XXXX-1"
        assert analytics.get("dp") == "/mypage"

    def test_unknown_setter(self, analytics) -> None:
        with pytest.raises(AttributeError):
            analytics.set_documnet_path("/x")

    @pytest.mark.parametrize("missing", ["protocol_version", "tracking_id"])
    def test_missing_required_field(self, analytics, fake_client, missing) -> None:
        build(analytics).set(missing, None)

        with pytest.raises(ValidationError) as exc_info:
            analytics.send_pageview()

        assert exc_info.value.field.startswith(missing)
        assert fake_client.requests == []

    def test_user_id_replaces_client_id(self, analytics, fake_client) -> None:
        build(analytics).set_client_id(None).set_user_id("user-1")

        analytics.send_pageview()

        assert "uid=user-1" in str(fake_client.requests[0].url)

    def test_client_or_user_id_required(self, analytics) -> None:
        build(analytics).set_client_id(None)

        with pytest.raises(ValidationError, match="client_id or user_id"):
            analytics.send_pageview()

    def test_empty_required_values_are_rejected(self, analytics, fake_client) -> None:
        build(analytics).set_event_category("").set_event_action("play")

        with pytest.raises(ValidationError) as exc_info:
            analytics.send_event()
        assert exc_info.value.field == "event_category (ec)"

        analytics.set_event_category("video").set_client_id("")
        with pytest.raises(ValidationError, match="client_id or user_id"):
            analytics.send_event()

        assert fake_client.requests == []

    def test_event_requires_category_and_action(self, analytics, fake_client) -> None:
        build(analytics).set_event_category("video")

        with pytest.raises(ValidationError) as exc_info:
            analytics.send_event()
        assert exc_info.value.field == "event_action (ea)"

        analytics.set_event_action("play").send_event()
        assert "t=event" in str(fake_client.requests[0].url)

    @pytest.mark.parametrize(
        "method, hit_type, fields",
        [
            ("send_screenview", "screenview", {"screen_name": "Home"}),
            ("send_appview", "screenview", {"screen_name": "Home"}),
            ("send_transaction", "transaction", {"transaction_id": "T1"}),
            ("send_item", "item", {"transaction_id": "T1", "item_name": "Shoe"}),
            (
                "send_social",
                "social",
                {"social_network": "fb", "social_action": "like", "social_action_target": "/"},
            ),
            ("send_exception", "exception", {"exception_description": "boom"}),
            ("send_timing", "timing", {"page_load_time": 120}),
        ],
    )
    def test_hit_types(self, analytics, fake_client, method, hit_type, fields) -> None:
        build(analytics)
        for name, value in fields.items():
            analytics.set(name, value)

        getattr(analytics, method)()

        assert str(fake_client.requests[0].url).split("?", 1)[1].startswith(f"t={hit_type}&v=1")

    def test_invalid_options_fail_before_network(self, analytics, fake_client) -> None:
        build(analytics)

        with pytest.raises(InvalidOptionError):
            analytics.send_pageview({"timeout": 0})

        assert fake_client.requests == []

    def test_get_url_does_not_send(self, analytics, fake_client) -> None:
        url = build(analytics).get_url("pageview")

        assert url == (
            "http://www.google-analytics.com/collect?"
            "t=pageview&v=1&tid=UA-XXXX-1&cid=12345678&dp=%2Fmypage"
        )
        assert analytics.get_hit_type() is None
        assert fake_client.requests == []

    def test_reset(self, analytics) -> None:
        build(analytics).reset()

        assert len(analytics.parameters) == 0


@pytest.mark.unit
class TestAnalyticsDebug:

    def test_debug_endpoint_and_payload(self, make_client) -> None:
        payload = {"hitParsingResult": [{"valid": True}], "parserMessage": []}
        client = make_client(body=json.dumps(payload))
        analytics = build(Analytics(is_ssl=True, transport=Transport(client=client)))

        response = analytics.set_debug(True).send_pageview()

        assert str(client.requests[0].url).startswith(
            "https://ssl.google-analytics.com/debug/collect?"
        )
        assert response.get_debug_response() == payload

    def test_debug_disabled_ignores_json_body(self, make_client) -> None:
        client = make_client(body=json.dumps({"hitParsingResult": []}))
        analytics = build(Analytics(transport=Transport(client=client)))

        response = analytics.send_pageview()

        assert response.get_debug_response() is None


@pytest.mark.unit
class TestAnalyticsAsync:

    def test_async_request_and_drain(self, make_client) -> None:
        client = make_client(resolve_immediately=False)
        analytics = build(Analytics(transport=Transport(client=client)))

        response = analytics.set_async_request(True).send_pageview()

        with pytest.raises(NotReadyError):
            response.get_raw_response()

        timer = threading.Timer(0.05, client.resolve_all)
        timer.start()
        try:
            assert analytics.drain_pending() == [response]
        finally:
            timer.cancel()

        assert response.get_raw_response().status_code == 200

    def test_per_call_options_override_session(self, analytics, fake_client) -> None:
        build(analytics).set_options({"async": True, "timeout": 9})

        response = analytics.send_pageview({"async": False})

        assert response.resolved is True
        assert fake_client.timeouts == [9]

    def test_sessions_share_transport_pending(self, transport) -> None:
        first = build(Analytics(transport=transport, options={"async": True}))
        second = build(Analytics(transport=transport, options={"async": True}))

        a = first.send_pageview()
        b = second.send_pageview()

        assert transport.drain_pending() == [a, b]


@pytest.mark.unit
class TestAnalyticsBatch:

    def make_hits(self, count: int):
        return [
            HitParameters(
                {"v": "1", "tid": "UA-XXXX-1", "cid": "1", "t": "pageview", "dp": f"/p{i}"}
            )
            for i in range(count)
        ]

    def test_send_batch(self, analytics, fake_client) -> None:
        hits = self.make_hits(3)

        analytics.send_batch(hits)

        assert len(fake_client.requests) == 1
        request = fake_client.requests[0]
        assert str(request.url) == "http://www.google-analytics.com/batch"
        assert request.content.decode() == "\n".join(h.to_batch_line() for h in hits)

    def test_batch_over_limit(self, analytics, fake_client) -> None:
        with pytest.raises(BatchLimitError):
            analytics.send_batch(self.make_hits(21))

        assert fake_client.requests == []

    def test_batch_hit_without_type(self, analytics) -> None:
        hits = self.make_hits(2)
        hits[1].unset("hit_type")

        with pytest.raises(ValidationError) as exc_info:
            analytics.send_batch(hits)

        assert exc_info.value.field == "hits[1].hit_type (t)"

    def test_enqueue_and_send(self, analytics, fake_client) -> None:
        build(analytics).enqueue_pageview()
        analytics.set_event_category("cat").set_event_action("act").enqueue_event()

        assert analytics.enqueued_count == 2

        analytics.send_enqueued_hits()

        body = fake_client.requests[0].content.decode().split("\n")
        assert body[0].startswith("t=pageview&")
        assert body[1].startswith("t=event&")
        assert analytics.enqueued_count == 0

    def test_enqueue_overflow(self, analytics) -> None:
        build(analytics)
        for _ in range(20):
            analytics.enqueue_pageview()

        with pytest.raises(BatchLimitError):
            analytics.enqueue_pageview()

    def test_send_enqueued_when_empty(self, analytics) -> None:
        with pytest.raises(BatchLimitError):
            analytics.send_enqueued_hits()


@pytest.mark.unit
class TestAnalyticsDisabled:

    def test_disabled_session_never_sends(self, transport, fake_client) -> None:
        analytics = build(Analytics(is_disabled=True, transport=transport))

        response = analytics.send_pageview()
        batch = analytics.send_batch([analytics.parameters.copy()])

        assert isinstance(response, NullAnalyticsResponse)
        assert isinstance(batch, NullAnalyticsResponse)
        assert response.get_raw_response().status_code is None
        assert fake_client.requests == []

    def test_disabled_session_still_validates(self, transport) -> None:
        analytics = Analytics(is_disabled=True, transport=transport)

        with pytest.raises(ValidationError):
            analytics.send_pageview()
