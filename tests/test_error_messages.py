"""
Tests for error messages raised by the client.
"""
import httpx
import pytest

from measurement_protocol.errors import (
    BatchLimitError,
    ClientUnavailableError,
    InvalidOptionError,
    MeasurementProtocolError,
    NotReadyError,
    TransportError,
    ValidationError,
)


@pytest.mark.unit
class TestErrorMessages:
    """Error messages should name what went wrong and where."""

    def test_all_errors_share_the_base_class(self):
        errors = [
            ValidationError("tracking_id", "required field is missing"),
            BatchLimitError(21, 20),
            InvalidOptionError("timeout", "must be positive"),
            ClientUnavailableError(),
            TransportError("http://example.com", OSError("boom")),
            NotReadyError("http://example.com"),
        ]

        for error in errors:
            assert isinstance(error, MeasurementProtocolError)
            assert error.message == str(error)

    def test_validation_error_names_field_and_constraint(self):
        error = ValidationError("quantity", "expected an integer")

        assert error.field == "quantity"
        assert error.constraint == "expected an integer"
        assert "'quantity'" in str(error)
        assert "expected an integer" in str(error)

    def test_batch_limit_error_reports_counts(self):
        error = BatchLimitError(25, 20)

        assert isinstance(error, ValidationError)
        assert error.field == "batch"
        assert error.count == 25
        assert error.limit == 20
        assert "at most 20 hits, got 25" in str(error)

    def test_empty_batch_error(self):
        error = BatchLimitError(0, 20)

        assert "at least one hit" in str(error)

    def test_invalid_option_error(self):
        error = InvalidOptionError("async", "the async option must be boolean")

        assert error.option == "async"
        assert "'async'" in str(error)
        assert "must be boolean" in str(error)

    def test_client_unavailable_without_reason(self):
        error = ClientUnavailableError()

        assert error.reason is None
        assert "Details" not in str(error)
        assert "HTTP client" in str(error)

    def test_client_unavailable_includes_reason(self):
        error = ClientUnavailableError(reason="factory exploded")

        assert "Details: factory exploded" in str(error)

    def test_transport_error_keeps_cause(self):
        cause = httpx.ConnectTimeout("timed out")
        error = TransportError("http://www.google-analytics.com/collect", cause)

        assert error.cause is cause
        assert error.url == "http://www.google-analytics.com/collect"
        assert "ConnectTimeout" in str(error)

    def test_not_ready_error_is_actionable(self):
        error = NotReadyError("http://www.google-analytics.com/collect?v=1")

        assert "still pending" in str(error)
        assert "wait()" in str(error)
