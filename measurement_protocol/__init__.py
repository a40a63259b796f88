# -*- coding: utf-8 -*-

__author__ = """ga-measurement-protocol contributors"""

import os

ROOT = os.path.dirname(os.path.abspath(__file__))

with open(os.path.join(ROOT, 'VERSION')) as version_file:
    VERSION = version_file.read().strip()

from measurement_protocol.analytics import Analytics  # noqa: E402
from measurement_protocol.config.options import RequestOptions  # noqa: E402
from measurement_protocol.errors import (  # noqa: E402
    BatchLimitError,
    ClientUnavailableError,
    InvalidOptionError,
    MeasurementProtocolError,
    NotReadyError,
    TransportError,
    ValidationError,
)
from measurement_protocol.network.transport import Transport  # noqa: E402
from measurement_protocol.parameters import HitParameters  # noqa: E402
from measurement_protocol.response import (  # noqa: E402
    AnalyticsResponse,
    NullAnalyticsResponse,
    RawResponse,
)

__all__ = [
    "VERSION",
    "Analytics",
    "AnalyticsResponse",
    "BatchLimitError",
    "ClientUnavailableError",
    "HitParameters",
    "InvalidOptionError",
    "MeasurementProtocolError",
    "NotReadyError",
    "NullAnalyticsResponse",
    "RawResponse",
    "RequestOptions",
    "Transport",
    "TransportError",
    "ValidationError",
]
