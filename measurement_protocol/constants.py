# -*- coding: utf-8 -*-
import os

from measurement_protocol.meta import get_user_agent

# Collection endpoints
ENDPOINT_HOST_HTTP = "http://www.google-analytics.com"
ENDPOINT_HOST_HTTPS = "https://ssl.google-analytics.com"

COLLECT_PATH = "/collect"
DEBUG_COLLECT_PATH = "/debug/collect"
BATCH_PATH = "/batch"

# Fixed identifier sent as User-Agent with every request
USER_AGENT = get_user_agent()

# Seconds to wait for a response before giving up on a send.
REQUEST_TIMEOUT = int(os.getenv("MP_REQUEST_TIMEOUT", 100))

# Protocol limit for hits per batch request
MAX_HITS_PER_BATCH = 20

# Batch body line separator, the collection endpoint expects LF
BATCH_LINE_SEPARATOR = "\n"

DEFAULT_MAX_WORKERS = 4

PROTOCOL_VERSION = "1"

# Hit types
HIT_TYPE_PAGEVIEW = "pageview"
HIT_TYPE_SCREENVIEW = "screenview"
HIT_TYPE_EVENT = "event"
HIT_TYPE_TRANSACTION = "transaction"
HIT_TYPE_ITEM = "item"
HIT_TYPE_SOCIAL = "social"
HIT_TYPE_EXCEPTION = "exception"
HIT_TYPE_TIMING = "timing"

HIT_TYPES = (
    HIT_TYPE_PAGEVIEW,
    HIT_TYPE_SCREENVIEW,
    HIT_TYPE_EVENT,
    HIT_TYPE_TRANSACTION,
    HIT_TYPE_ITEM,
    HIT_TYPE_SOCIAL,
    HIT_TYPE_EXCEPTION,
    HIT_TYPE_TIMING,
)

PRODUCT_ACTIONS = (
    "detail",
    "click",
    "add",
    "remove",
    "checkout",
    "checkout_option",
    "purchase",
    "refund",
)

PROMOTION_ACTIONS = ("view", "click")
