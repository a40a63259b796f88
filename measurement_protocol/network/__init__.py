from .client import AsyncHttpClient, HttpxAsyncClient, default_client_factory
from .pending import PendingRequest, PendingRequests

__all__ = [
    "AsyncHttpClient",
    "HttpxAsyncClient",
    "default_client_factory",
    "PendingRequest",
    "PendingRequests",
]
