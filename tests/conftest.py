from concurrent.futures import Future
from typing import Dict, List, Optional

import httpx
import pytest

from measurement_protocol.network.transport import Transport


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network access")


class FakeAsyncClient:
    """
    Records every request and answers with a canned response.

    With ``resolve_immediately=False`` the futures stay pending until
    ``resolve_all()`` is called, which simulates a slow network.
    """

    def __init__(
        self,
        status_code: int = 200,
        body: str = "",
        headers: Optional[Dict[str, str]] = None,
        resolve_immediately: bool = True,
        error: Optional[Exception] = None,
    ):
        self.status_code = status_code
        self.body = body
        self.headers = headers or {}
        self.resolve_immediately = resolve_immediately
        self.error = error
        self.requests: List[httpx.Request] = []
        self.timeouts: List[float] = []
        self.futures: List[Future] = []
        self.closed = False

    def send_async(self, request: httpx.Request, timeout: float) -> Future:
        self.requests.append(request)
        self.timeouts.append(timeout)
        future: Future = Future()
        self.futures.append(future)
        if self.resolve_immediately:
            self._resolve(future, request)
        return future

    def resolve_all(self) -> None:
        for future, request in zip(self.futures, self.requests):
            if not future.done():
                self._resolve(future, request)

    def _resolve(self, future: Future, request: httpx.Request) -> None:
        if self.error is not None:
            future.set_exception(self.error)
            return
        future.set_result(
            httpx.Response(
                self.status_code,
                text=self.body,
                headers=self.headers,
                request=request,
            )
        )

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client() -> FakeAsyncClient:
    return FakeAsyncClient()


@pytest.fixture
def make_client():
    """
    Factory for FakeAsyncClient with custom behaviour.
    """
    return FakeAsyncClient


@pytest.fixture
def transport(fake_client: FakeAsyncClient) -> Transport:
    return Transport(client=fake_client)


@pytest.fixture
def base_hit() -> Dict[str, str]:
    return {
        "protocol_version": "1",
        "tracking_id": "UA-XXXX-1",
        "client_id": "12345678",
        "document_path": "/mypage",
    }
