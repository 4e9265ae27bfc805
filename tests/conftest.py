from __future__ import annotations

from typing import Callable, List

import httpx
import pytest

from keepalive.app.config import Settings

API_URL = "https://api.test/v1/account/profile"


class Recorder:
    """MockTransport handler that records requests and dispatches by host."""

    def __init__(self, routes: dict[str, Callable[[httpx.Request], httpx.Response]]):
        self.routes = routes
        self.calls: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self.routes.get(request.url.host)
        if handler is None:
            raise httpx.ConnectError(f"no route to {request.url.host}", request=request)
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @staticmethod
    def profile_ok(email: str = "a@b.com"):
        return lambda request: httpx.Response(200, json={"user": {"email": email}})

    @staticmethod
    def status(code: int):
        return lambda request: httpx.Response(code)

    @staticmethod
    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)


def _make_settings(**overrides) -> Settings:
    values = dict(
        KOYEB_TOKEN="tok-123",
        KOYEB_APP_URL=None,
        API_URL=API_URL,
        KV_DIR=None,
        LOG_LIMIT=20,
        UA="keepalive-tests",
        INTERVAL_S=600.0,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    return _make_settings


@pytest.fixture
def recorder() -> type[Recorder]:
    return Recorder
