# tests/conftest.py
"""
Pytest fixtures for the bulk-SMS shim.

- Every test starts from a clean environment: gateway/provider variables unset,
  settings cache and provider clients dropped.
- HTTP goes through httpx.MockTransport; no test touches the network.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import List
from urllib.parse import parse_qs

import httpx
import pytest

from bulksms.core.config import get_settings
from bulksms.core.logging import reset_logging
from bulksms.integrations.gateway import GatewayClient
from bulksms.integrations.sms_base import reset_sms_clients
from bulksms.schemas.sms import GatewayConfig

GATEWAY_URL = "https://gateway.test/api/send"

_ENV_KEYS = (
    "BULKSMS_URL",
    "BULKSMS_USERNAME",
    "BULKSMS_PASSWORD",
    "BULKSMS_TIMEOUT",
    "SMS_PROVIDER",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_PATH",
    "EAGER_SIDE_EFFECTS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> Iterator[None]:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    reset_sms_clients()
    yield
    reset_sms_clients()
    get_settings.cache_clear()


@pytest.fixture
def clean_logging() -> Iterator[None]:
    yield
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    reset_logging()


@pytest.fixture
def gateway_env(monkeypatch) -> None:
    monkeypatch.setenv("BULKSMS_URL", GATEWAY_URL)
    monkeypatch.setenv("BULKSMS_USERNAME", "shop")
    monkeypatch.setenv("BULKSMS_PASSWORD", "s3cret-pass")


@pytest.fixture
def gateway_config() -> GatewayConfig:
    return GatewayConfig(url=GATEWAY_URL, username="shop", password="s3cret-pass")


class Recorder:
    """Collects requests seen by the mock gateway."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def form(self, index: int = -1) -> dict:
        body = self.requests[index].content.decode()
        return {k: v[0] for k, v in parse_qs(body, keep_blank_values=True).items()}


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def make_client(gateway_config, recorder) -> Iterator[Callable[..., GatewayClient]]:
    """Build a GatewayClient whose replies come from `reply` (a body string or a handler)."""
    clients: List[GatewayClient] = []

    def _make(reply, *, status_code: int = 200, config: GatewayConfig | None = None) -> GatewayClient:
        def handler(request: httpx.Request) -> httpx.Response:
            recorder.requests.append(request)
            if callable(reply):
                return reply(request)
            return httpx.Response(status_code, text=reply)

        client = GatewayClient(config or gateway_config, transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _make
    for c in clients:
        c.close()
