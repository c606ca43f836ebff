# bulksms/integrations/sms_base.py
from __future__ import annotations

import threading
from typing import Dict, Optional, Protocol

from bulksms.core.config import get_settings
from bulksms.core.exceptions import ConfigurationError
from bulksms.schemas.sms import SendResult


class SmsProvider(Protocol):
    def send(self, numbers: str, text: str) -> str: ...

    def send_detailed(self, numbers: str, text: str) -> SendResult: ...

    def close(self) -> None: ...


_clients: Dict[str, SmsProvider] = {}
_lock = threading.Lock()


def _build(provider: str) -> SmsProvider:
    if provider == "bulksms":
        from bulksms.integrations.gateway import GatewayClient

        s = get_settings()
        return GatewayClient(s.gateway_config(), timeout=s.BULKSMS_TIMEOUT)
    raise ConfigurationError(f"Unsupported SMS_PROVIDER: {provider}", code="sms_provider_unsupported")


def get_sms_client(name: Optional[str] = None) -> SmsProvider:
    """
    Client for the provider named `name`, or by SMS_PROVIDER when omitted.

    One client per provider name is kept for the life of the process.
    """
    provider = (name or get_settings().SMS_PROVIDER or "").strip().lower()
    with _lock:
        client = _clients.get(provider)
        if client is None:
            client = _clients[provider] = _build(provider)
        return client


def reset_sms_clients() -> None:
    """Close and forget every cached client (settings reloads, tests)."""
    with _lock:
        for client in _clients.values():
            client.close()
        _clients.clear()
