"""
Bulk-SMS gateway shim.

    import bulksms

    bulksms.send("8801XXXXXXXXX", "Your code is 1234")   # -> "Success"

Gateway endpoint and credentials come from BULKSMS_URL, BULKSMS_USERNAME and
BULKSMS_PASSWORD (see bulksms.core.config.Settings).
"""

from bulksms.core.exceptions import (
    BulkSmsException,
    ConfigurationError,
    ExternalServiceError,
    TransportError,
    UnknownStatusCode,
)
from bulksms.integrations.gateway import STATUS_MESSAGES, SUCCESS_CODE, GatewayClient
from bulksms.integrations.sms_base import SmsProvider, get_sms_client, reset_sms_clients
from bulksms.schemas.sms import GatewayConfig, SendRequest, SendResult

__version__ = "0.1.0"


def send(numbers: str, text: str) -> str:
    """Send through the configured provider and return the outcome description."""
    return get_sms_client().send(numbers, text)


__all__ = [
    "send",
    "get_sms_client",
    "reset_sms_clients",
    "SmsProvider",
    "GatewayClient",
    "GatewayConfig",
    "SendRequest",
    "SendResult",
    "STATUS_MESSAGES",
    "SUCCESS_CODE",
    "BulkSmsException",
    "ConfigurationError",
    "ExternalServiceError",
    "TransportError",
    "UnknownStatusCode",
]
