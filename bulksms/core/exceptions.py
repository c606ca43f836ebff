# bulksms/core/exceptions.py
from __future__ import annotations

"""
Exceptions raised by the bulk-SMS gateway shim.

- BulkSmsException: base, carries message / machine code / extra context
- ConfigurationError: missing or invalid settings, unknown provider name
- ExternalServiceError: the gateway could not be used
    - TransportError: request did not complete or the reply is unreadable
    - UnknownStatusCode: reply carries a status code outside the known table

Gateway-reported rejections (documented non-success codes) are not exceptions:
they come back as ordinary results.
"""

from typing import Any, Dict, Optional


class BulkSmsException(Exception):
    """Base domain exception."""
    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        *,
        extra: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.extra = extra or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": type(self).__name__, "message": self.message}
        if self.code:
            body["code"] = self.code
        if self.extra:
            body["extra"] = self.extra
        return body


class ConfigurationError(BulkSmsException):
    """Settings are missing or invalid."""


class ExternalServiceError(BulkSmsException):
    """External service errors."""


class TransportError(ExternalServiceError):
    """The HTTP exchange with the gateway failed or returned an unreadable reply."""
    def __init__(self, message: str, *, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="bulksms_transport_error", extra=extra)


class UnknownStatusCode(ExternalServiceError):
    """The gateway replied with a status code missing from the known table."""
    def __init__(self, status_code: int, raw: Optional[str] = None):
        self.status_code = status_code
        self.raw = raw
        super().__init__(
            f"Unknown gateway status code: {status_code}",
            code="bulksms_unknown_status",
            extra={"status_code": status_code},
        )


__all__ = [
    "BulkSmsException",
    "ConfigurationError",
    "ExternalServiceError",
    "TransportError",
    "UnknownStatusCode",
]
