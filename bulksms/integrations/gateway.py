# bulksms/integrations/gateway.py
from __future__ import annotations

import uuid
from types import MappingProxyType
from typing import Dict, Mapping, Optional

import httpx

from bulksms.core.exceptions import TransportError, UnknownStatusCode
from bulksms.core.logging import bound_context, get_logger
from bulksms.schemas.sms import SUCCESS_CODE, GatewayConfig, SendRequest, SendResult

log = get_logger(__name__)

# Gateway reply codes. Texts are kept byte-for-byte, trailing spaces included.
STATUS_MESSAGES: Mapping[int, str] = MappingProxyType(
    {
        1000: "Invalid user or Password",
        1002: "Empty Number",
        1003: "Invalid message or empty message",
        1004: "Invalid number",
        1005: "All Number is Invalid ",
        1006: "insufficient Balance ",
        1009: "Inactive Account",
        1010: "Max number limit exceeded",
        SUCCESS_CODE: "Success",
    }
)

DEFAULT_TIMEOUT = 15.0


def build_form(config: GatewayConfig, request: SendRequest) -> Dict[str, str]:
    """The four form fields the gateway expects, always all present."""
    return {
        "username": config.username,
        "password": config.password,
        "number": request.numbers,
        "message": request.text,
    }


def parse_status_code(body: str) -> int:
    """
    Leading status code of a gateway reply ("1101|..." -> 1101).

    Only the text before the first '|' is read; the rest of the reply is ignored.
    """
    token = body.split("|", 1)[0].strip()
    if not (token.isascii() and token.isdigit()):
        raise TransportError(
            "Unparseable gateway response",
            extra={"status_token": token[:32]},
        )
    return int(token)


def describe_status(code: int, raw: Optional[str] = None) -> str:
    try:
        return STATUS_MESSAGES[code]
    except KeyError:
        raise UnknownStatusCode(code, raw=raw) from None


def _is_gateway_reply(body: str) -> bool:
    try:
        return parse_status_code(body) in STATUS_MESSAGES
    except TransportError:
        return False


class GatewayClient:
    """
    Sends one SMS per call through the bulk-SMS HTTP gateway.

    The request is a form-encoded POST carrying username, password, number and
    message; the reply is a '|'-delimited string whose first field is a status code.
    """

    provider = "bulksms"

    def __init__(
        self,
        config: GatewayConfig,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.config = config
        self._client = httpx.Client(
            timeout=timeout if timeout is not None else DEFAULT_TIMEOUT,
            transport=transport,
        )

    def __enter__(self) -> "GatewayClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def send(self, numbers: str, text: str) -> str:
        """Send `text` to `numbers` and return the gateway's outcome description."""
        return self.send_detailed(numbers, text).description

    def send_detailed(self, numbers: str, text: str) -> SendResult:
        """
        Same exchange as send(), returning the numeric code alongside the text.

        Raises TransportError when the request does not complete or the reply
        cannot be read, UnknownStatusCode when the code is not in STATUS_MESSAGES.
        """
        request = SendRequest(numbers=str(numbers), text=str(text))
        with bound_context(request_id=uuid.uuid4().hex, provider=self.provider):
            log.debug("bulksms_send_started", text_length=len(request.text))
            body = self._post(build_form(self.config, request))
            try:
                code = parse_status_code(body)
            except TransportError:
                log.warning("bulksms_unparseable_response", body_length=len(body))
                raise
            try:
                description = describe_status(code, raw=body)
            except UnknownStatusCode:
                log.error("bulksms_unknown_status", status_code=code)
                raise

            result = SendResult(code=code, description=description, raw=body)
            log.info(
                "bulksms_send_completed",
                status_code=result.code,
                description=result.description.strip(),
                success=result.success,
            )
            return result

    def _post(self, form: Dict[str, str]) -> str:
        try:
            resp = self._client.post(self.config.url, data=form)
            resp.raise_for_status()
            return resp.text
        except httpx.HTTPStatusError as e:
            # the gateway may report its own rejection under a non-2xx status
            if _is_gateway_reply(e.response.text):
                log.info("bulksms_http_status_with_reply", status=e.response.status_code)
                return e.response.text
            log.warning("bulksms_transport_error", status=e.response.status_code)
            raise TransportError(
                f"Gateway returned HTTP {e.response.status_code}",
                extra={"http_status": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            log.warning("bulksms_transport_error", error=str(e))
            raise TransportError(f"Gateway request failed: {e}") from e


__all__ = [
    "STATUS_MESSAGES",
    "SUCCESS_CODE",
    "GatewayClient",
    "build_form",
    "parse_status_code",
    "describe_status",
]
