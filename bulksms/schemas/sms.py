"""
Pydantic schemas for the gateway exchange.
"""

from pydantic import BaseModel, ConfigDict, Field

SUCCESS_CODE = 1101


class GatewayConfig(BaseModel):
    """Gateway endpoint and credentials, fixed once built."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Gateway endpoint")
    username: str = Field(default="", description="Gateway username")
    password: str = Field(default="", description="Gateway password", repr=False)


class SendRequest(BaseModel):
    """One outbound message. Both values are forwarded to the gateway as given."""

    model_config = ConfigDict(frozen=True)

    numbers: str = Field(..., description="Recipient number(s) in gateway format")
    text: str = Field(..., description="Message body")


class SendResult(BaseModel):
    """Decoded gateway reply."""

    model_config = ConfigDict(frozen=True)

    code: int = Field(..., description="Leading status code from the reply")
    description: str = Field(..., description="Human-readable outcome")
    raw: str = Field(default="", description="Unmodified response body")

    @property
    def success(self) -> bool:
        return self.code == SUCCESS_CODE
