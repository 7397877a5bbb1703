"""Proxy request schemas."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CommonProxyRequest(BaseModel):
    """Generic upstream passthrough request."""

    model_config = ConfigDict(populate_by_name=True)

    method: Literal["get", "post"]
    url: str = Field(..., min_length=1, description="Path relative to the tenant base URL")
    proxy_data: dict[str, Any] | None = Field(default=None, alias="proxyData")

    @field_validator("method", mode="before")
    @classmethod
    def lowercase_method(cls, value: Any) -> Any:
        """Accept the method in any case."""
        return value.lower() if isinstance(value, str) else value


class UpstreamHeaders(BaseModel):
    """Client headers forwarded to tenant upstreams."""

    device_number: str | None = None
    phone_model: str | None = None
    version: str | None = None
    app_name: str | None = None
    auth: str | None = None
