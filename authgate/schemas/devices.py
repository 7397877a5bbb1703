"""Device schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class LinkedDevice(BaseModel):
    """Device linked to an account."""

    id: int
    device_number: str
    phone_model: str | None = None
    country_code: str | None = None
    version: str | None = None
    login_type: int | None = None
    last_login: datetime | None = None
    is_active: bool


class DeviceLoginType(BaseModel):
    """Login provider of a device (1 = Apple, 2 = Google)."""

    login_type: int = Field(..., ge=1, le=2)
