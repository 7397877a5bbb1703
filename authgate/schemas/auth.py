"""Authentication schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from authgate.models.accounts import LOGIN_TYPE_APPLE


class LoginRequest(BaseModel):
    """Local username/password login request."""

    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)


class LoginUser(BaseModel):
    """User summary returned on login."""

    id: int
    username: str
    email: str
    role: str


class LoginData(BaseModel):
    """Login response payload."""

    token: str
    user: LoginUser


class Auth0VerifyRequest(BaseModel):
    """Auth0 access token verification request."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., min_length=1, description="Auth0 access token")
    id_token: str | None = Field(default=None, alias="idToken")
    login_type: int = Field(
        default=LOGIN_TYPE_APPLE,
        alias="loginType",
        description="1 = Apple, 2 = Google",
    )
    app_id: int | None = Field(default=None, alias="appId", description="Application (tenant) ID")


class DeviceHeaders(BaseModel):
    """Device metadata carried in request headers."""

    device_number: str | None = None
    phone_model: str | None = None
    country_code: str | None = None
    version: str | None = None


class Auth0UserInfo(BaseModel):
    """Auth0 /userinfo payload."""

    model_config = ConfigDict(extra="allow")

    sub: str
    name: str | None = None
    nickname: str | None = None
    email: str | None = None
    email_verified: bool | None = None
    picture: str | None = None


class VerifyUser(BaseModel):
    """Identity provider summary returned on verification."""

    sub: str
    name: str
    email: str
    picture: str


class VerifyData(BaseModel):
    """Verification response payload."""

    token: str
    user: VerifyUser
    account: dict[str, Any]


class CallbackData(BaseModel):
    """Authorization code callback payload."""

    access_token: str
    id_token: str | None = None
    user: dict[str, Any]


class Principal(BaseModel):
    """Resolved caller identity attached to an authenticated request."""

    id: int
    role: str = "user"
    email: str | None = None
    username: str | None = None
    is_external_user: bool = False
    external_subject_id: str | None = None
    device_number: str | None = None
    app_id: int | None = None

    @property
    def is_admin(self) -> bool:
        """Check if the principal has the admin role."""
        return self.role == "admin"
