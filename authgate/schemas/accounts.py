"""Account schemas."""

from pydantic import BaseModel, Field


class AccountData(BaseModel):
    """Profile data used to create or refresh an account."""

    auth0_sub: str = Field(..., min_length=1)
    user_id: int | None = None
    name: str | None = None
    nickname: str | None = None
    email: str | None = None
    email_verified: bool | None = None
    picture: str | None = None
    app_id: int | None = None
    login_type: int | None = None


class AccountUpdate(AccountData):
    """Full update of an existing account."""

    id: int


class AccountUserLink(BaseModel):
    """Local user an account is attached to."""

    user_id: int = Field(..., ge=1)
