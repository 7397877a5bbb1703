"""Authentication service for local logins and Auth0 verification."""

from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.config import Settings
from authgate.core.exceptions import BadRequestException, UnauthorizedException, UpstreamException
from authgate.core.security import create_access_token, parse_expires_in
from authgate.core.serialization import sanitize_for_response
from authgate.schemas.accounts import AccountData
from authgate.schemas.auth import (
    Auth0VerifyRequest,
    CallbackData,
    DeviceHeaders,
    LoginData,
    LoginUser,
    Principal,
    VerifyData,
    VerifyUser,
)
from authgate.services.account_service import AccountService
from authgate.services.application_service import ApplicationService
from authgate.services.auth0_client import Auth0Client
from authgate.services.device_service import DeviceService
from authgate.services.user_service import UserService

logger = structlog.get_logger(__name__)


class AuthService:
    """Authentication service tying identity providers to local records."""

    def __init__(
        self,
        settings: Settings,
        auth0_client: Auth0Client,
        accounts: AccountService | None = None,
        devices: DeviceService | None = None,
        users: UserService | None = None,
        applications: ApplicationService | None = None,
    ):
        """Initialize auth service with settings, an Auth0 client and data services."""
        self.settings = settings
        self.auth0 = auth0_client
        self.accounts = accounts or AccountService()
        self.devices = devices or DeviceService()
        self.users = users or UserService()
        self.applications = applications or ApplicationService()

    async def login(self, db: AsyncSession, username: str, password: str) -> LoginData:
        """
        Authenticate a local user and issue a token.

        Args:
            db: Database session
            username: Login name
            password: Plaintext password

        Returns:
            Token and user summary

        Raises:
            UnauthorizedException: If the credentials do not match
        """
        check = await self.users.validate_credentials(db, username, password)
        if not check.valid or check.user is None:
            raise UnauthorizedException("invalid username or password")

        user = check.user
        token = create_access_token(
            {"sub": str(user["id"]), "username": user["username"], "role": user["role"]},
            self.settings,
            expires_delta=parse_expires_in(self.settings.jwt_expires_in),
        )

        logger.info("user_logged_in", user_id=user["id"], username=user["username"])
        return LoginData(token=token, user=LoginUser.model_validate(user))

    async def _tenant_domain(self, db: AsyncSession, app_id: int | None) -> str:
        if app_id is None:
            raise BadRequestException("appId is required")

        application = await self.applications.get_by_id(db, app_id)
        if not application or not application["domain"]:
            raise BadRequestException(f"unknown appId: {app_id}")

        return application["domain"]

    async def verify_auth0(
        self,
        db: AsyncSession,
        request: Auth0VerifyRequest,
        device: DeviceHeaders,
    ) -> VerifyData:
        """
        Verify an Auth0 access token and resolve the caller's account.

        The tenant domain is resolved from ``appId`` before the token is sent
        anywhere. The account is created on first sight and refreshed after
        that; a device number, when present, is registered and linked.

        Raises:
            BadRequestException: If ``appId`` is missing or unknown
            UpstreamException: If Auth0 rejects the token
        """
        domain = await self._tenant_domain(db, request.app_id)
        userinfo = await self.auth0.get_userinfo(domain, request.access_token)
        if not userinfo.sub:
            raise UpstreamException("upstream auth failed: missing subject", status_code=401)

        account = await self.accounts.resolve_account(
            db,
            AccountData(
                auth0_sub=userinfo.sub,
                name=userinfo.name,
                nickname=userinfo.nickname,
                email=userinfo.email,
                email_verified=userinfo.email_verified,
                picture=userinfo.picture,
                app_id=request.app_id,
                login_type=request.login_type,
            ),
        )

        if device.device_number:
            record = await self.devices.create_or_update(
                db,
                device.device_number,
                phone_model=device.phone_model,
                country_code=device.country_code,
                version=device.version,
                login_type=request.login_type,
            )
            await self.devices.link_to_account(db, record["id"], account["id"])

        claims: dict[str, Any] = {
            "sub": str(account["id"]),
            "auth0_sub": userinfo.sub,
            "name": userinfo.name,
            "email": userinfo.email,
            "app_id": request.app_id,
        }
        if device.device_number:
            claims["device_number"] = device.device_number

        token = create_access_token(
            claims,
            self.settings,
            expires_delta=parse_expires_in(self.settings.account_token_expires_in),
        )

        logger.info(
            "account_verified",
            account_id=account["id"],
            app_id=request.app_id,
            device_number=device.device_number,
        )
        return VerifyData(
            token=token,
            user=VerifyUser(
                sub=userinfo.sub,
                name=userinfo.name or "",
                email=userinfo.email or "",
                picture=userinfo.picture or "",
            ),
            account=sanitize_for_response(account, self.settings.response_utc_offset_hours),
        )

    async def handle_callback(self, code: str) -> CallbackData:
        """Exchange an authorization code and fetch the user behind it."""
        tokens = await self.auth0.exchange_code(code)
        access_token = tokens.get("access_token")
        if not access_token:
            raise UpstreamException("authorization code rejected", status_code=401)

        userinfo = await self.auth0.get_userinfo(self.settings.auth0_domain, access_token)
        return CallbackData(
            access_token=access_token,
            id_token=tokens.get("id_token"),
            user=userinfo.model_dump(),
        )

    async def resolve_principal(
        self,
        db: AsyncSession,
        claims: dict[str, Any],
        device_number: str | None = None,
    ) -> Principal:
        """
        Load the record named by verified token claims.

        Tokens carrying ``auth0_sub`` name an account, all others a local user.

        Raises:
            UnauthorizedException: If the record no longer exists
        """
        try:
            record_id = int(claims["sub"])
        except (KeyError, TypeError, ValueError):
            raise UnauthorizedException("invalid token")

        if claims.get("auth0_sub"):
            account = await self.accounts.find_by_id(db, record_id)
            if not account or account["auth0_sub"] != claims["auth0_sub"]:
                raise UnauthorizedException("account not found")

            return Principal(
                id=account["id"],
                role="user",
                email=account["email"],
                username=account["name"],
                is_external_user=True,
                external_subject_id=account["auth0_sub"],
                device_number=claims.get("device_number") or device_number,
                app_id=account["app_id"],
            )

        user = await self.users.get_by_id(db, record_id)
        if not user:
            raise UnauthorizedException("user not found")

        return Principal(
            id=user["id"],
            role=user["role"],
            email=user["email"],
            username=user["username"],
            device_number=device_number,
        )
