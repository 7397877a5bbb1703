"""Application configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="null",
    )

    # Application
    app_name: str = Field(default="authgate", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    api_prefix: str = Field(default="/api", alias="API_PREFIX")

    # Server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8787, alias="PORT")
    reload: bool = Field(default=False, alias="RELOAD")

    # Database
    database_url: str = Field(..., alias="DATABASE_URL")

    # JWT
    jwt_secret: str = Field(..., alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    # Local username/password sessions
    jwt_expires_in: str = Field(default="24h", alias="JWT_EXPIRES_IN")
    # Sessions minted by the Auth0 verification flow
    account_token_expires_in: str = Field(default="30d", alias="ACCOUNT_TOKEN_EXPIRES_IN")

    # Auth0
    auth0_domain: str = Field(default="dev-example.us.auth0.com", alias="AUTH0_DOMAIN")
    auth0_client_id: str = Field(default="", alias="AUTH0_CLIENT_ID")
    auth0_client_secret: str = Field(default="", alias="AUTH0_CLIENT_SECRET")
    auth0_redirect_uri: str = Field(
        default="http://localhost:8787/api/auth/callback",
        alias="AUTH0_REDIRECT_URI",
    )
    auth0_timeout_seconds: float = Field(default=10.0, alias="AUTH0_TIMEOUT_SECONDS")

    # Tenant upstream APIs
    upstream_timeout_seconds: float = Field(default=5.0, alias="UPSTREAM_TIMEOUT_SECONDS")

    # Timestamps in auth responses are rendered in this fixed offset
    response_utc_offset_hours: int = Field(default=8, alias="RESPONSE_UTC_OFFSET_HOURS")

    # CORS
    cors_origins_str: str = Field(default="*", alias="CORS_ORIGINS")
    cors_allow_methods_str: str = Field(
        default="GET,POST,PUT,PATCH,DELETE,OPTIONS",
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers_str: str = Field(
        default="Content-Type,Authorization,Auth,deviceNumber,phoneModel,countryCode,version,appName",
        alias="CORS_ALLOW_HEADERS",
    )
    cors_expose_headers_str: str = Field(
        default="Content-Length,X-Process-Time",
        alias="CORS_EXPOSE_HEADERS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_max_age: int = Field(default=86400, alias="CORS_MAX_AGE")

    # Verbose request monitoring (opt-in)
    request_monitor_enabled: bool = Field(default=False, alias="REQUEST_MONITOR_ENABLED")
    request_monitor_log_body: bool = Field(default=False, alias="REQUEST_MONITOR_LOG_BODY")
    request_monitor_parse_json: bool = Field(default=False, alias="REQUEST_MONITOR_PARSE_JSON")
    request_monitor_path_patterns_str: str = Field(
        default="*",
        alias="REQUEST_MONITOR_PATH_PATTERNS",
    )

    # iOS universal links
    apple_app_ids_str: str = Field(default="", alias="APPLE_APP_IDS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as a list."""
        return _split_csv(self.cors_origins_str)

    @property
    def cors_allow_methods(self) -> list[str]:
        """Get allowed CORS methods as a list."""
        return _split_csv(self.cors_allow_methods_str)

    @property
    def cors_allow_headers(self) -> list[str]:
        """Get allowed CORS request headers as a list."""
        return _split_csv(self.cors_allow_headers_str)

    @property
    def cors_expose_headers(self) -> list[str]:
        """Get exposed CORS response headers as a list."""
        return _split_csv(self.cors_expose_headers_str)

    @property
    def request_monitor_path_patterns(self) -> list[str]:
        """Get request monitor path patterns as a list."""
        return _split_csv(self.request_monitor_path_patterns_str)

    @property
    def apple_app_ids(self) -> list[str]:
        """Get the iOS app identifiers served for universal links."""
        return _split_csv(self.apple_app_ids_str)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]


# Global settings instance
settings = get_settings()
