"""Auth0-backed account model definition using SQLAlchemy Core."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    UniqueConstraint,
    func,
    text,
)

from authgate.models.base import metadata

LOGIN_TYPE_APPLE = 1
LOGIN_TYPE_GOOGLE = 2

accounts = Table(
    "accounts",
    metadata,
    Column("id", Integer, primary_key=True),
    # Auth0 subject, e.g. "auth0|123" or "apple|000123.abc"
    Column("auth0_sub", String(255), nullable=False, index=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
    # Profile (mirrored from the identity provider)
    Column("name", String(100)),
    Column("nickname", String(100)),
    Column("email", String(255)),
    Column("email_verified", Boolean, server_default=text("false")),
    Column("picture", String(1000)),
    # Tenant
    Column(
        "app_id",
        Integer,
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    ),
    Column("login_type", Integer, server_default=text("1")),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    UniqueConstraint("auth0_sub", "app_id", name="accounts_auth0_sub_app_id_key"),
)

# NULL app_ids are distinct under the composite key, so tenant-less identities
# get their own uniqueness on auth0_sub alone.
Index(
    "uq_accounts_auth0_sub_global",
    accounts.c.auth0_sub,
    unique=True,
    postgresql_where=text("app_id IS NULL"),
    sqlite_where=text("app_id IS NULL"),
)
