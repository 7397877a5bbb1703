"""Device and device/account link models using SQLAlchemy Core."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    PrimaryKeyConstraint,
    String,
    Table,
    func,
    text,
)

from authgate.models.base import metadata

devices = Table(
    "devices",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("device_number", String(255), nullable=False, unique=True),
    Column("phone_model", String(100)),
    Column("country_code", String(10)),
    Column("version", String(20)),
    # 1=Apple, 2=Google
    Column("login_type", Integer),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)

device_accounts = Table(
    "device_accounts",
    metadata,
    Column(
        "account_id",
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "device_id",
        Integer,
        ForeignKey("devices.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("is_active", Boolean, nullable=False, server_default=text("true")),
    Column("last_login", DateTime(timezone=True), server_default=func.now()),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    PrimaryKeyConstraint("account_id", "device_id", name="device_accounts_pkey"),
)

Index("idx_device_accounts_account_id", device_accounts.c.account_id)
Index("idx_device_accounts_device_id", device_accounts.c.device_id)
Index("idx_device_accounts_is_active", device_accounts.c.is_active)
