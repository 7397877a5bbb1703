"""Application (tenant) model definition using SQLAlchemy Core."""

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    String,
    Table,
    func,
)

from authgate.models.base import metadata

applications = Table(
    "applications",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("app_name", String(100), nullable=False, unique=True),
    # Auth0 tenant domain used to validate access tokens for this app
    Column("domain", String(255), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
