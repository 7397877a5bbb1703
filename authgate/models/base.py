"""Shared metadata for all tables."""

from sqlalchemy import MetaData

# One metadata so foreign keys between tables resolve for create_all and Alembic
metadata = MetaData()
