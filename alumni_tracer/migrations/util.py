"""Dialect-aware column helpers for Alembic migrations.

Models use ``AdaptiveUUID``: a native UUID on PostgreSQL and 36-character hex
text everywhere else. Migrations must create the same physical types, so they
ask the bound dialect instead of hard-coding one.
"""
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from alembic import op


def _dialect_name() -> str:
    return op.get_bind().dialect.name


def get_uuid_type():
    """UUID column type matching ``AdaptiveUUID`` for the current dialect."""
    if _dialect_name() == 'postgresql':
        return UUID(as_uuid=True)
    return sa.String(length=36)


def get_timestamp_default():
    """Server-side "now" for timestamp columns."""
    if _dialect_name() == 'postgresql':
        return sa.text('NOW()')
    return sa.text('CURRENT_TIMESTAMP')


def bool_default(value: bool):
    """Boolean server default that both SQLite and PostgreSQL accept."""
    return sa.true() if value else sa.false()


def uuid_column(name: str, *args, **kwargs) -> sa.Column:
    """Shorthand for ``sa.Column(name, get_uuid_type(), ...)``."""
    return sa.Column(name, get_uuid_type(), *args, **kwargs)
