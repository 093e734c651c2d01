"""SQLAlchemy declarative Base and shared model configuration."""

from datetime import UTC, datetime

from sqlalchemy.orm import DeclarativeBase

# Primary and foreign keys are Integer columns (int4 on PostgreSQL).
MAX_ID = 2**31 - 1


def utcnow() -> datetime:
    """Timezone-aware current time used for created_at/updated_at columns."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass
