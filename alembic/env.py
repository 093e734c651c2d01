"""Alembic environment for QuickDesk. DATABASE_URL comes from application settings, never alembic.ini."""

from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection

from quickdesk.core.config import settings
from quickdesk.core.database import create_db_engine

# Importing the package registers users, categories, tickets and comments on Base.metadata.
from quickdesk.models import Base

config = context.config
if config.config_file_name is not None and config.has_section("formatters"):
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure(**kwargs) -> None:
    context.configure(target_metadata=target_metadata, compare_type=True, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    """Emit SQL for the configured database without connecting."""
    _configure(
        url=settings.DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )


def run_with_connection(connection: Connection) -> None:
    # SQLite cannot ALTER most constraints in place; batch mode rebuilds the table instead.
    _configure(connection=connection, render_as_batch=connection.dialect.name == "sqlite")


def run_migrations_online() -> None:
    engine = create_db_engine(settings.DATABASE_URL)
    with engine.connect() as connection:
        run_with_connection(connection)
    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
