"""Alembic environment for the Atrium schema.

    alembic upgrade head

The URL comes from DATABASE_URL (settings); the async driver is swapped for
psycopg because Alembic runs migrations over a synchronous connection.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

import src.atrium.meetings.models  # noqa: F401
import src.atrium.resources.models  # noqa: F401
import src.atrium.spaces.models  # noqa: F401
import src.atrium.workspaces.models  # noqa: F401
from src.atrium.config import get_settings
from src.atrium.core.database import Base

# Alembic Config object
config = context.config

# Interpret the config file for Python logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _sync_url() -> str:
    return get_settings().DATABASE_URL.replace("+asyncpg", "+psycopg")


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=_sync_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = create_engine(_sync_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
