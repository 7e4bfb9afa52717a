"""Alembic environment: runs migrations with the application's sync engine."""

import os
from logging.config import fileConfig

from alembic import context
from mirotrak.models.base import Base
from mirotrak.services.database import DEFAULT_DATABASE_URL, DatabaseManager

import mirotrak.models  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

db_manager = DatabaseManager(os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL))


def run_migrations_offline() -> None:
    """Emit SQL to stdout without a database connection."""
    context.configure(
        url=db_manager.sync_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations against the configured database."""
    with db_manager.sync_engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()

    db_manager.sync_engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
