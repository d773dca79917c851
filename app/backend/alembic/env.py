"""Alembic environment for the remote resource database."""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context

from resplan.core.config import get_settings
from resplan.db.base import Base
from resplan.db.session import build_engine
import resplan.models.entities  # noqa: F401

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    settings = get_settings()
    url = context.config.get_main_option("sqlalchemy.url") or settings.remote_database_url
    if not url:
        raise RuntimeError("Set REMOTE_DATABASE_URL to run migrations.")
    return url


def run_migrations_offline() -> None:
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = build_engine(_database_url(), get_settings().remote_access_key)
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
