from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool
from sqlmodel import SQLModel

import printqueue.models  # noqa: F401  (registriert die Tabellen)

config = context.config

target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_with_connection(connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata, render_as_batch=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    # Beim App-Start reicht init_db() die offene Verbindung durch
    connection = config.attributes.get("connection")
    if connection is not None:
        _run_with_connection(connection)
        return

    if config.config_file_name is not None:
        fileConfig(config.config_file_name)
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as conn:
        _run_with_connection(conn)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
