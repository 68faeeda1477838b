import os
import sys
import importlib
from logging.config import fileConfig

from dotenv import load_dotenv

load_dotenv()

from sqlalchemy import engine_from_config
from sqlalchemy import pool

from alembic import context

# Alembic Config object, gives access to the values in alembic.ini
config = context.config

# Project root on sys.path so "stockroom" imports when alembic runs from anywhere
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from stockroom.core.config import settings  # noqa: E402
from stockroom.db import Base  # noqa: E402

config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def import_all_models_from_package(package_name: str):
    """Import every module of ``package_name`` so its models register on Base.metadata."""
    package = importlib.import_module(package_name)
    package_dir = os.path.dirname(package.__file__)

    for root, _, files in os.walk(package_dir):
        for file in files:
            if file.endswith(".py") and file != "__init__.py":
                rel_path = os.path.relpath(os.path.join(root, file), package_dir)
                module_name = os.path.splitext(rel_path)[0].replace(os.sep, ".")
                importlib.import_module(f"{package_name}.{module_name}")


import_all_models_from_package("stockroom.models")

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emitting SQL without a connection."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
