"""Alembic environment for the media_files shadow table."""

from __future__ import annotations

import os
import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import create_engine, pool

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from image_service.db.db_models import Base  # noqa: E402

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///image_service.db"

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def database_url() -> str:
    """``DATABASE_URL`` wins over ``sqlalchemy.url`` from alembic.ini."""
    return (
        os.getenv("DATABASE_URL")
        or config.get_main_option("sqlalchemy.url")
        or DEFAULT_DATABASE_URL
    )


def _configure(**options) -> None:
    url = options.get("url") or str(options["connection"].engine.url)
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        # sqlite needs table rebuilds for ALTER
        render_as_batch=url.startswith("sqlite"),
        **options,
    )


if context.is_offline_mode():
    _configure(url=database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()
else:
    engine = create_engine(database_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()
