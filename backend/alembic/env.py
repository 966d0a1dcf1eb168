"""
Alembic Migration Environment
=============================

What:  Runs migrations for the brainboard schema (users, boards, cards,
       board_access, board_shares).
How:   The engine is built from brainboard Settings (DATABASE_URL) rather than
       alembic.ini. SQLite runs in batch mode so ALTERs work there too.

    alembic upgrade head              # online, against DATABASE_URL
    alembic upgrade head --sql        # offline, prints the DDL
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from alembic import context

from brainboard.config import settings
from brainboard.database import Base
from brainboard.models import access, board, card, share, user  # noqa: F401

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

target_metadata = Base.metadata


def _configure(**kwargs) -> None:
    is_sqlite = settings.database_url.startswith("sqlite")
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=is_sqlite,
        **kwargs,
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection) -> None:
    _configure(connection=connection)


async def _run_online() -> None:
    # NullPool: one short-lived connection per migration run
    engine = create_async_engine(settings.database_url, poolclass=NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    _configure(url=settings.database_url, literal_binds=True, dialect_opts={"paramstyle": "named"})
else:
    asyncio.run(_run_online())
