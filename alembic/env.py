"""Alembic environment for the RapMarket schema.

Migrations are hand-written raw SQL (op.execute). target_metadata is the
shared ORM Base so `alembic check` can flag drift between the table
mappings and the DDL; autogenerate output is never committed as-is.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.ext.asyncio import create_async_engine

from config.settings import settings
from src.rm_account.infrastructure import db_models as _account_models  # noqa: F401
from src.rm_catalog.infrastructure import db_models as _catalog_models  # noqa: F401
from src.rm_common.database import Base
from src.rm_gateway.user import db_models as _user_models  # noqa: F401
from src.rm_wager.infrastructure import db_models as _wager_models  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL to stdout without a database connection."""
    context.configure(
        url=settings.DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):  # type: ignore[no-untyped-def]
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = create_async_engine(settings.DATABASE_URL)
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
