# hostel_leave/core/database.py

import ssl
from typing import AsyncGenerator

from loguru import logger
from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine
)
from sqlalchemy.pool import NullPool
from sqlalchemy import text

from hostel_leave.core.config import settings

DATABASE_URL = settings.DATABASE_URL

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set")


# ----------------------------------------------------
# SSL for managed Postgres (pooler)
# ----------------------------------------------------
def make_ssl():
    ctx = ssl.create_default_context()
    if not settings.DB_SSL_VERIFY:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    return ctx


def build_connect_args(url: str) -> dict:
    # asyncpg behind a transaction pooler cannot use prepared statements
    if url.startswith("postgresql+asyncpg"):
        return {
            "ssl": make_ssl(),
            "statement_cache_size": 0,
            "prepared_statement_name_func": None,
        }
    return {}


logger.info("Configuring database engine ({})", DATABASE_URL.split("://", 1)[0])


# ----------------------------------------------------
# Engine (NO POOLING → the pooler / sqlite file handles it)
# ----------------------------------------------------
engine = create_async_engine(
    DATABASE_URL,
    echo=False,
    future=True,
    connect_args=build_connect_args(DATABASE_URL),
    pool_pre_ping=True,
    poolclass=NullPool,
)


# ----------------------------------------------------
# Sessions
# ----------------------------------------------------
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


# ----------------------------------------------------
# Create tables
# ----------------------------------------------------
async def init_db():
    # table modules must be imported so they register on SQLModel.metadata
    from hostel_leave.models import audit, leave, user  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def drop_db():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


async def test_connection():
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
        logger.debug("DB connection OK")
