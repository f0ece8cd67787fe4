"""
Async database access helpers (raw SQL) using asyncpg.

The pool is created by the app lifespan (see `api/main.py`), kept on
`app.state.pool` and passed explicitly to the helpers below.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import asyncpg

from core.config import DatabaseConfig


def connect_kwargs(config: DatabaseConfig) -> dict[str, Any]:
    """
    Connection parameters for asyncpg, passed as keywords so IPv6 literals
    and unix-socket directories work as hosts without URL quoting.
    """
    return {
        "host": config.host,
        "port": config.port,
        "user": config.user,
        "password": config.password,
        "database": config.name,
        "ssl": config.ssl_mode,
    }


async def create_pool(config: DatabaseConfig) -> asyncpg.Pool:
    # min_size=1 makes pool creation fail fast when the database is unreachable.
    return await asyncpg.create_pool(
        **connect_kwargs(config),
        min_size=1,
        max_size=5,
        command_timeout=30,
    )


async def close_pool(pool: asyncpg.Pool) -> None:
    await pool.close()


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(pool: asyncpg.Pool, sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await pool.fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(pool: asyncpg.Pool, sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await pool.fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def execute(pool: asyncpg.Pool, sql: str, *args: Any) -> str:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL) and return its status tag,
    e.g. "INSERT 0 1" or "DELETE 3".
    """
    return await pool.execute(sql, *args)


def rows_affected(status: str) -> int:
    """
    Row count from a command status tag; 0 when the tag carries none.
    """
    last = (status or "").rsplit(" ", 1)[-1]
    return int(last) if last.isdigit() else 0


@asynccontextmanager
async def cursor(pool: asyncpg.Pool, sql: str, *args: Any) -> AsyncIterator[AsyncIterator[dict[str, Any]]]:
    """
    Stream rows of a query as dicts.

    asyncpg cursors only live inside a transaction, so a connection is held
    for the duration of the `async with` block and released on every exit
    path, including errors raised while iterating.
    """
    async with pool.acquire() as conn:
        async with conn.transaction():

            async def rows() -> AsyncIterator[dict[str, Any]]:
                async for record in conn.cursor(sql, *args):
                    yield _record_to_dict(record)

            yield rows()
