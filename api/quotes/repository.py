"""
Quote persistence (raw SQL).
This module is where quote-related SQL lives.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

import asyncpg

from core import db


@dataclass(frozen=True)
class Quote:
    id: UUID
    author: str
    quote: str


class RepositoryError(RuntimeError):
    pass


class AlreadyExistsError(RepositoryError):
    pass


class NotFoundError(RepositoryError):
    pass


class PersistenceError(RepositoryError):
    pass


class QuoteRepository(Protocol):
    """
    Persistence contract the service depends on.

    `create` must raise AlreadyExistsError when the quote already exists.
    """

    async def create(self, quote: Quote) -> None: ...

    async def delete_by_id(self, quote_id: UUID) -> None: ...

    async def list_with_filter(self, author_filter: str = "") -> list[Quote]: ...

    async def get_random(self) -> Quote: ...


def _row_to_quote(row: dict) -> Quote:
    return Quote(
        id=row["id"] if isinstance(row["id"], UUID) else UUID(str(row["id"])),
        author=str(row["author"]),
        quote=str(row["quote"]),
    )


class PostgresQuoteRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def create(self, quote: Quote) -> None:
        try:
            status = await db.execute(
                self._pool,
                """
                INSERT INTO quotes (id, author, quote)
                VALUES ($1, $2, $3)
                ON CONFLICT (id) DO NOTHING
                """,
                quote.id,
                quote.author,
                quote.quote,
            )
        except asyncpg.UniqueViolationError as exc:
            raise AlreadyExistsError(f"Quote {quote.id} already exists.") from exc
        except Exception as exc:
            raise PersistenceError(f"Failed to insert quote: {exc}") from exc

        if db.rows_affected(status) == 0:
            raise AlreadyExistsError(f"Quote {quote.id} already exists.")

    async def delete_by_id(self, quote_id: UUID) -> None:
        # Zero matched rows is fine: delete is idempotent.
        try:
            await db.execute(
                self._pool,
                """
                DELETE FROM quotes
                WHERE id = $1
                """,
                quote_id,
            )
        except Exception as exc:
            raise PersistenceError(f"Failed to delete quote: {exc}") from exc

    async def list_with_filter(self, author_filter: str = "") -> list[Quote]:
        """
        Return all quotes, or only those whose author equals `author_filter`
        when it is non-empty.
        """
        sql = "SELECT id, author, quote FROM quotes"
        args: list[str] = []
        if author_filter:
            sql += " WHERE author = $1"
            args.append(author_filter)

        quotes: list[Quote] = []
        try:
            async with db.cursor(self._pool, sql, *args) as rows:
                async for row in rows:
                    quotes.append(_row_to_quote(row))
        except Exception as exc:
            raise PersistenceError(f"Failed to list quotes: {exc}") from exc
        return quotes

    async def get_random(self) -> Quote:
        try:
            row = await db.fetch_one(
                self._pool,
                """
                SELECT id, author, quote
                FROM quotes
                ORDER BY random()
                LIMIT 1
                """,
            )
        except Exception as exc:
            raise PersistenceError(f"Failed to fetch random quote: {exc}") from exc

        if row is None:
            raise NotFoundError("No quotes stored.")
        return _row_to_quote(row)
