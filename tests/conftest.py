"""
Shared fixtures for the quote service tests.

The storage layer is replaced with in-memory fakes so no PostgreSQL is
needed: `InMemoryQuoteRepository` stands in for the repository, and
`FakePool` mimics the slice of `asyncpg.Pool` used by `core.db`.
"""

from __future__ import annotations

import random
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from core.config import DatabaseConfig, HTTPServerConfig, Settings
from main import create_app
from quotes import repository
from quotes.router import get_quote_service
from quotes.service import QuoteService


class InMemoryQuoteRepository:
    def __init__(self) -> None:
        self.quotes: dict[UUID, repository.Quote] = {}
        self.create_calls = 0

    async def create(self, quote: repository.Quote) -> None:
        self.create_calls += 1
        if quote.id in self.quotes:
            raise repository.AlreadyExistsError(f"Quote {quote.id} already exists.")
        self.quotes[quote.id] = quote

    async def delete_by_id(self, quote_id: UUID) -> None:
        self.quotes.pop(quote_id, None)

    async def list_with_filter(self, author_filter: str = "") -> list[repository.Quote]:
        return [q for q in self.quotes.values() if not author_filter or q.author == author_filter]

    async def get_random(self) -> repository.Quote:
        if not self.quotes:
            raise repository.NotFoundError("No quotes stored.")
        return random.choice(list(self.quotes.values()))


class FailingQuoteRepository:
    """Raises the given error from every operation."""

    def __init__(self, error: Exception) -> None:
        self.error = error

    async def create(self, quote: repository.Quote) -> None:
        raise self.error

    async def delete_by_id(self, quote_id: UUID) -> None:
        raise self.error

    async def list_with_filter(self, author_filter: str = "") -> list[repository.Quote]:
        raise self.error

    async def get_random(self) -> repository.Quote:
        raise self.error


class _AsyncNullContext:
    async def __aenter__(self):
        return None

    async def __aexit__(self, *exc):
        return False


class _Rows:
    """Async iterator over rows, optionally failing after the first one."""

    def __init__(self, rows: list[dict], error: Exception | None) -> None:
        self._rows = list(rows)
        self._error = error
        self._served = 0

    def __aiter__(self):
        return self

    async def __anext__(self) -> dict:
        if self._error is not None and self._served >= 1:
            raise self._error
        if self._served >= len(self._rows):
            raise StopAsyncIteration
        row = self._rows[self._served]
        self._served += 1
        return row


class FakeConnection:
    def __init__(self, pool: "FakePool") -> None:
        self._pool = pool

    def transaction(self) -> _AsyncNullContext:
        return _AsyncNullContext()

    def cursor(self, sql: str, *args):
        self._pool.calls.append(("cursor", sql, args))
        return _Rows(self._pool.rows, self._pool.cursor_error)


class _Acquire:
    def __init__(self, pool: "FakePool") -> None:
        self._pool = pool

    async def __aenter__(self) -> FakeConnection:
        self._pool.acquired += 1
        return FakeConnection(self._pool)

    async def __aexit__(self, *exc):
        self._pool.released += 1
        return False


class FakePool:
    def __init__(
        self,
        *,
        status: str = "INSERT 0 1",
        rows: list[dict] | None = None,
        error: Exception | None = None,
        cursor_error: Exception | None = None,
    ) -> None:
        self.status = status
        self.rows = rows or []
        self.error = error
        self.cursor_error = cursor_error
        self.calls: list[tuple] = []
        self.acquired = 0
        self.released = 0
        self.closed = False

    async def execute(self, sql: str, *args) -> str:
        self.calls.append(("execute", sql, args))
        if self.error is not None:
            raise self.error
        return self.status

    async def fetchrow(self, sql: str, *args):
        self.calls.append(("fetchrow", sql, args))
        if self.error is not None:
            raise self.error
        return self.rows[0] if self.rows else None

    async def fetch(self, sql: str, *args):
        self.calls.append(("fetch", sql, args))
        if self.error is not None:
            raise self.error
        return list(self.rows)

    def acquire(self) -> _Acquire:
        if self.error is not None:
            raise self.error
        return _Acquire(self)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        http=HTTPServerConfig(port=8080, shutdown_timeout_s=5),
        database=DatabaseConfig(
            user="quotes",
            password="secret",
            name="quotes",
            host="localhost",
            port=5432,
            ssl_mode="disable",
        ),
    )


@pytest.fixture()
def memory_repository() -> InMemoryQuoteRepository:
    return InMemoryQuoteRepository()


@pytest.fixture()
def quote_service(memory_repository: InMemoryQuoteRepository) -> QuoteService:
    return QuoteService(memory_repository)


@pytest.fixture()
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture()
def make_client(app):
    """Build a TestClient (without running the lifespan) around a given service."""

    def _make(service) -> TestClient:
        app.dependency_overrides[get_quote_service] = lambda: service
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture()
def client(make_client, quote_service: QuoteService) -> TestClient:
    return make_client(quote_service)
