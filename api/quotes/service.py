"""
Quote business logic.

Thin on purpose: the service assigns identifiers and narrows repository
errors down to what the transport needs (already-exists vs. anything else).
"""

from __future__ import annotations

import logging
from uuid import UUID, uuid4

from . import repository

logger = logging.getLogger(__name__)


class QuoteServiceError(RuntimeError):
    pass


class QuoteAlreadyExistsError(QuoteServiceError):
    pass


class QuoteService:
    def __init__(self, quote_repository: repository.QuoteRepository) -> None:
        self.quote_repository = quote_repository

    async def create_new_quote(self, author: str, quote_text: str) -> repository.Quote:
        quote = repository.Quote(id=uuid4(), author=author, quote=quote_text)
        try:
            await self.quote_repository.create(quote)
        except repository.AlreadyExistsError as exc:
            raise QuoteAlreadyExistsError("Quote already exists.") from exc
        except repository.RepositoryError as exc:
            raise QuoteServiceError(f"quote repository: create new quote: {exc}") from exc

        logger.info("quote_created id=%s author=%r", quote.id, quote.author)
        return quote

    async def delete_by_id(self, quote_id: UUID) -> None:
        try:
            await self.quote_repository.delete_by_id(quote_id)
        except repository.RepositoryError as exc:
            raise QuoteServiceError(f"quote repository: delete quote by id: {exc}") from exc

        logger.info("quote_deleted id=%s", quote_id)

    async def get_quotes_with_filter(self, author_filter: str = "") -> list[repository.Quote]:
        try:
            return await self.quote_repository.list_with_filter(author_filter)
        except repository.RepositoryError as exc:
            raise QuoteServiceError(f"quote repository: get quotes with filter: {exc}") from exc

    async def get_random_quote(self) -> repository.Quote:
        try:
            return await self.quote_repository.get_random()
        except repository.RepositoryError as exc:
            raise QuoteServiceError(f"quote repository: get random quote: {exc}") from exc
