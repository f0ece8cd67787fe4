"""
Pydantic schemas for quote endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel

from .repository import Quote


class CreateQuoteRequest(BaseModel):
    # Emptiness is checked in the router so each field gets its own message.
    author: str
    quote: str


class QuoteResponse(BaseModel):
    id: str
    author: str
    quote: str


class QuoteListResponse(BaseModel):
    quotes: list[QuoteResponse]


def to_quote_response(quote: Quote) -> QuoteResponse:
    return QuoteResponse(
        id=str(quote.id),
        author=quote.author,
        quote=quote.quote,
    )
