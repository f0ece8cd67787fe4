"""
Quote API endpoints.
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from . import schemas, service

logger = logging.getLogger(__name__)

router = APIRouter()


def get_quote_service(request: Request) -> service.QuoteService:
    quote_service = getattr(request.app.state, "quote_service", None)
    if quote_service is None:
        raise RuntimeError("Quote service is not initialized. It is created on app startup.")
    return quote_service


def _parse_quote_id(raw: str) -> UUID:
    raw = (raw or "").strip()
    if not raw:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Empty "id" parameter.',
        )
    try:
        return UUID(raw)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Invalid "id" parameter.',
        ) from exc


@router.post("/quotes", status_code=status.HTTP_201_CREATED)
async def create_quote(
    request: schemas.CreateQuoteRequest,
    quote_service: service.QuoteService = Depends(get_quote_service),
) -> schemas.QuoteResponse:
    if not request.author:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='"author" request field can not be empty.',
        )
    if not request.quote:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='"quote" request field can not be empty.',
        )

    try:
        quote = await quote_service.create_new_quote(request.author, request.quote)
    except service.QuoteAlreadyExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Quote already exists.") from exc
    except service.QuoteServiceError as exc:
        logger.exception("create_quote_failed author=%r", request.author)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create quote.",
        ) from exc
    return schemas.to_quote_response(quote)


@router.get("/quotes")
async def list_quotes(
    author: str = Query(default=""),
    quote_service: service.QuoteService = Depends(get_quote_service),
) -> schemas.QuoteListResponse:
    """
    List all quotes, or only those by `author` when given.
    """
    try:
        quotes = await quote_service.get_quotes_with_filter(author)
    except service.QuoteServiceError as exc:
        logger.exception("list_quotes_failed author=%r", author)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get quotes.",
        ) from exc
    return schemas.QuoteListResponse(quotes=[schemas.to_quote_response(q) for q in quotes])


@router.get("/quotes/random")
async def get_random_quote(
    quote_service: service.QuoteService = Depends(get_quote_service),
) -> schemas.QuoteResponse:
    # An empty table surfaces as a service error too, so it is a 500 here.
    try:
        quote = await quote_service.get_random_quote()
    except service.QuoteServiceError as exc:
        logger.exception("random_quote_failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get random quote.",
        ) from exc
    return schemas.to_quote_response(quote)


@router.delete("/quotes/{quote_id}")
async def delete_quote(
    quote_id: str,
    quote_service: service.QuoteService = Depends(get_quote_service),
) -> dict:
    """
    Delete a quote by id. Deleting an id that does not exist still succeeds.
    """
    parsed_id = _parse_quote_id(quote_id)
    try:
        await quote_service.delete_by_id(parsed_id)
    except service.QuoteServiceError as exc:
        logger.exception("delete_quote_failed id=%s", parsed_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete quote.",
        ) from exc
    return {"ok": True, "id": str(parsed_id)}
