from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core import config, db
from quotes import repository as quote_repository
from quotes import router as quotes_router
from quotes import service as quote_service

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=level or config.log_level(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


async def _request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    # Undecodable or mistyped bodies are client errors (400), not 422.
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "Failed to parse request.",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


def create_app(settings: config.Settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "database_connecting host=%s port=%s name=%s",
            settings.database.host,
            settings.database.port,
            settings.database.name,
        )
        try:
            pool = await db.create_pool(settings.database)
        except Exception:
            logger.exception("database_connect_failed")
            raise
        logger.info("database_connected")

        app.state.pool = pool
        app.state.quote_service = quote_service.QuoteService(
            quote_repository.PostgresQuoteRepository(pool)
        )
        try:
            yield
        finally:
            # uvicorn has already drained in-flight requests at this point.
            app.state.quote_service = None
            logger.info("database_closing")
            try:
                await db.close_pool(pool)
            except Exception:
                logger.exception("database_close_failed")
            else:
                logger.info("database_closed")

    app = FastAPI(title="quote-service", lifespan=lifespan)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(quotes_router.router, tags=["quotes"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/")
    def root() -> dict:
        return {"message": "quote-service api"}

    return app


def run() -> int:
    """
    Process entry point: load settings, serve until SIGINT/SIGTERM.
    """
    configure_logging()

    logger.info("config_loading")
    try:
        settings = config.load_settings()
    except config.ConfigError:
        logger.exception("config_load_failed")
        return 1
    logger.info("config_loaded")

    app = create_app(settings)
    logger.info("http_server_starting port=%s", settings.http.port)
    # uvicorn owns the signal handling: on SIGINT/SIGTERM it stops accepting
    # connections, waits for in-flight requests (bounded), then runs lifespan
    # shutdown. A failed lifespan startup makes uvicorn exit non-zero.
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.http.port,
        timeout_graceful_shutdown=settings.http.shutdown_timeout_s,
    )
    logger.info("http_server_stopped")
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
