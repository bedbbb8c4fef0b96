"""FastAPI application for the directory index."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from directory_index import __version__ as version
from directory_index import db
from directory_index.api.routers import businesses, categories, management, search
from directory_index.config import ConfigManager, init_api_logging
from directory_index.services.exceptions import (
    ConflictError,
    EntityNotFoundError,
    StoreUnavailableError,
)


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover
    """Open the database once at startup and dispose of it on shutdown."""
    app_config = ConfigManager().config
    init_api_logging(app_config)
    logger.info("Starting directory-index API")

    engine, session_maker = await db.get_or_create_db(app_config)
    app.state.engine = engine
    app.state.session_maker = session_maker

    yield

    logger.info("Shutting down directory-index API")
    await db.shutdown_db()


app = FastAPI(
    title="Directory Index API",
    description="Business listings with secondary indexes, search and suggestions",
    version=version,
    lifespan=lifespan,
)

app.include_router(businesses.router)
app.include_router(categories.router)
app.include_router(search.router)
app.include_router(management.router)


@app.exception_handler(EntityNotFoundError)
async def not_found_handler(request: Request, exc: EntityNotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def record_validation_handler(request: Request, exc: ValidationError):
    """A merged update that no longer forms a valid record."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors(include_url=False))},
    )


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    logger.error(f"Store unavailable for {request.method} {request.url.path}: {exc.reason}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc), "operation": exc.operation},
    )


@app.exception_handler(Exception)
async def exception_handler(request, exc):  # pragma: no cover
    logger.exception(
        "API unhandled exception",
        url=str(request.url),
        method=request.method,
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return await http_exception_handler(request, HTTPException(status_code=500, detail=str(exc)))
