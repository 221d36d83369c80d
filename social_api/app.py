from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from social_api.core.config import Settings, get_settings
from social_api.domain.records import User
from social_api.repositories.json_storage import JsonStorage, StorageError
from social_api.routers import posts as posts_router
from social_api.routers import users as users_router

logger = logging.getLogger(__name__)

# Every failure is answered with 404, bad requests included.
ERROR_STATUS = 404


def error_response(message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=ERROR_STATUS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    storage: JsonStorage = app.state.storage
    # startup cannot proceed without a backing file
    storage.ensure_db()
    logger.info("Storage ready at %s", storage.path)
    yield


async def _storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return error_response(str(exc))


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return error_response("; ".join(parts) or "invalid request body")


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 405:
        return error_response("method not supported")
    return error_response(str(exc.detail))


def create_app(settings: Settings | None = None, storage: JsonStorage | None = None) -> FastAPI:
    """Factory compatible with uvicorn/gunicorn."""
    settings = settings or get_settings()
    if storage is None:
        storage = JsonStorage(settings.db_path, enforce_post_owner=settings.posts_require_user)

    app = FastAPI(title="Social Media Backend", lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = storage

    app.add_exception_handler(StorageError, _storage_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)

    @app.get("/")
    def sample_user():
        return User(email="test@example.com").to_dict()

    @app.get("/err")
    def sample_error():
        return error_response("404 not found")

    app.include_router(users_router.router)
    app.include_router(posts_router.router)
    return app
