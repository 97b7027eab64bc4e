from __future__ import annotations

import logging

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from user_registry.deps import get_settings_dep, get_user_store
from user_registry.errors import ConflictError, MalformedRequestError, NotFoundError, StoreError, ValidationError
from user_registry.fixtures import load_sample_users
from user_registry.logging_config import configure_logging
from user_registry.models import HealthResponse
from user_registry.routers.users import router as users_router
from user_registry.settings import Settings, get_settings
from user_registry.user_store import InMemoryUserStore

logger = logging.getLogger("user_registry")

APP_VERSION = "1.0.0"

INVALID_USER_ID_MESSAGE = "Invalid user ID"
INVALID_JSON_MESSAGE = "Invalid JSON"
INTERNAL_ERROR_MESSAGE = "Internal server error"

ERROR_STATUS: dict[type[StoreError], int] = {
    ValidationError: 400,
    MalformedRequestError: 400,
    NotFoundError: 404,
    ConflictError: 409,
}

ROUTE_TABLE = (
    ("POST", "/api/v1/users", "Create a new user"),
    ("GET", "/api/v1/users", "Get all users"),
    ("GET", "/api/v1/users/count", "Get users count"),
    ("GET", "/api/v1/users/{id}", "Get user by ID"),
    ("PUT", "/api/v1/users/{id}", "Update user by ID"),
    ("DELETE", "/api/v1/users/{id}", "Delete user by ID"),
    ("DELETE", "/api/v1/users/clear", "Clear all users"),
)


def _error_response(exc: StoreError) -> JSONResponse:
    return JSONResponse(
        status_code=ERROR_STATUS.get(type(exc), 400),
        content={"detail": exc.message, "error": exc.kind},
    )


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.message, exc.kind)
    return _error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Map FastAPI's 422 to a 400 malformed request.

    A bad path id and an unparseable body are both the caller's fault and are
    reported the way the rest of the API reports bad input.
    """
    bad_path = any((err.get("loc") or ("",))[0] == "path" for err in exc.errors())
    message = INVALID_USER_ID_MESSAGE if bad_path else INVALID_JSON_MESSAGE
    logger.info("%s %s malformed request: %s", request.method, request.url.path, message)
    return _error_response(MalformedRequestError(message))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error handling %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": INTERNAL_ERROR_MESSAGE, "error": "internal_error"},
    )


def build_store(settings: Settings) -> InMemoryUserStore:
    store = InMemoryUserStore(id_seed=settings.user_id_seed)
    if settings.load_sample_users:
        load_sample_users(store)
    return store


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API with its own, freshly constructed user store."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="User Registry", version=APP_VERSION)
    app.state.settings = settings
    app.state.user_store = build_store(settings)

    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(users_router)

    @app.get("/healthz", response_model=HealthResponse)
    def healthz(
        store: InMemoryUserStore = Depends(get_user_store),
        settings: Settings = Depends(get_settings_dep),
    ) -> HealthResponse:
        return HealthResponse(
            ok=True,
            service="user-registry",
            version=APP_VERSION,
            users=store.count(),
            id_seed=settings.user_id_seed,
            sample_users_loaded=settings.load_sample_users,
        )

    return app


app = create_app()


def log_banner(settings: Settings, store: InMemoryUserStore) -> None:
    logger.info("Server starting on %s:%s", settings.api_host, settings.api_port)
    logger.info("API Endpoints:")
    for method, path, summary in ROUTE_TABLE:
        logger.info("  %-6s %-22s - %s", method, path, summary)
    if settings.load_sample_users:
        logger.info("Sample users are pre-loaded (%d users)", store.count())


def run() -> None:
    settings = app.state.settings
    log_banner(settings, app.state.user_store)
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
