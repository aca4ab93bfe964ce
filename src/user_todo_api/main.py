import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import InvalidInput, ServiceError
from .logging_config import setup_logging
from .repositories import Store, get_store
from .routers import todos as todos_router
from .routers import users as users_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

_HTTP_ERROR_KINDS = {404: "NotFound", 405: "MethodNotAllowed"}

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "users", "description": "Create, list, fetch and delete users."},
    {
        "name": "todos",
        "description": "Todo items owned by users: create, list, fetch, complete and delete.",
    },
]


def _log_routes(app: FastAPI) -> None:
    logger.info("Available endpoints:")
    for route in app.routes:
        methods = sorted(getattr(route, "methods", None) or [])
        for method in methods:
            if method in {"HEAD", "OPTIONS"}:
                continue
            logger.info("  %-6s %s", method, route.path)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("Serving with %s store", app.state.settings.persistence_backend)
    _log_routes(app)
    try:
        yield
    finally:
        app.state.store.close()
        logger.info("Store closed")


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, store: Optional[Store] = None) -> FastAPI:
    """
    Build the FastAPI application around a single, explicitly constructed store.

    Args:
        settings: Application settings; read from the environment when omitted.
        store: Store to serve; built from settings when omitted.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="User Todo Service",
        description="REST API managing users and the todo items they own.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store if store is not None else get_store(settings)

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        """
        Render domain errors as {"error": <kind>, "message": ..., "detail": null}.
        """
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.kind, "message": str(exc), "detail": None},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """
        Give routing errors (unknown path, wrong method) the same body as domain errors.
        """
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": _HTTP_ERROR_KINDS.get(exc.status_code, "HTTPError"),
                "message": str(exc.detail),
                "detail": None,
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent 400 JSON structure for request validation errors.

        Response format:
            {
                "error": "InvalidInput",
                "message": "Request validation failed",
                "detail": [... pydantic/fastapi error details ...]
            }
        """
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(
            status_code=InvalidInput.status_code,
            content={
                "error": InvalidInput.kind,
                "message": "Request validation failed",
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    # PUBLIC_INTERFACE
    @app.get("/health", summary="Health Check", tags=["health"])
    def health_check():
        """
        Liveness check. Does not touch the store.

        Returns:
            A JSON object indicating service health.
        """
        return {"status": "ok", "backend": settings.persistence_backend}

    app.include_router(users_router.router)
    app.include_router(todos_router.router)
    return app

