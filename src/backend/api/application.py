"""FastAPI application factory for the Backend domain.

Every request runs inside the backend's domain context. Domain exceptions are
translated into HTTP errors with a single human-readable ``detail`` string,
plus the per-field ``errors`` mapping for validation failures.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.domain import Domain
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from backend.api.routes import order_router, session_router, user_router
from backend.errors import AuthenticationFailed, first_error_message

logger = structlog.get_logger(__name__)


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=422,
            content={"detail": first_error_message(exc.messages), "errors": exc.messages},
        )

    @app.exception_handler(InvalidOperationError)
    async def invalid_operation(request: Request, exc: InvalidOperationError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(ObjectNotFoundError)
    async def not_found(request: Request, exc: ObjectNotFoundError):
        logger.info("Object not found", path=request.url.path)
        return JSONResponse(status_code=404, content={"detail": "Not found"})

    @app.exception_handler(AuthenticationFailed)
    async def authentication_failed(request: Request, exc: AuthenticationFailed):
        return JSONResponse(status_code=401, content={"detail": exc.message})


def create_app(domain: Domain) -> FastAPI:
    """Build the HTTP surface for an already initialized backend domain."""
    app = FastAPI(
        title="Storefront Backend API",
        description="Accounts, sessions and orders for the storefront app",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the backend domain context for each request."""
        with domain.domain_context():
            response = await call_next(request)
        return response

    install_exception_handlers(app)

    app.include_router(user_router)
    app.include_router(session_router)
    app.include_router(order_router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": domain.name})

    return app
