from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from storemanager.config import settings
from storemanager.db.session import shutdown
from storemanager.dependencies import DB
from storemanager.logging import get_logger
from storemanager.middleware import RequestIDMiddleware, SecurityMiddleware
from storemanager.routers.product import router as product_router
from storemanager.schemas.error import error_body
from storemanager.security import CredentialResolver, build_credential_store

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Close pooled database connections on shutdown."""
    yield
    await shutdown()


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log a failure outside the product error taxonomy and return a safe 500.

    The traceback goes to the log (with the bound request_id); the client only
    sees a generic message.
    """
    logger.exception("unhandled_exception", path=request.url.path, method=request.method)
    return JSONResponse(
        status_code=500,
        content=error_body("internal_error", "Internal server error"),
    )


async def health(db: DB) -> dict[str, str]:
    """Return 200 only if the database answers a ping query."""
    await db.execute(text("SELECT 1"))
    return {"status": "ok"}


def create_app(credentials: CredentialResolver | None = None) -> FastAPI:
    """Build the application.

    ``credentials`` resolves usernames to stored accounts; by default the two
    configured accounts are hashed and kept in memory.
    """
    if credentials is None:
        credentials = build_credential_store(settings)

    app = FastAPI(title="storemanager", lifespan=lifespan)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Last added runs first: request IDs are bound before access control logs anything.
    app.add_middleware(SecurityMiddleware, credentials=credentials, realm=settings.auth_realm)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(product_router)
    app.add_api_route("/health", health, methods=["GET"])
    return app


app = create_app()
