"""FastAPI middleware for request tracing and access control."""

import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from storemanager.logging import get_logger
from storemanager.schemas.error import error_body
from storemanager.security import (
    CredentialResolver,
    Decision,
    authenticate,
    authorize,
    uses_basic_scheme,
)

REQUEST_ID_HEADER = "X-Request-ID"
ACCESS_DENIED_MESSAGE = "Access denied! You do not have permission to access this resource."
UNAUTHORIZED_MESSAGE = "Full authentication is required to access this resource."

logger = get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag every request with an ID for tracing.

    - Reads X-Request-ID from the request, or generates a UUID if missing
    - Binds request_id, method and path to the structlog context
    - Echoes X-Request-ID on the response

    Add it last so it wraps every other middleware and their logs carry the ID.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class SecurityMiddleware(BaseHTTPMiddleware):
    """Authenticate the caller and apply ``authorize`` before any route runs.

    A request without a Basic Authorization header is anonymous; other schemes
    are ignored. A Basic header that is malformed or does not resolve to a known
    account with the right secret is answered with 401 even on public routes.
    The authenticated ``Principal`` (or None) is stored on ``request.state.principal``.
    """

    def __init__(self, app: ASGIApp, credentials: CredentialResolver, realm: str) -> None:
        super().__init__(app)
        self.credentials = credentials
        self.realm = realm

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        principal = None
        header = request.headers.get("Authorization")
        if header is not None and uses_basic_scheme(header):
            # checkpw blocks for the whole hash cost, so it runs in the threadpool
            principal = await run_in_threadpool(authenticate, header, self.credentials)
            if principal is None:
                logger.info("authentication_failed")
                return self._challenge()

        username = principal.username if principal else "anonymous"
        structlog.contextvars.bind_contextvars(username=username)

        decision = authorize(request.method, request.url.path, principal)
        if decision is Decision.UNAUTHENTICATED:
            logger.info("authentication_required")
            return self._challenge()
        if decision is Decision.DENY:
            logger.info("access_denied", roles=sorted(principal.roles) if principal else [])
            return JSONResponse(
                status_code=403,
                content=error_body("access_denied", ACCESS_DENIED_MESSAGE),
            )

        request.state.principal = principal
        return await call_next(request)

    def _challenge(self) -> Response:
        return JSONResponse(
            status_code=401,
            content=error_body("unauthorized", UNAUTHORIZED_MESSAGE),
            headers={"WWW-Authenticate": f'Basic realm="{self.realm}"'},
        )
