"""Identity middleware — bearer-token authentication for protected paths.

Learn: Runs before routing. For every request under a protected prefix
(except the explicitly public paths, like login) it:
1. reads the Authorization header,
2. extracts the bearer token,
3. verifies it with the process secret,
4. attaches the identity to request.state for handlers to read.

Any failure short-circuits with a 401 before the handler runs. Expired,
forged and malformed tokens all get the same response body; the exact
kind only goes to the log, so callers can't use it to probe forgeries.
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from dissipate.auth.dependencies import authenticate_header
from dissipate.auth.errors import UnauthenticatedError
from dissipate.auth.jwt import DEFAULT_ALGORITHM, HMAC_ALGORITHMS

logger = structlog.get_logger()


class IdentityMiddleware(BaseHTTPMiddleware):
    """Verify the bearer token and attach the caller's identity."""

    def __init__(
        self,
        app,
        secret: str,
        algorithm: str = DEFAULT_ALGORITHM,
        protected_prefixes: tuple[str, ...] = ("/api/",),
        public_paths: tuple[str, ...] = ("/api/login",),
    ):
        super().__init__(app)
        if not secret:
            raise ValueError("IdentityMiddleware requires a non-empty secret")
        if algorithm not in HMAC_ALGORITHMS:
            raise ValueError(f"IdentityMiddleware requires an HMAC algorithm, got {algorithm!r}")
        self.secret = secret
        self.algorithm = algorithm
        self.protected_prefixes = protected_prefixes
        self.public_paths = frozenset(public_paths)

    def is_protected(self, path: str) -> bool:
        if path in self.public_paths:
            return False
        return any(path.startswith(prefix) for prefix in self.protected_prefixes)

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if not self.is_protected(path):
            return await call_next(request)

        try:
            identity = authenticate_header(
                request.headers.get("Authorization"),
                self.secret,
                algorithm=self.algorithm,
            )
        except UnauthenticatedError as e:
            logger.info("auth.rejected", reason=e.reason, path=path, method=request.method)
            return JSONResponse(
                status_code=401,
                content={"error": e.message},
                headers={"WWW-Authenticate": "Bearer"},
            )

        request.state.identity = identity
        structlog.contextvars.bind_contextvars(user_id=identity.user_id)
        return await call_next(request)
