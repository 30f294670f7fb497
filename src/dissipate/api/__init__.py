"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Token verification happens in IdentityMiddleware for every path
under /api except /api/login. On top of that, protected routers carry
get_current_user as a router-level dependency, so a route that somehow
escaped the middleware still fails closed with 401.
"""

from fastapi import APIRouter, Depends

from dissipate.api.auth import router as auth_router
from dissipate.api.exports import router as exports_router
from dissipate.api.health import router as health_router
from dissipate.api.messages import router as messages_router
from dissipate.api.users import router as users_router
from dissipate.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Login (open) and /me (protected per-route)
api_router.include_router(auth_router, tags=["auth"])

# Protected routes — require a valid bearer token
api_router.include_router(messages_router, tags=["messages"], dependencies=_auth)
api_router.include_router(users_router, tags=["user"], dependencies=_auth)
api_router.include_router(exports_router, tags=["export"], dependencies=_auth)

__all__ = ["api_router", "health_router"]
