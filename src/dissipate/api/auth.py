"""Auth API — login and current-user lookup.

Learn: Routes for session identity:
- POST /login → email/password → bearer token + public user fields
- GET /me → the authenticated user's public fields

Login is the only route under /api that IdentityMiddleware lets through
without a token. There is no register endpoint: accounts are created by
the operator CLI (`dissipate users add`).
"""

from datetime import timedelta

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from dissipate.auth.dependencies import CurrentIdentity, get_current_user
from dissipate.auth.jwt import issue_token
from dissipate.config import settings
from dissipate.db.engine import get_db
from dissipate.schemas.user import LoginRequest, LoginResponse, UserRead
from dissipate.services.user_service import InvalidCredentialsError, UserService

logger = structlog.get_logger()

router = APIRouter()


def _user_svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, svc: UserService = Depends(_user_svc)):
    """Login with email and password → bearer token."""
    try:
        user = await svc.authenticate(body.email, body.password)
    except InvalidCredentialsError:
        logger.info("auth.login_failed")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = issue_token(
        user.id,
        settings.jwt_secret,
        ttl=timedelta(days=settings.token_ttl_days),
        algorithm=settings.jwt_algorithm,
    )
    logger.info("auth.login_succeeded", user_id=user.id)
    return LoginResponse(token=token, user=UserRead.model_validate(user))


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
):
    """Get the current authenticated user's info."""
    user = await svc.get_user(identity.user_id)
    if not user:
        # Token outlived its account — treat as unauthenticated, not 404
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
