"""Account settings routes — email, username, password."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from dissipate.auth.dependencies import CurrentIdentity, get_current_user
from dissipate.db.engine import get_db
from dissipate.schemas.user import (
    SuccessResponse,
    UpdateEmailRequest,
    UpdatePasswordRequest,
    UpdateUsernameRequest,
)
from dissipate.services.user_service import (
    EmailTakenError,
    InvalidCredentialsError,
    UserNotFoundError,
    UserService,
)

router = APIRouter(prefix="/user")


def _user_svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.put("/email", response_model=SuccessResponse)
async def update_email(
    body: UpdateEmailRequest,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
):
    try:
        await svc.update_email(identity.user_id, body.email)
    except EmailTakenError:
        raise HTTPException(status_code=409, detail="Email already registered")
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    return SuccessResponse()


@router.put("/username", response_model=SuccessResponse)
async def update_username(
    body: UpdateUsernameRequest,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
):
    try:
        await svc.update_username(identity.user_id, body.username)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    return SuccessResponse()


@router.put("/password", response_model=SuccessResponse)
async def update_password(
    body: UpdatePasswordRequest,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
):
    """Change password. Existing tokens stay valid until they expire."""
    try:
        await svc.change_password(identity.user_id, body.current_password, body.new_password)
    except InvalidCredentialsError:
        # 400, not 401: the session is fine, the form input is wrong
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    return SuccessResponse()
