"""FastAPI auth dependencies.

Learn: Authentication happens once per request, in IdentityMiddleware,
which stores the verified identity on `request.state.identity`.
Route handlers declare `Depends(get_current_user)` to read it back.
The dependency fails closed: no identity on the request means 401,
even if a route was accidentally left outside the middleware's reach.

Handlers must use identity.user_id and never a user id sent by the client.
"""

from typing import Optional

from fastapi import HTTPException, Request

from dissipate.auth.bearer import extract_bearer_token
from dissipate.auth.errors import (
    InvalidAuthHeaderError,
    TokenError,
    UnauthenticatedError,
)
from dissipate.auth.jwt import DEFAULT_ALGORITHM, verify_token


class CurrentIdentity:
    """Represents the authenticated user making the request.

    Learn: Built only from a verified token's subject. All downstream
    code uses this to scope queries to the caller's own rows.
    """

    def __init__(self, user_id: str):
        self.user_id = user_id

    def __repr__(self) -> str:
        return f"CurrentIdentity(user_id={self.user_id!r})"


def authenticate_header(
    authorization: Optional[str],
    secret: str,
    algorithm: str = DEFAULT_ALGORITHM,
) -> CurrentIdentity:
    """Turn a raw Authorization header value into a verified identity.

    Every failure becomes UnauthenticatedError with the same generic
    message; `reason` keeps the precise cause for logs.
    """
    if authorization is None:
        raise UnauthenticatedError("missing_header")

    try:
        token = extract_bearer_token(authorization)
    except InvalidAuthHeaderError as e:
        raise UnauthenticatedError("invalid_header") from e

    try:
        claim = verify_token(token, secret, algorithm=algorithm)
    except TokenError as e:
        raise UnauthenticatedError(e.reason) from e

    return CurrentIdentity(user_id=claim.subject)


def get_current_user(request: Request) -> CurrentIdentity:
    """Read the identity attached by IdentityMiddleware (required — 401 if absent)."""
    identity = getattr(request.state, "identity", None)
    if not isinstance(identity, CurrentIdentity):
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity
