"""Authorization header parsing."""

from dissipate.auth.errors import InvalidAuthHeaderError

BEARER_PREFIX = "Bearer "


def extract_bearer_token(header_value: str) -> str:
    """Return the token from an `Authorization: Bearer <token>` value.

    The scheme must be the literal "Bearer" followed by at least one space.
    Surrounding whitespace around the token is trimmed, not rejected.
    """
    if not header_value or not header_value.startswith(BEARER_PREFIX):
        raise InvalidAuthHeaderError("Authorization header must use the Bearer scheme")

    token = header_value[len(BEARER_PREFIX):].strip()
    if not token:
        raise InvalidAuthHeaderError("Bearer token is empty")
    return token
