"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
A token is header.payload.signature, each part base64url-encoded and
signed with HMAC-SHA256 using the process-wide secret. The payload holds
only what identity needs: the user id (`sub`) and the expiry (`exp`).

Nothing is stored server-side. Rotating the secret invalidates every
token issued so far — a deliberate global logout.

Verification order matters: PyJWT checks the signature before it parses
claims, and expiry only after that. So "expired" is never reported for
a token we can't prove we issued.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from dissipate.auth.errors import (
    TokenExpiredError,
    TokenInvalidSignatureError,
    TokenMalformedError,
)

DEFAULT_TTL = timedelta(days=15)
DEFAULT_ALGORITHM = "HS256"
HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")


@dataclass(frozen=True)
class Claim:
    """The verified identity carried by a token."""

    subject: str
    expires_at: datetime


def issue_token(
    subject: str,
    secret: str,
    ttl: Optional[timedelta] = None,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """Create a signed token for `subject` that expires after `ttl`."""
    if not subject:
        raise ValueError("Token subject must be a non-empty string")
    _check_algorithm(algorithm)
    expires = datetime.now(timezone.utc) + (DEFAULT_TTL if ttl is None else ttl)
    payload = {
        "sub": subject,
        "exp": expires,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def verify_token(
    token: str,
    secret: str,
    algorithm: str = DEFAULT_ALGORITHM,
) -> Claim:
    """Verify and decode a token.

    Returns the Claim on success. Raises:
    - TokenMalformedError: not three segments, bad base64/JSON, missing claims
    - TokenInvalidSignatureError: well-formed, but not signed with `secret`
    - TokenExpiredError: authentic, but past `exp`
    """
    _check_algorithm(algorithm)
    if not isinstance(token, str) or token.count(".") != 2:
        raise TokenMalformedError("Token must have three dot-separated segments")

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError("Token has expired") from e
    except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as e:
        raise TokenInvalidSignatureError("Token signature is invalid") from e
    except jwt.InvalidTokenError as e:
        raise TokenMalformedError(f"Malformed token: {e}") from e

    subject = payload["sub"]
    if not isinstance(subject, str) or not subject:
        raise TokenMalformedError("Token subject must be a non-empty string")

    return Claim(
        subject=subject,
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


def _check_algorithm(algorithm: str) -> None:
    # Tokens are HMAC-signed with a shared secret; anything else is a misconfiguration
    if algorithm not in HMAC_ALGORITHMS:
        raise ValueError(f"Unsupported token algorithm {algorithm!r}, expected one of {HMAC_ALGORITHMS}")
