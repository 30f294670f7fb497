"""Authentication error taxonomy.

Learn: Each failure gets its own type so callers can tell a caller bug
(malformed credential) from a policy outcome (wrong password), and an
expired session from a forged token. At the HTTP boundary all token and
header failures collapse into UnauthenticatedError; the precise kind
stays on `reason` and `__cause__` for logging only.
"""


class AuthError(Exception):
    """Base class for all authentication failures."""


# ─── Credentials ─────────────────────────────────────────


class MalformedCredentialError(AuthError):
    """The stored credential string cannot be parsed as an Argon2 hash."""


class HashingFailureError(AuthError):
    """Hashing or verification failed for a reason other than a mismatch."""


# ─── Authorization header ────────────────────────────────


class InvalidAuthHeaderError(AuthError):
    """The Authorization header is not `Bearer <token>`."""


# ─── Tokens ──────────────────────────────────────────────


class TokenError(AuthError):
    """Raised when token verification fails."""

    reason = "invalid"


class TokenMalformedError(TokenError):
    """The token cannot be split, decoded or parsed."""

    reason = "malformed"


class TokenInvalidSignatureError(TokenError):
    """The token is well-formed but its signature does not match."""

    reason = "invalid_signature"


class TokenExpiredError(TokenError):
    """The token is authentic but past its expiry."""

    reason = "expired"


# ─── HTTP boundary ───────────────────────────────────────


class UnauthenticatedError(AuthError):
    """The request carries no usable identity.

    The message is always generic. `reason` records why, for logs.
    """

    def __init__(self, reason: str, message: str = "Not authenticated"):
        super().__init__(message)
        self.reason = reason
        self.message = message
