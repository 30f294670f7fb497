"""Password hashing utilities.

Learn: Uses Argon2id (argon2-cffi) for password hashing. Argon2id is
memory-hard: each hash costs tens of milliseconds and a chunk of RAM,
which makes offline brute-force expensive.

The stored credential is the PHC string argon2 produces, e.g.
    $argon2id$v=19$m=65536,t=3,p=4$<salt>$<digest>
It carries algorithm, parameters, salt and digest in one value, so there
is never a separate salt column to drift out of sync.

Hashing is CPU-bound and deliberately slow. Route handlers call the
*_async variants, which run on Starlette's worker thread pool so the
event loop keeps serving other requests.
"""

import base64
from typing import Union

from argon2 import PasswordHasher, Type, extract_parameters
from argon2.exceptions import (
    HashingError,
    InvalidHashError,
    VerificationError,
    VerifyMismatchError,
)
from starlette.concurrency import run_in_threadpool

from dissipate.auth.errors import HashingFailureError, MalformedCredentialError
from dissipate.config import settings

Password = Union[str, bytes]


def _build_hasher() -> PasswordHasher:
    """Argon2id hasher with cost parameters from settings (or library defaults)."""
    overrides = {
        "time_cost": settings.argon2_time_cost,
        "memory_cost": settings.argon2_memory_cost,
        "parallelism": settings.argon2_parallelism,
    }
    return PasswordHasher(
        type=Type.ID,
        **{k: v for k, v in overrides.items() if v is not None},
    )


_hasher = _build_hasher()


def _encode(password: Password) -> bytes:
    # surrogatepass: lone surrogates are valid JSON strings and must still hash
    if isinstance(password, str):
        return password.encode("utf-8", "surrogatepass")
    return password


def hash_password(password: Password) -> str:
    """Hash a password with Argon2id.

    Learn: argon2-cffi draws a fresh random salt from os.urandom on every
    call, so hashing the same password twice yields two different strings.
    Passwords are not truncated — any length, empty or non-ASCII is fine.
    """
    try:
        return _hasher.hash(_encode(password))
    except HashingError as e:
        raise HashingFailureError(f"Failed to hash password: {e}") from e


def verify_password(password: Password, credential: str) -> bool:
    """Verify a password against a stored credential.

    Returns False for a wrong password. Raises MalformedCredentialError if
    the credential itself can't be parsed — that is a data bug, not a
    failed login, and must not look like one.
    """
    _ensure_well_formed(credential)
    try:
        return _hasher.verify(credential, _encode(password))
    except VerifyMismatchError:
        return False
    except InvalidHashError as e:
        raise MalformedCredentialError("Stored credential is not a valid Argon2 hash") from e
    except VerificationError as e:
        raise HashingFailureError(f"Failed to verify password: {e}") from e


def needs_upgrade(credential: str) -> bool:
    """Check if a credential was hashed with outdated Argon2 parameters."""
    _ensure_well_formed(credential)
    return _hasher.check_needs_rehash(credential)


async def hash_password_async(password: Password) -> str:
    return await run_in_threadpool(hash_password, password)


async def verify_password_async(password: Password, credential: str) -> bool:
    return await run_in_threadpool(verify_password, password, credential)


def _ensure_well_formed(credential: str) -> None:
    """Reject anything that isn't a complete Argon2 PHC string.

    argon2's own verify reports an undecodable salt or digest as a plain
    mismatch, so both base64 segments are checked here first.
    """
    if not isinstance(credential, str) or not credential:
        raise MalformedCredentialError("Stored credential is empty")
    try:
        extract_parameters(credential)
        salt, digest = credential.split("$")[-2:]
        for segment in (salt, digest):
            if not segment:
                raise ValueError("empty segment")
            base64.b64decode(segment + "=" * (-len(segment) % 4), validate=True)
    except (InvalidHashError, ValueError) as e:
        raise MalformedCredentialError("Stored credential is not a valid Argon2 hash") from e
