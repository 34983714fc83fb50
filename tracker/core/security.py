"""
Password hashing and the request guards

Guard                   Applies to         Failure
----------------------  -----------------  ---------------------------------------------
authorize_path_user     /{user}/...        404 reserved segment, 401 missing/malformed,
                                           403 identity != {user}
require_admin_key       /admin/...         401 when admin keys are configured and the
                                           x-api-key header does not match an enabled one
"""

from typing import Annotated

from fastapi import Depends, Path, Request
from fastapi.security import APIKeyHeader
from passlib.context import CryptContext

from tracker.core.config import settings
from tracker.core.exceptions import ForbiddenError, NotFoundError, UnauthenticatedError
from tracker.core.logger import get_logger

logger = get_logger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

authorization_header = APIKeyHeader(
    name="Authorization",
    scheme_name="BearerAuth",
    description="Placeholder bearer credential. <p>ex) Authorization: Bearer mock-token-for-<name> </p>",
    auto_error=False,
)

admin_key_header = APIKeyHeader(
    name="x-api-key",
    scheme_name="AdminAPIKey",
    description="Admin API key, required only when ADMIN_API_KEY<n> settings are present",
    auto_error=False,
)


#
# Passwords
#


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


#
# Placeholder bearer credential
#


def issue_token(name: str) -> str:
    """Token handed out by /login; send it back as `Authorization: Bearer <token>`."""
    return f"{settings.AUTH_TOKEN_PREFIX}{name}"


def parse_credential(header: str | None) -> str:
    """
    Extract the identity from an `Authorization` header value.

    Raises:
        UnauthenticatedError: If the header is missing, or does not have the
            "<scheme> <token-prefix><identity>" shape with a non-empty identity
    """
    if not header:
        raise UnauthenticatedError("Authorization header required")

    expected_prefix = f"{settings.AUTH_SCHEME} {settings.AUTH_TOKEN_PREFIX}"
    if not header.startswith(expected_prefix):
        raise UnauthenticatedError("Invalid token format")

    identity = header[len(expected_prefix) :]
    if not identity or identity.strip() != identity:
        raise UnauthenticatedError("Invalid token format")

    return identity


async def authorize_path_user(
    request: Request,
    user: Annotated[str, Path(description="Name of the user owning the resource")],
    authorization: Annotated[str | None, Depends(authorization_header)] = None,
) -> str:
    """
    Admit the request only when the credential names the {user} path segment.

    Reserved first segments never reach the credential check. On success the
    identity is bound to `request.state.username` and returned.
    """
    __func__ = "authorize_path_user"

    if user in settings.RESERVED_PATH_SEGMENTS:
        raise NotFoundError("Route")

    try:
        identity = parse_credential(authorization)
    except UnauthenticatedError as e:
        logger.warning(f"[{__name__}:{__func__}] Access denied on {request.url.path}: {e.message}")
        raise

    if identity != user:
        logger.warning(f"[{__name__}:{__func__}] Access denied: '{identity}' is not the owner of {request.url.path}")
        raise ForbiddenError()

    request.state.username = identity
    return identity


CurrentUser = Annotated[str, Depends(authorize_path_user)]


async def require_admin_key(
    request: Request,
    api_key: Annotated[str | None, Depends(admin_key_header)] = None,
) -> None:
    """
    Enforce admin API keys for owner-scope routes when any are configured.
    """
    __func__ = "require_admin_key"

    if not settings.admin_api_keys:
        return

    key_info = settings.admin_api_keys.get(api_key or "")
    if key_info is None:
        logger.warning(f"[{__name__}:{__func__}] Access denied: Invalid or missing API key")
        raise UnauthenticatedError("Access denied (Invalid or missing API key)")

    if not key_info["enabled"]:
        logger.warning(f"[{__name__}:{__func__}] Access denied: API key '{key_info['name']}' is disabled")
        raise UnauthenticatedError("Access denied (API key is disabled)")

    request.state.admin_key_name = key_info["name"]
