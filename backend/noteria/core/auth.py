"""Authentication dependency: turns a bearer token into the caller's owner id.

``require_auth`` is the only way routes learn who the caller is. Owner ids
in request bodies are never read. When ``settings.auth_enabled`` is False
every request acts as ``settings.dev_user_id``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .token_factory import TokenPayload, decode_token
from ..exceptions import AuthenticationError
from ..models.room import OWNER_ID_MAX_LENGTH

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Resolved caller identity, passed to every service call as the owner."""

    user_id: str
    email: Optional[str] = None


def _decode_bearer(token: str) -> Optional[TokenPayload]:
    """Decode a bearer token whose subject fits the owner column, else None."""
    payload = decode_token(token, settings.jwt_secret_key, settings.jwt_algorithm)
    if payload is not None and len(payload.sub) > OWNER_ID_MAX_LENGTH:
        logger.warning(
            "Rejected bearer token with oversized subject", extra={"length": len(payload.sub)}
        )
        return None
    return payload


def owner_from_authorization(header: Optional[str]) -> Optional[str]:
    """Owner id named by a raw ``Authorization`` header, or None.

    Used outside the dependency system (rate limiting, access logs), where a
    bad token must not fail the request.
    """
    if not settings.auth_enabled:
        return settings.dev_user_id
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    payload = _decode_bearer(token.strip())
    return payload.sub if payload else None


def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthContext:
    """Require a valid bearer token and return the caller's AuthContext.

    Raises AuthenticationError (401) when the token is missing, malformed,
    wrongly signed, expired or names a subject too long to be an owner id.
    """
    if not settings.auth_enabled:
        return AuthContext(user_id=settings.dev_user_id)

    if credentials is None:
        raise AuthenticationError("Access token required")

    payload = _decode_bearer(credentials.credentials)
    if payload is None:
        logger.debug("Rejected bearer token")
        raise AuthenticationError("Invalid or expired token")

    return AuthContext(user_id=payload.sub, email=payload.email)
