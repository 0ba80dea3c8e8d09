"""Identity dependency for vault endpoints.

Public interface:
    ``require_identity`` -- returns the caller's Identity or raises 401.

When ``settings.auth_enabled`` is False every request acts as the
``anonymous`` identity so the development workflow needs no tokens.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .token_factory import decode_token
from ..exceptions import AuthenticationError

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)

ANONYMOUS_OWNER_ID = "anonymous"


@dataclass(frozen=True)
class Identity:
    """An already-authenticated caller. ``owner_id`` keys the caller's vault."""

    owner_id: str


_ANONYMOUS = Identity(owner_id=ANONYMOUS_OWNER_ID)


def require_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Identity:
    """Resolve the caller's identity from the bearer token."""
    if not settings.auth_enabled:
        return _ANONYMOUS

    if credentials is None:
        raise AuthenticationError("Missing authentication token")

    payload = decode_token(
        credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm
    )
    if payload is None:
        logger.info("Rejected bearer token")
        raise AuthenticationError("Invalid or expired token")

    return Identity(owner_id=payload.sub)
