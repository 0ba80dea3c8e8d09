"""Pure functions for verifying the HS256 bearer tokens issued by the auth service.

The vault never logs anyone in; it only needs the verified ``sub`` claim,
which is the owner identity of the vault. ``encode_token`` exists for local
development and the test suite.
"""

import hashlib
import hmac
import base64
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class TokenPayload:
    """Verified JWT claims. Immutable."""
    sub: str
    exp: datetime


def encode_token(subject: str, secret: str, expires_hours: int = 24) -> str:
    """Sign a token for *subject* with the shared secret."""
    now = time.time()
    payload = {
        "sub": subject,
        "iat": int(now),
        "exp": int(now + expires_hours * 3600),
    }

    header = {"alg": "HS256", "typ": "JWT"}
    segments = [
        _b64encode(json.dumps(header).encode()),
        _b64encode(json.dumps(payload).encode()),
    ]
    signing_input = b".".join(segments)
    signature = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
    segments.append(_b64encode(signature))
    return b".".join(segments).decode()


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> Optional[TokenPayload]:
    """Verify a token and return its claims.

    Returns ``None`` on any failure (bad signature, expired, malformed,
    missing subject) rather than raising.
    """
    if algorithm != "HS256":
        raise ValueError(f"Unsupported algorithm: {algorithm}")

    try:
        parts = token.encode().split(b".")
        if len(parts) != 3:
            return None

        header = json.loads(_b64decode(parts[0]))
        if header.get("alg") != "HS256":
            return None

        signing_input = parts[0] + b"." + parts[1]
        expected_sig = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
        if not hmac.compare_digest(expected_sig, _b64decode(parts[2])):
            return None

        payload = json.loads(_b64decode(parts[1]))
        exp = payload.get("exp", 0)
        if time.time() > exp:
            return None

        sub = payload.get("sub")
        if not isinstance(sub, str) or not sub:
            return None

        return TokenPayload(sub=sub, exp=datetime.fromtimestamp(exp, tz=timezone.utc))
    except (json.JSONDecodeError, AttributeError, TypeError, ValueError):
        return None


def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    padding = 4 - len(data) % 4
    if padding != 4:
        data += b"=" * padding
    return base64.urlsafe_b64decode(data)
