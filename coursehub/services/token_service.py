"""JWT access token validation (ES256).

Tokens are issued by the platform's identity provider.  This service only
verifies them and reads two claims: ``sub`` (user UUID) and ``role``.

Key management:
  JWT_PUBLIC_KEY set  -> verify with the provider's PEM public key.
  otherwise           -> an ephemeral key pair generated on import, so dev
                         and tests can mint their own tokens.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from coursehub.core.config import SETTINGS

_private_key = ec.generate_private_key(ec.SECP256R1())

if SETTINGS.jwt_public_key:
    _public_key = serialization.load_pem_public_key(
        SETTINGS.jwt_public_key.encode()
    )
else:
    _public_key = _private_key.public_key()

ALGORITHM = "ES256"
ISSUER = "coursehub-identity"
AUDIENCE = "coursehub"
ACCESS_TOKEN_TTL_MIN = 15


def create_access_token(
    *, sub: str, role: str, ttl: timedelta | None = None
) -> str:
    """Sign a token with the ephemeral dev key.

    Only meaningful when JWT_PUBLIC_KEY is unset (dev, tests, seed scripts).
    """
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "role": role,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + (ttl or timedelta(minutes=ACCESS_TOKEN_TTL_MIN)),
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins algorithm to ES256 to prevent alg:none and alg-switching attacks.
    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "role", "exp", "iat"]},
    )
