"""JWT token creation and decoding.

Token claims:
  - sub:   actor ID (recorded on every load transition and movement)
  - role:  free-form role string
  - type:  "access"
  - exp:   expiry timestamp

Tokens are issued by the identity service; create_access_token exists for
operational scripts and tests.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config import settings

ALGORITHM = settings.jwt_algorithm


def create_access_token(
    actor_id: str,
    role: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {
        "sub": actor_id,
        "type": "access",
        "exp": expire,
    }
    if role:
        payload["role"] = role
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT. Returns empty dict on failure."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return {}
