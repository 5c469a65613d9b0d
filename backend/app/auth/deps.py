"""FastAPI dependencies for authentication.

get_current_actor → decode the bearer JWT and return its `sub` claim.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from app.auth.jwt import decode_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


async def get_current_actor(token: str = Depends(oauth2_scheme)) -> str:
    payload = decode_token(token)
    actor_id: str | None = payload.get("sub")
    if not actor_id or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return actor_id
