# core/security.py
"""
Identity boundary.

Users are authenticated by an external identity provider that signs bearer
tokens with the shared ``SECRET_KEY``. This module only verifies those tokens
and hands the caller's user id to the routes; it never stores credentials.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import uuid

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from core.config import settings
from core.exceptions import UnauthorizedError


# ========================================
# 🔑 JWT / APP CONFIG
# ========================================
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM or "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

bearer_scheme = HTTPBearer(auto_error=False)


# ========================================
# 🔑 Token Helpers
# ========================================
def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token the same way the identity provider does (dev tooling and tests)."""
    to_encode = {k: str(v) if isinstance(v, uuid.UUID) else v for k, v in data.items()}
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode JWT and return payload."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise UnauthorizedError("Invalid or expired token")


# ========================================
# 👤 Current caller
# ========================================
def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> uuid.UUID:
    """Extract the verified user id from the bearer token."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError()

    payload = decode_token(credentials.credentials)
    raw_id = payload.get("user_id") or payload.get("sub")
    if not raw_id:
        raise UnauthorizedError("Invalid token payload")

    try:
        return uuid.UUID(str(raw_id))
    except ValueError:
        raise UnauthorizedError("Invalid token payload")
