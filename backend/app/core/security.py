# backend/app/core/security.py

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

from jose import ExpiredSignatureError, JWTError, jwt

from app.core.config import settings
from app.core.errors import AuthFailure, AuthFailureKind

DEFAULT_ROLE = "admin"


@dataclass(frozen=True)
class Principal:
    subject: str
    role: str


def create_access_token(
    subject: Union[str, Any],
    role: str = DEFAULT_ROLE,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Access token for the admin dashboard.
    Login lives outside this service; this is used by scripts and tests.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"exp": expire, "sub": str(subject), "role": role, "type": "access"}
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def authenticate(token: Optional[str]) -> Principal:
    """
    Verify a bearer token and return who is calling.
    Raises AuthFailure with kind missing / expired / invalid.
    """
    if not token:
        raise AuthFailure(AuthFailureKind.MISSING)

    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise AuthFailure(AuthFailureKind.EXPIRED)
    except JWTError as e:
        raise AuthFailure(AuthFailureKind.INVALID, detail=str(e))

    subject = payload.get("sub")
    if not subject:
        raise AuthFailure(AuthFailureKind.INVALID, detail="token has no subject")

    return Principal(subject=str(subject), role=str(payload.get("role") or ""))
