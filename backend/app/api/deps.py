# backend/app/api/deps.py

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.security import Principal, authenticate
from app.crud.feedback import FeedbackStore, get_feedback_store

# auto_error=False so a missing header goes through our own 401 body
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    """
    Verify the bearer token and return the caller (subject + role).
    """
    token = credentials.credentials if credentials else None
    return authenticate(token)


def get_store() -> FeedbackStore:
    return get_feedback_store()
