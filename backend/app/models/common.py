# backend/app/models/common.py

from datetime import datetime, timezone
from typing import Annotated

from bson import ObjectId
from pydantic import BeforeValidator

# ObjectId in, str out
PyObjectId = Annotated[str, BeforeValidator(lambda v: str(v) if isinstance(v, ObjectId) else v)]


def utcnow() -> datetime:
    """
    Naive UTC timestamp, matching what pymongo returns for stored dates.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def as_aware_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
