# backend/app/schemas/feedback.py

from datetime import datetime
from typing import List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    computed_field,
    field_validator,
)
from pydantic.alias_generators import to_camel

from app.core.buckets import (
    NPS_MAX,
    NPS_MIN,
    RATING_MAX,
    RATING_MIN,
    NpsCategory,
    RatingCategory,
    Sentiment,
    nps_category,
    rating_category,
)
from app.models.common import as_aware_utc, to_naive_utc

DEFAULT_SKIP = 0
DEFAULT_LIMIT = 50
MAX_LIMIT = 100


# -------------------------
# Shared blank handling
# -------------------------
def _strip_to_none(v):
    """
    Optional[str] input:
    - None stays None
    - "   " -> None
    - otherwise the stripped string
    """
    if v is None:
        return None
    if not isinstance(v, str):
        return v
    s = v.strip()
    return s or None


class FeedbackCreate(BaseModel):
    """
    [Request] POST /feedback
    Public submission payload. Field names arrive camelCase.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    product: str = Field(min_length=1, max_length=100)
    nps: int = Field(ge=NPS_MIN, le=NPS_MAX)
    rating: int = Field(ge=RATING_MIN, le=RATING_MAX)
    feedback_text: str = Field(min_length=10, max_length=1000)
    sentiment: Sentiment

    @field_validator("nps", "rating", mode="before")
    @classmethod
    def reject_bool(cls, v):
        # JSON true/false would otherwise coerce to 1/0
        if isinstance(v, bool):
            raise ValueError("must be a whole number")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            if v == "":
                raise ValueError("email must not be blank")
        return v


class FeedbackRead(BaseModel):
    """
    [Response] a stored feedback record plus its derived categories.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: str
    name: str
    email: str
    product: str
    nps: int
    rating: int
    feedback_text: str
    sentiment: Sentiment
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def mark_utc(cls, v: datetime) -> datetime:
        return as_aware_utc(v)

    @computed_field(alias="npsCategory")
    @property
    def nps_category(self) -> NpsCategory:
        return nps_category(self.nps)

    @computed_field(alias="ratingCategory")
    @property
    def rating_category(self) -> RatingCategory:
        return rating_category(self.rating)


class FilterCriteria(BaseModel):
    """
    One listing query. Every field is optional and blank means absent.

    skip/limit never fail validation: malformed or out-of-range values fall
    back to their defaults so a bad pager never breaks the dashboard.
    """
    model_config = ConfigDict(populate_by_name=True)

    q: Optional[str] = None
    product: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=RATING_MIN, le=RATING_MAX)
    sentiment: Optional[Sentiment] = None
    from_: Optional[datetime] = Field(default=None, alias="from")
    to: Optional[datetime] = None
    skip: int = DEFAULT_SKIP
    limit: int = DEFAULT_LIMIT

    @field_validator("q", "product", "rating", "sentiment", "from_", "to", mode="before")
    @classmethod
    def blank_is_absent(cls, v):
        return _strip_to_none(v)

    @field_validator("from_", "to")
    @classmethod
    def normalize_bounds(cls, v: Optional[datetime]) -> Optional[datetime]:
        # Stored timestamps are naive UTC
        return to_naive_utc(v) if v is not None else None

    @field_validator("skip", mode="before")
    @classmethod
    def coerce_skip(cls, v):
        value = _parse_int(v)
        if value is None or value < 0:
            return DEFAULT_SKIP
        return value

    @field_validator("limit", mode="before")
    @classmethod
    def coerce_limit(cls, v):
        value = _parse_int(v)
        if value is None or not 1 <= value <= MAX_LIMIT:
            return DEFAULT_LIMIT
        return value


def _parse_int(v) -> Optional[int]:
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    if isinstance(v, str):
        try:
            return int(v.strip())
        except ValueError:
            return None
    return None


class FeedbackPage(BaseModel):
    """
    [Response] GET /feedback
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: List[FeedbackRead]
    total: int
    skip: int
    limit: int
    has_more: bool

    @classmethod
    def empty(cls, skip: int = DEFAULT_SKIP, limit: int = DEFAULT_LIMIT) -> "FeedbackPage":
        return cls(items=[], total=0, skip=skip, limit=limit, has_more=False)


class FeedbackCreateResponse(BaseModel):
    """
    [Response] POST /feedback
    """
    error: bool = False
    message: str = "Feedback submitted successfully"
    data: FeedbackRead


class FeedbackDeleteResponse(BaseModel):
    """
    [Response] DELETE /feedback/{id}
    """
    error: bool = False
    message: str = "Feedback deleted successfully"
