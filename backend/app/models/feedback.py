# backend/app/models/feedback.py

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.buckets import Sentiment
from app.models.common import PyObjectId, utcnow


class FeedbackInDB(BaseModel):
    """
    Document stored in the 'feedback' collection.
    Field names on disk are camelCase (feedbackText, createdAt, ...).
    """
    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    name: str
    email: str
    product: str
    nps: int
    rating: int
    feedback_text: str
    sentiment: Sentiment
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_document(self) -> Dict[str, Any]:
        """Insert payload; _id is left for Mongo to assign."""
        doc = self.model_dump(by_alias=True, exclude={"id"})
        doc["sentiment"] = self.sentiment.value
        return doc
