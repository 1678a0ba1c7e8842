# backend/app/schemas/analytics.py

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class NpsBucket(BaseModel):
    score: int
    count: int


class RatingBucket(BaseModel):
    rating: int
    count: int


class SentimentBucket(BaseModel):
    sentiment: str
    count: int


class NpsCategoryBucket(BaseModel):
    category: str
    count: int


class AnalyticsSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_feedback: int = 0
    avg_rating: float = 0.0
    avg_nps: float = 0.0


class AnalyticsReport(BaseModel):
    """
    [Response] GET /analytics
    Every distribution is complete and in canonical key order.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    nps_distribution: List[NpsBucket] = Field(min_length=11, max_length=11)
    rating_distribution: List[RatingBucket] = Field(min_length=5, max_length=5)
    sentiment_distribution: List[SentimentBucket] = Field(min_length=3, max_length=3)
    nps_categories: List[NpsCategoryBucket] = Field(min_length=3, max_length=3)
    summary: AnalyticsSummary
