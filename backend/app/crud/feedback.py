# backend/app/crud/feedback.py
"""
Motor-backed record store for feedback documents.

The engines in app.services only talk to FeedbackStore. Any pymongo error
is re-raised as StoreFault so callers never see driver diagnostics.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from app.core.buckets import (
    NpsCategory,
    Sentiment,
    PASSIVE_MIN_NPS,
    PROMOTER_MIN_NPS,
    nps_category_expression,
)
from app.core.config import settings
from app.core.errors import StoreFault
from app.db.mongo import get_db
from app.models.common import utcnow
from app.models.feedback import FeedbackInDB
from app.schemas.feedback import FeedbackRead

logger = logging.getLogger(__name__)

SortSpec = Sequence[Tuple[str, int]]


class GroupKey(str, Enum):
    NPS = "nps"
    RATING = "rating"
    SENTIMENT = "sentiment"
    NPS_CATEGORY = "npsCategory"


@dataclass(frozen=True)
class FeedbackStats:
    total_feedback: int = 0
    avg_rating: float = 0.0
    avg_nps: float = 0.0
    total_promoters: int = 0
    total_passives: int = 0
    total_detractors: int = 0
    positive_sentiment: int = 0
    neutral_sentiment: int = 0
    negative_sentiment: int = 0

    def category_counts(self) -> List[Tuple[str, int]]:
        return [
            (NpsCategory.DETRACTOR.value, self.total_detractors),
            (NpsCategory.PASSIVE.value, self.total_passives),
            (NpsCategory.PROMOTER.value, self.total_promoters),
        ]

    def sentiment_counts(self) -> List[Tuple[str, int]]:
        return [
            (Sentiment.POSITIVE.value, self.positive_sentiment),
            (Sentiment.NEUTRAL.value, self.neutral_sentiment),
            (Sentiment.NEGATIVE.value, self.negative_sentiment),
        ]


def _count_if(condition: Dict[str, Any]) -> Dict[str, Any]:
    return {"$sum": {"$cond": [condition, 1, 0]}}


STATS_PIPELINE: List[Dict[str, Any]] = [
    {
        "$group": {
            "_id": None,
            "totalFeedback": {"$sum": 1},
            "avgRating": {"$avg": "$rating"},
            "avgNps": {"$avg": "$nps"},
            "totalPromoters": _count_if({"$gte": ["$nps", PROMOTER_MIN_NPS]}),
            "totalPassives": _count_if(
                {"$and": [{"$gte": ["$nps", PASSIVE_MIN_NPS]}, {"$lt": ["$nps", PROMOTER_MIN_NPS]}]}
            ),
            "totalDetractors": _count_if({"$lt": ["$nps", PASSIVE_MIN_NPS]}),
            "positiveSentiment": _count_if({"$eq": ["$sentiment", Sentiment.POSITIVE.value]}),
            "neutralSentiment": _count_if({"$eq": ["$sentiment", Sentiment.NEUTRAL.value]}),
            "negativeSentiment": _count_if({"$eq": ["$sentiment", Sentiment.NEGATIVE.value]}),
        }
    }
]


def group_pipeline(group_key: GroupKey) -> List[Dict[str, Any]]:
    pipeline: List[Dict[str, Any]] = []
    if group_key is GroupKey.NPS_CATEGORY:
        pipeline.append({"$addFields": {"npsCategory": nps_category_expression("$nps")}})
    pipeline.append({"$group": {"_id": f"${group_key.value}", "count": {"$sum": 1}}})
    pipeline.append({"$sort": {"_id": 1}})
    return pipeline


def _safe_object_id(feedback_id) -> Optional[ObjectId]:
    if isinstance(feedback_id, ObjectId):
        return feedback_id
    if isinstance(feedback_id, str):
        feedback_id = feedback_id.strip()
    try:
        return ObjectId(feedback_id)
    except (InvalidId, TypeError):
        return None


def serialize_feedback_read(doc) -> FeedbackRead:
    """
    Mongo document(dict) -> FeedbackRead
    id is always rendered as str
    """
    return FeedbackRead(
        id=str(doc["_id"]),
        name=doc["name"],
        email=doc["email"],
        product=doc["product"],
        nps=doc["nps"],
        rating=doc["rating"],
        feedback_text=doc["feedbackText"],
        sentiment=doc["sentiment"],
        created_at=doc["createdAt"],
        updated_at=doc.get("updatedAt") or doc["createdAt"],
    )


@contextmanager
def _store_errors(operation: str):
    try:
        yield
    except PyMongoError as e:
        logger.error("feedback store %s failed: %s", operation, e)
        raise StoreFault(detail=f"{operation}: {e}") from e


class FeedbackStore:
    """Queryable feedback collection."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    # READ MANY
    async def find(
        self,
        predicate: Dict[str, Any],
        sort: SortSpec,
        skip: int,
        limit: int,
    ) -> List[FeedbackRead]:
        with _store_errors("find"):
            cursor = self.collection.find(predicate).sort(list(sort)).skip(skip).limit(limit)
            docs = await cursor.to_list(length=limit)
        return [serialize_feedback_read(d) for d in docs]

    async def count(self, predicate: Dict[str, Any]) -> int:
        with _store_errors("count"):
            return await self.collection.count_documents(predicate)

    # AGGREGATE
    async def aggregate(self, group_key: GroupKey) -> List[Tuple[Any, int]]:
        with _store_errors(f"aggregate[{group_key.value}]"):
            cursor = self.collection.aggregate(group_pipeline(group_key))
            rows = await cursor.to_list(length=None)
        return [(row["_id"], row["count"]) for row in rows]

    async def stats_summary(self) -> FeedbackStats:
        with _store_errors("stats"):
            cursor = self.collection.aggregate(STATS_PIPELINE)
            rows = await cursor.to_list(length=1)

        if not rows:
            return FeedbackStats()

        row = rows[0]
        return FeedbackStats(
            total_feedback=row.get("totalFeedback", 0),
            avg_rating=row.get("avgRating") or 0.0,
            avg_nps=row.get("avgNps") or 0.0,
            total_promoters=row.get("totalPromoters", 0),
            total_passives=row.get("totalPassives", 0),
            total_detractors=row.get("totalDetractors", 0),
            positive_sentiment=row.get("positiveSentiment", 0),
            neutral_sentiment=row.get("neutralSentiment", 0),
            negative_sentiment=row.get("negativeSentiment", 0),
        )

    # CREATE
    async def insert(self, record: FeedbackInDB) -> FeedbackRead:
        doc = record.to_document()
        now = utcnow()
        doc["createdAt"] = doc.get("createdAt") or now
        doc["updatedAt"] = now

        with _store_errors("insert"):
            res = await self.collection.insert_one(doc)
            saved = await self.collection.find_one({"_id": res.inserted_id})
        if not saved:
            raise StoreFault(detail="inserted feedback could not be read back")

        return serialize_feedback_read(saved)

    # READ ONE
    async def find_by_id(self, feedback_id: str) -> Optional[FeedbackRead]:
        oid = _safe_object_id(feedback_id)
        if oid is None:
            return None

        with _store_errors("find_by_id"):
            doc = await self.collection.find_one({"_id": oid})
        return serialize_feedback_read(doc) if doc else None

    # DELETE
    async def delete_by_id(self, feedback_id: str) -> bool:
        oid = _safe_object_id(feedback_id)
        if oid is None:
            return False

        with _store_errors("delete"):
            res = await self.collection.delete_one({"_id": oid})
        return res.deleted_count == 1


def get_feedback_collection() -> AsyncIOMotorCollection:
    """
    Feedback collection from the Motor DB handle.
    connect_to_mongo() must have run first.
    """
    return get_db()[settings.FEEDBACK_COLLECTION]


def get_feedback_store() -> FeedbackStore:
    return FeedbackStore(get_feedback_collection())
