# backend/app/services/query_engine.py
"""
Feedback listing: FilterCriteria -> Mongo predicate -> one page of results.
"""

import asyncio
import re
from typing import Any, Dict, List, Tuple

from app.crud.feedback import FeedbackStore
from app.schemas.feedback import FeedbackPage, FilterCriteria

# Newest first; _id breaks createdAt ties so pages never overlap
FEEDBACK_SORT: List[Tuple[str, int]] = [("createdAt", -1), ("_id", 1)]

SEARCH_FIELDS = ("name", "product", "feedbackText")


def _contains(needle: str) -> Dict[str, str]:
    """Case-insensitive literal substring match."""
    return {"$regex": re.escape(needle), "$options": "i"}


def build_predicate(criteria: FilterCriteria) -> Dict[str, Any]:
    """
    AND of every present criterion. `q` alone expands to an OR across
    name / product / feedbackText.
    """
    predicate: Dict[str, Any] = {}

    if criteria.q:
        predicate["$or"] = [{field: _contains(criteria.q)} for field in SEARCH_FIELDS]

    if criteria.product:
        predicate["product"] = _contains(criteria.product)

    if criteria.rating is not None:
        predicate["rating"] = criteria.rating

    if criteria.sentiment is not None:
        predicate["sentiment"] = criteria.sentiment.value

    if criteria.from_ is not None or criteria.to is not None:
        created_at: Dict[str, Any] = {}
        if criteria.from_ is not None:
            created_at["$gte"] = criteria.from_
        if criteria.to is not None:
            created_at["$lte"] = criteria.to
        predicate["createdAt"] = created_at

    return predicate


async def query_feedback(store: FeedbackStore, criteria: FilterCriteria) -> FeedbackPage:
    """
    Run one listing page. StoreFault propagates; deciding whether to mask
    it is up to the caller.
    """
    predicate = build_predicate(criteria)

    items, total = await asyncio.gather(
        store.find(predicate, FEEDBACK_SORT, criteria.skip, criteria.limit),
        store.count(predicate),
    )

    return FeedbackPage(
        items=items,
        total=total,
        skip=criteria.skip,
        limit=criteria.limit,
        has_more=total > criteria.skip + len(items),
    )
