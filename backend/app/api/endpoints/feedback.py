# backend/app/api/endpoints/feedback.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import ValidationError

from app.api import deps
from app.core.errors import NotFound, StoreFault, ValidationFailure
from app.core.security import Principal
from app.crud.feedback import FeedbackStore
from app.models.feedback import FeedbackInDB
from app.schemas.feedback import (
    DEFAULT_LIMIT,
    DEFAULT_SKIP,
    FeedbackCreate,
    FeedbackCreateResponse,
    FeedbackDeleteResponse,
    FeedbackPage,
    FeedbackRead,
    FilterCriteria,
)
from app.services.query_engine import query_feedback

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/feedback", tags=["Feedback"])


def filter_criteria(
    q: Optional[str] = None,
    product: Optional[str] = None,
    rating: Optional[str] = None,
    sentiment: Optional[str] = None,
    from_: Optional[str] = Query(default=None, alias="from"),
    to: Optional[str] = None,
    skip: Optional[str] = None,
    limit: Optional[str] = None,
) -> FilterCriteria:
    """
    Query string -> FilterCriteria.
    Everything arrives as text so skip/limit can fall back instead of failing.
    """
    raw = {
        "q": q,
        "product": product,
        "rating": rating,
        "sentiment": sentiment,
        "from": from_,
        "to": to,
        "skip": skip if skip is not None else DEFAULT_SKIP,
        "limit": limit if limit is not None else DEFAULT_LIMIT,
    }
    try:
        return FilterCriteria.model_validate(raw)
    except ValidationError as e:
        details = [
            {"field": ".".join(str(p) for p in err["loc"]).rstrip("_"), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationFailure(details)


# CREATE (public)
@router.post("", response_model=FeedbackCreateResponse, status_code=status.HTTP_201_CREATED)
async def submit_feedback(
    payload: FeedbackCreate,
    store: FeedbackStore = Depends(deps.get_store),
):
    record = FeedbackInDB(**payload.model_dump())
    saved = await store.insert(record)
    logger.info("Feedback %s submitted for product %r", saved.id, saved.product)
    return FeedbackCreateResponse(data=saved)


# READ ALL
@router.get("", response_model=FeedbackPage)
async def list_feedback(
    principal: Principal = Depends(deps.get_current_principal),
    criteria: FilterCriteria = Depends(filter_criteria),
    store: FeedbackStore = Depends(deps.get_store),
):
    """
    Filtered, paginated listing for the admin dashboard.
    A store outage yields an empty page rather than a 500.
    """
    try:
        return await query_feedback(store, criteria)
    except StoreFault as e:
        logger.warning("Listing degraded to empty page: %s", e.detail)
        return FeedbackPage.empty(skip=criteria.skip, limit=criteria.limit)


# READ ONE
@router.get("/{feedback_id}", response_model=FeedbackRead)
async def read_feedback(
    feedback_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    store: FeedbackStore = Depends(deps.get_store),
):
    feedback = await store.find_by_id(feedback_id)
    if feedback is None:
        raise NotFound()
    return feedback


# DELETE
@router.delete("/{feedback_id}", response_model=FeedbackDeleteResponse)
async def delete_feedback(
    feedback_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    store: FeedbackStore = Depends(deps.get_store),
):
    deleted = await store.delete_by_id(feedback_id)
    if not deleted:
        raise NotFound()
    logger.info("Feedback %s deleted by %s", feedback_id, principal.subject)
    return FeedbackDeleteResponse()
