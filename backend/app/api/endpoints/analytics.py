# backend/app/api/endpoints/analytics.py

from fastapi import APIRouter, Depends

from app.api import deps
from app.core.security import Principal
from app.crud.feedback import FeedbackStore
from app.schemas.analytics import AnalyticsReport
from app.services.analytics_engine import summarize

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("", response_model=AnalyticsReport)
async def read_analytics(
    principal: Principal = Depends(deps.get_current_principal),
    store: FeedbackStore = Depends(deps.get_store),
):
    """
    All chart data for the dashboard in one report.
    No partial results: a store fault surfaces as a 500.
    """
    return await summarize(store)
