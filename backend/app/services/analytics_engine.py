# backend/app/services/analytics_engine.py
"""
Dashboard analytics over the whole feedback collection.

Five independent store passes run concurrently; each raw grouping is then
densified against its canonical key order. A failure in any pass fails the
whole report.
"""

import asyncio
import logging
from typing import Any, Dict, List, Tuple

from app.core.buckets import (
    NPS_CATEGORY_KEYS,
    NPS_KEYS,
    RATING_KEYS,
    SENTIMENT_KEYS,
    densify,
    round2,
)
from app.crud.feedback import FeedbackStats, FeedbackStore, GroupKey
from app.schemas.analytics import AnalyticsReport, AnalyticsSummary

logger = logging.getLogger(__name__)


def _pairs(distribution, key_name: str) -> List[Tuple[str, int]]:
    return [(b[key_name], b["count"]) for b in distribution]


def check_stats_agree(
    stats: FeedbackStats,
    nps_distribution: List[Dict[str, Any]],
    sentiment_distribution: List[Dict[str, Any]],
    nps_categories: List[Dict[str, Any]],
) -> bool:
    """
    Compare the stats pass with the grouping passes.
    A mismatch only happens when a write lands between passes, so it is
    logged and the report is still returned.
    """
    mismatches = []
    if stats.total_feedback != sum(b["count"] for b in nps_distribution):
        mismatches.append("total")
    if stats.category_counts() != _pairs(nps_categories, "category"):
        mismatches.append("npsCategories")
    if stats.sentiment_counts() != _pairs(sentiment_distribution, "sentiment"):
        mismatches.append("sentiment")

    if mismatches:
        logger.warning(
            "Stats pass disagrees with grouping passes on %s; a write raced the aggregation",
            ", ".join(mismatches),
        )
    return not mismatches


async def summarize(store: FeedbackStore) -> AnalyticsReport:
    nps_raw, rating_raw, sentiment_raw, category_raw, stats = await asyncio.gather(
        store.aggregate(GroupKey.NPS),
        store.aggregate(GroupKey.RATING),
        store.aggregate(GroupKey.SENTIMENT),
        store.aggregate(GroupKey.NPS_CATEGORY),
        store.stats_summary(),
    )

    nps_distribution = densify(nps_raw, NPS_KEYS, "score")
    sentiment_distribution = densify(sentiment_raw, SENTIMENT_KEYS, "sentiment")
    nps_categories = densify(category_raw, NPS_CATEGORY_KEYS, "category")

    check_stats_agree(stats, nps_distribution, sentiment_distribution, nps_categories)

    return AnalyticsReport(
        nps_distribution=nps_distribution,
        rating_distribution=densify(rating_raw, RATING_KEYS, "rating"),
        sentiment_distribution=sentiment_distribution,
        nps_categories=nps_categories,
        summary=AnalyticsSummary(
            total_feedback=stats.total_feedback,
            avg_rating=round2(stats.avg_rating),
            avg_nps=round2(stats.avg_nps),
        ),
    )
