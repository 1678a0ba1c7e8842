"""
Aggregation engine: complete distributions, summary math, fault handling.
"""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import AutoReconnect

from app.core.buckets import NPS_CATEGORY_KEYS, NPS_KEYS, SENTIMENT_KEYS, densify
from app.core.errors import StoreFault
from app.crud.feedback import FeedbackStore, GroupKey
from app.services.analytics_engine import check_stats_agree, summarize
from factories import make_doc


def _counts(buckets):
    return [b.count for b in buckets]


@pytest.mark.asyncio
async def test_two_record_scenario(store, collection):
    await collection.insert_many(
        [
            make_doc(nps=9, rating=5, sentiment="positive"),
            make_doc(nps=6, rating=2, sentiment="negative"),
        ]
    )

    report = await summarize(store)

    assert report.summary.total_feedback == 2
    assert report.summary.avg_rating == 3.5
    assert report.summary.avg_nps == 7.5
    assert [(b.category, b.count) for b in report.nps_categories] == [
        ("Detractor", 1),
        ("Passive", 0),
        ("Promoter", 1),
    ]
    assert [(b.sentiment, b.count) for b in report.sentiment_distribution] == [
        ("positive", 1),
        ("neutral", 0),
        ("negative", 1),
    ]
    assert _counts(report.rating_distribution) == [0, 1, 0, 0, 1]
    assert report.nps_distribution[6].count == 1
    assert report.nps_distribution[9].count == 1


@pytest.mark.asyncio
async def test_empty_collection_reports_zeros(store):
    report = await summarize(store)

    assert report.summary.total_feedback == 0
    assert report.summary.avg_rating == 0
    assert report.summary.avg_nps == 0
    assert [b.score for b in report.nps_distribution] == list(range(11))
    assert [b.rating for b in report.rating_distribution] == [1, 2, 3, 4, 5]
    assert sum(_counts(report.nps_distribution)) == 0
    assert sum(_counts(report.nps_categories)) == 0


@pytest.mark.asyncio
async def test_distributions_are_complete_and_sum_to_total(store, collection):
    docs = []
    for i in range(23):
        docs.append(
            make_doc(
                nps=(i * 7) % 11,
                rating=(i % 5) + 1,
                sentiment=("positive", "neutral", "negative")[i % 3],
            )
        )
    await collection.insert_many(docs)

    report = await summarize(store)
    total = report.summary.total_feedback

    assert total == 23
    assert len(report.nps_distribution) == 11
    assert len(report.rating_distribution) == 5
    assert len(report.sentiment_distribution) == 3
    assert len(report.nps_categories) == 3
    for distribution in (
        report.nps_distribution,
        report.rating_distribution,
        report.sentiment_distribution,
        report.nps_categories,
    ):
        assert sum(_counts(distribution)) == total


@pytest.mark.asyncio
async def test_category_pass_agrees_with_stats_pass(store, collection):
    await collection.insert_many([make_doc(nps=n) for n in (0, 3, 6, 7, 8, 9, 10, 10)])

    stats = await store.stats_summary()
    grouped = dict(await store.aggregate(GroupKey.NPS_CATEGORY))

    assert dict(stats.category_counts()) == {"Detractor": 3, "Passive": 2, "Promoter": 3}
    assert grouped == dict(stats.category_counts())


@pytest.mark.asyncio
async def test_averages_rounded_to_two_places(store, collection):
    await collection.insert_many([make_doc(nps=10, rating=5), make_doc(nps=7, rating=4), make_doc(nps=6, rating=4)])

    report = await summarize(store)

    assert report.summary.avg_nps == 7.67
    assert report.summary.avg_rating == 4.33


@pytest.mark.asyncio
async def test_summarize_is_idempotent(store, collection):
    await collection.insert_many([make_doc(nps=n % 11, rating=(n % 5) + 1) for n in range(15)])

    first = await summarize(store)
    second = await summarize(store)

    assert first.model_dump() == second.model_dump()


@pytest.mark.asyncio
async def test_report_serializes_with_camel_case_keys(store, collection):
    await collection.insert_many([make_doc()])

    body = (await summarize(store)).model_dump(by_alias=True)

    assert set(body) == {
        "npsDistribution",
        "ratingDistribution",
        "sentimentDistribution",
        "npsCategories",
        "summary",
    }
    assert set(body["summary"]) == {"totalFeedback", "avgRating", "avgNps"}


@pytest.mark.asyncio
async def test_any_failing_pass_aborts_the_report():
    collection = MagicMock()
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=[])
    calls = {"n": 0}

    def aggregate(pipeline):
        calls["n"] += 1
        if calls["n"] == 3:
            raise AutoReconnect("primary stepped down")
        return cursor

    collection.aggregate.side_effect = aggregate

    with pytest.raises(StoreFault):
        await summarize(FeedbackStore(collection))


@pytest.mark.asyncio
async def test_half_way_averages_round_up(store, collection):
    # avg nps 0.125, avg rating 1.125
    await collection.insert_many(
        [make_doc(nps=0, rating=1) for _ in range(7)] + [make_doc(nps=1, rating=2)]
    )

    report = await summarize(store)

    assert report.summary.avg_nps == 0.13
    assert report.summary.avg_rating == 1.13


async def _grouped(store):
    return (
        densify(await store.aggregate(GroupKey.NPS), NPS_KEYS, "score"),
        densify(await store.aggregate(GroupKey.SENTIMENT), SENTIMENT_KEYS, "sentiment"),
        densify(await store.aggregate(GroupKey.NPS_CATEGORY), NPS_CATEGORY_KEYS, "category"),
    )


@pytest.mark.asyncio
async def test_stats_pass_agrees_with_every_grouping_pass(store, collection):
    await collection.insert_many(
        [
            make_doc(nps=2, sentiment="negative"),
            make_doc(nps=7, sentiment="neutral"),
            make_doc(nps=10, sentiment="positive"),
            make_doc(nps=9, sentiment="positive"),
        ]
    )

    nps, sentiment, categories = await _grouped(store)
    stats = await store.stats_summary()

    assert dict(stats.sentiment_counts()) == {"positive": 2, "neutral": 1, "negative": 1}
    assert check_stats_agree(stats, nps, sentiment, categories) is True


@pytest.mark.asyncio
async def test_write_between_passes_is_logged(store, collection, caplog):
    await collection.insert_many([make_doc(nps=8, sentiment="neutral")])
    nps, sentiment, categories = await _grouped(store)

    await collection.insert_one(make_doc(nps=3, sentiment="negative"))
    stats = await store.stats_summary()

    with caplog.at_level(logging.WARNING, logger="app.services.analytics_engine"):
        agreed = check_stats_agree(stats, nps, sentiment, categories)

    assert agreed is False
    message = caplog.records[-1].getMessage()
    assert "total" in message
    assert "npsCategories" in message
    assert "sentiment" in message
