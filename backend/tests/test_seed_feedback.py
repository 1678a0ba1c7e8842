import random

from app.core.buckets import NPS_KEYS, nps_category
from scripts.seed_feedback import SENTIMENT_BY_CATEGORY, make_feedback


def test_seeded_sentiment_follows_nps_category():
    rng = random.Random(7)

    records = [make_feedback(i, rng) for i in range(200)]

    assert {r.nps for r in records} <= set(NPS_KEYS)
    for r in records:
        assert r.sentiment is SENTIMENT_BY_CATEGORY[nps_category(r.nps)]
        assert 1 <= r.rating <= 5
        assert r.email == r.email.lower()
