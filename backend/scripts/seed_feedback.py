import argparse
import asyncio
import logging
import os
import random
import sys
from datetime import timedelta

# make `app` importable when run from backend/scripts
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from app.core.buckets import NPS_MAX, NPS_MIN, NpsCategory, Sentiment, nps_category
from app.core.config import settings
from app.core.log_config import configure_logging
from app.crud.feedback import get_feedback_store
from app.db.mongo import close_mongo_connection, connect_to_mongo, ensure_indexes, get_db
from app.models.common import utcnow
from app.models.feedback import FeedbackInDB

logger = logging.getLogger("seed_feedback")

PRODUCTS = ["Mobile App", "Web Dashboard", "Checkout", "Support Portal"]
NAMES = ["Alex Kim", "Sam Lee", "Jordan Park", "Taylor Choi", "Morgan Yoon"]
SENTIMENT_BY_CATEGORY = {
    NpsCategory.PROMOTER: Sentiment.POSITIVE,
    NpsCategory.PASSIVE: Sentiment.NEUTRAL,
    NpsCategory.DETRACTOR: Sentiment.NEGATIVE,
}
TEXTS = {
    Sentiment.POSITIVE: "Really smooth experience, would recommend to a friend.",
    Sentiment.NEUTRAL: "It works, but nothing stands out compared to alternatives.",
    Sentiment.NEGATIVE: "Frequent errors and slow pages made this frustrating.",
}


def make_feedback(i: int, rng: random.Random) -> FeedbackInDB:
    nps = rng.randint(NPS_MIN, NPS_MAX)
    sentiment = SENTIMENT_BY_CATEGORY[nps_category(nps)]

    name = rng.choice(NAMES)
    created = utcnow() - timedelta(hours=rng.randint(0, 24 * 30))
    return FeedbackInDB(
        name=name,
        email=f"{name.split()[0].lower()}{i}@example.com",
        product=rng.choice(PRODUCTS),
        nps=nps,
        rating=max(1, min(5, round(nps / 2))),
        feedback_text=TEXTS[sentiment],
        sentiment=sentiment,
        created_at=created,
    )


async def main(count: int, seed: int):
    await connect_to_mongo()
    try:
        await ensure_indexes(get_db())
        store = get_feedback_store()
        rng = random.Random(seed)
        for i in range(count):
            await store.insert(make_feedback(i, rng))
        logger.info("Inserted %d feedback documents into %s", count, settings.FEEDBACK_COLLECTION)
    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Insert sample feedback for local development")
    parser.add_argument("--count", type=int, default=50)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL)
    asyncio.run(main(args.count, args.seed))
