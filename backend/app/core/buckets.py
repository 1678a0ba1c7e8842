# backend/app/core/buckets.py
"""
Categorization rules and canonical bucket orders.

The per-record view (FeedbackRead.nps_category) and the aggregation
pipeline (nps_category_expression) both derive from the thresholds below.
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Sequence, Tuple


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class NpsCategory(str, Enum):
    DETRACTOR = "Detractor"
    PASSIVE = "Passive"
    PROMOTER = "Promoter"


class RatingCategory(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


NPS_MIN, NPS_MAX = 0, 10
RATING_MIN, RATING_MAX = 1, 5

PROMOTER_MIN_NPS = 9
PASSIVE_MIN_NPS = 7
HIGH_MIN_RATING = 4
MEDIUM_MIN_RATING = 3

# Fixed output orders for every distribution
NPS_KEYS: Tuple[int, ...] = tuple(range(NPS_MIN, NPS_MAX + 1))
RATING_KEYS: Tuple[int, ...] = tuple(range(RATING_MIN, RATING_MAX + 1))
SENTIMENT_KEYS: Tuple[str, ...] = tuple(s.value for s in Sentiment)
NPS_CATEGORY_KEYS: Tuple[str, ...] = tuple(c.value for c in NpsCategory)

TWO_PLACES = Decimal("0.01")


def nps_category(nps: int) -> NpsCategory:
    if nps >= PROMOTER_MIN_NPS:
        return NpsCategory.PROMOTER
    if nps >= PASSIVE_MIN_NPS:
        return NpsCategory.PASSIVE
    return NpsCategory.DETRACTOR


def rating_category(rating: int) -> RatingCategory:
    if rating >= HIGH_MIN_RATING:
        return RatingCategory.HIGH
    if rating >= MEDIUM_MIN_RATING:
        return RatingCategory.MEDIUM
    return RatingCategory.LOW


def nps_category_expression(field: str = "$nps") -> Dict[str, Any]:
    """Mongo aggregation expression equivalent to nps_category()."""
    return {
        "$cond": [
            {"$gte": [field, PROMOTER_MIN_NPS]},
            NpsCategory.PROMOTER.value,
            {
                "$cond": [
                    {"$gte": [field, PASSIVE_MIN_NPS]},
                    NpsCategory.PASSIVE.value,
                    NpsCategory.DETRACTOR.value,
                ]
            },
        ]
    }


def densify(
    raw: Iterable[Tuple[Hashable, int]],
    keys: Sequence[Hashable],
    key_name: str,
) -> List[Dict[str, Any]]:
    """
    Expand a sparse (key, count) grouping into a complete distribution.

    Every key in `keys` is emitted in order; keys missing from `raw` get
    count 0, keys outside `keys` are dropped.
    """
    counts: Mapping[Hashable, int] = dict(raw)
    return [{key_name: key, "count": int(counts.get(key, 0))} for key in keys]


def round2(value) -> float:
    """Two decimals, halves rounded up (0.125 -> 0.13)."""
    if value is None:
        return 0.0
    return float(Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))
