"""Monthly timeline with an interpolated reputation score trajectory."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .constants import TimelineConstants
from .models import Review, TimelineMonth

logger = logging.getLogger(__name__)


@dataclass
class MonthBucket:
    """Per-month sentiment counters."""
    pos: int = 0
    neg: int = 0
    neu: int = 0


@dataclass
class MonthIndex:
    """Reviews bucketed by "YYYY-MM"."""
    buckets: Dict[str, MonthBucket] = field(default_factory=dict)
    reviews: Dict[str, List[Review]] = field(default_factory=dict)

    @property
    def months(self) -> List[str]:
        """Months in chronological order."""
        return sorted(self.buckets)


def bucket_reviews(
    positive: Sequence[Review],
    negative: Sequence[Review],
    neutral: Sequence[Review],
) -> MonthIndex:
    """Count reviews per month and keep a parallel per-month review list."""
    buckets: Dict[str, MonthBucket] = defaultdict(MonthBucket)
    by_month: Dict[str, List[Review]] = defaultdict(list)

    for reviews, attr in ((positive, "pos"), (negative, "neg"), (neutral, "neu")):
        for review in reviews:
            month = review.month
            bucket = buckets[month]
            setattr(bucket, attr, getattr(bucket, attr) + 1)
            by_month[month].append(review)

    return MonthIndex(buckets=dict(buckets), reviews=dict(by_month))


def month_score(
    bucket: MonthBucket,
    index: int,
    month_count: int,
    starting_score: float,
    final_score: float,
) -> int:
    """Linear progress from start to final score, nudged by the month's net sentiment."""
    progress = index / (month_count - 1) if month_count > 1 else 1
    base_score = starting_score + (final_score - starting_score) * progress
    net_sentiment = bucket.pos - bucket.neg + bucket.neu * TimelineConstants.NEUTRAL_WEIGHT
    variance = net_sentiment * TimelineConstants.VARIANCE_MULTIPLIER
    clamped = max(TimelineConstants.MIN_SCORE, min(TimelineConstants.MAX_SCORE, base_score + variance))
    # round half up
    return int(clamped + 0.5)


def build_timeline(month_index: MonthIndex, current_score: Optional[float] = None) -> List[TimelineMonth]:
    """
    Build the month-by-month timeline.

    Scores are a synthetic trajectory, not historical data: they start
    ``STARTING_SCORE_OFFSET`` below the anchor and move linearly toward it,
    with each month perturbed by its sentiment mix. The anchor is
    ``current_score`` when known (the last month is then forced to exactly
    that value) and ``DEFAULT_FINAL_SCORE`` otherwise.
    """
    months = month_index.months
    if not months:
        return []

    final_score = current_score if current_score is not None else TimelineConstants.DEFAULT_FINAL_SCORE
    starting_score = max(0, final_score - TimelineConstants.STARTING_SCORE_OFFSET)

    timeline = []
    for i, month in enumerate(months):
        bucket = month_index.buckets[month]
        timeline.append(TimelineMonth(
            month=month,
            pos=bucket.pos,
            neg=bucket.neg,
            neu=bucket.neu,
            score=month_score(bucket, i, len(months), starting_score, final_score),
        ))

    if current_score is not None:
        last = timeline[-1]
        timeline[-1] = TimelineMonth(
            month=last.month, pos=last.pos, neg=last.neg, neu=last.neu, score=int(round(current_score))
        )

    logger.debug(f"Built timeline with {len(timeline)} months (anchor={final_score})")
    return timeline
