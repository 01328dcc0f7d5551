"""Spike (anomalous review volume) detection and classification."""

import logging
import math
from typing import Dict, List, Mapping, Optional, Sequence

from .constants import SpikeConstants
from .models import Review, Spike, SpikeType, TimelineMonth

logger = logging.getLogger(__name__)


def _round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def classify_spike(pos: int, neg: int, review_count: int) -> SpikeType:
    """
    Classify a month by its sentiment mix.

    Rules are checked in order: a clear positive majority with little
    negativity, then a substantial negative share, then whichever side
    outweighs the other by DOMINANCE_FACTOR, otherwise mixed.
    """
    if review_count <= 0:
        return SpikeType.MIXED

    pos_ratio = pos / review_count
    neg_ratio = neg / review_count

    if pos_ratio >= SpikeConstants.POSITIVE_RATIO and neg_ratio < SpikeConstants.POSITIVE_MAX_NEGATIVE_RATIO:
        return SpikeType.POSITIVE
    if neg_ratio >= SpikeConstants.NEGATIVE_RATIO:
        return SpikeType.NEGATIVE
    if pos_ratio > neg_ratio * SpikeConstants.DOMINANCE_FACTOR:
        return SpikeType.POSITIVE
    if neg_ratio > pos_ratio * SpikeConstants.DOMINANCE_FACTOR:
        return SpikeType.NEGATIVE
    return SpikeType.MIXED


def change_percent(review_count: int, previous: Optional[TimelineMonth]) -> float:
    """Percent change from the previous timeline month; 0 without a usable previous month."""
    if previous is None or previous.review_count <= 0:
        return 0.0
    return (review_count - previous.review_count) / previous.review_count * 100


def detect_spikes(
    timeline: Sequence[TimelineMonth],
    reviews_by_month: Optional[Mapping[str, List[Review]]] = None,
    limit: int = SpikeConstants.MAX_SPIKES,
) -> List[Spike]:
    """
    Find months whose review volume is anomalous.

    A month with at least MIN_MONTH_REVIEWS reviews is a spike when its volume
    is MAGNITUDE_THRESHOLD times the overall monthly average, or when it grew
    by CHANGE_PERCENT_THRESHOLD percent over the previous month. Nothing is
    reported with fewer than MIN_MONTHS months or an average below
    MIN_AVG_REVIEWS. Results are sorted by magnitude, largest first, and
    capped at ``limit``.
    """
    if len(timeline) < SpikeConstants.MIN_MONTHS:
        return []

    reviews_by_month = reviews_by_month or {}
    avg_review_count = sum(m.review_count for m in timeline) / len(timeline)
    if avg_review_count < SpikeConstants.MIN_AVG_REVIEWS:
        return []

    spikes: List[Spike] = []
    for index, month in enumerate(timeline):
        review_count = month.review_count
        if review_count < SpikeConstants.MIN_MONTH_REVIEWS:
            continue

        magnitude = review_count / avg_review_count
        change = change_percent(review_count, timeline[index - 1] if index > 0 else None)

        if magnitude < SpikeConstants.MAGNITUDE_THRESHOLD and change < SpikeConstants.CHANGE_PERCENT_THRESHOLD:
            continue

        spikes.append(Spike(
            month=month.month,
            type=classify_spike(month.pos, month.neg, review_count),
            magnitude=round(magnitude, 2),
            change_percent=int(_round_half_up(change)),
            review_count=review_count,
            avg_review_count=_round_half_up(avg_review_count, 1),
            reviews=list(reviews_by_month.get(month.month, [])),
        ))

    spikes.sort(key=lambda s: s.magnitude, reverse=True)
    logger.debug(f"Detected {len(spikes)} spikes over {len(timeline)} months")
    return spikes[:limit]
