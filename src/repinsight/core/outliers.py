"""Outlier detection over a subject's full review set."""

import logging
import math
from typing import List, Sequence

from .constants import OutlierConstants
from .models import Outlier, Review

logger = logging.getLogger(__name__)


def percentile(sorted_values: Sequence[float], fraction: float, default: float) -> float:
    """
    Nearest-rank percentile ``sorted_values[floor(fraction * n)]``.

    ``default`` is returned when the list is empty and also when the
    percentile itself is 0, so a corpus where almost every review has zero
    net votes keeps the wide default band instead of a zero-width one.
    """
    if not sorted_values:
        return default
    index = min(len(sorted_values) - 1, math.floor(fraction * len(sorted_values)))
    return sorted_values[index] or default


def find_length_outliers(reviews: Sequence[Review]) -> List[Outlier]:
    """Flag reviews whose comment is longer than the 95th percentile."""
    lengths = sorted(len(r.comment) for r in reviews if r.comment)
    if not lengths:
        return []

    threshold = percentile(lengths, OutlierConstants.HIGH_PERCENTILE, OutlierConstants.DEFAULT_LENGTH_THRESHOLD)
    return [
        Outlier(id=r.id, reason=f"Very long review ({len(r.comment)} chars)")
        for r in reviews
        if r.comment and len(r.comment) > threshold
    ]


def find_vote_outliers(reviews: Sequence[Review]) -> List[Outlier]:
    """Flag reviews whose net votes fall outside the 5th-95th percentile band."""
    net_votes = sorted(r.votes.net for r in reviews if r.votes is not None)
    if not net_votes:
        return []

    low = percentile(net_votes, OutlierConstants.LOW_PERCENTILE, OutlierConstants.DEFAULT_LOW_NET_VOTES)
    high = percentile(net_votes, OutlierConstants.HIGH_PERCENTILE, OutlierConstants.DEFAULT_HIGH_NET_VOTES)

    outliers = []
    for review in reviews:
        if review.votes is None:
            continue
        net = review.votes.net
        if net < low:
            outliers.append(Outlier(id=review.id, reason=f"Heavily downvoted (net: {net})"))
        elif net > high:
            outliers.append(Outlier(id=review.id, reason=f"Heavily upvoted (net: {net})"))
    return outliers


def find_outliers(reviews: Sequence[Review], limit: int = OutlierConstants.MAX_OUTLIERS) -> List[Outlier]:
    """Length outliers first, then vote outliers, truncated to ``limit``."""
    if not reviews:
        return []

    outliers = find_length_outliers(reviews) + find_vote_outliers(reviews)
    logger.debug(f"Found {len(outliers)} outliers across {len(reviews)} reviews")
    return outliers[:limit]
