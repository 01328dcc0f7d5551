"""Aggregation engine: turns a subject's reviews into stats, timeline, keywords and outliers."""

import logging
from typing import Mapping, Optional, Sequence

from .errors import MissingSentimentError
from .keywords import extract_keywords, sample_snippets
from .models import AggregateResult, Review, Sentiment, SentimentCounts, SentimentGroup
from .outliers import find_outliers
from .spikes import detect_spikes
from .timeline import bucket_reviews, build_timeline

logger = logging.getLogger(__name__)


def _group(reviews_by_sentiment: Mapping, sentiment: Sentiment) -> Sequence[Review]:
    # accept both Sentiment members and plain "POSITIVE"-style keys
    if sentiment in reviews_by_sentiment:
        return reviews_by_sentiment[sentiment]
    return reviews_by_sentiment[sentiment.value]


def aggregate(
    userkey: str,
    reviews_by_sentiment: Mapping[str, Sequence[Review]],
    current_score: Optional[float] = None,
) -> AggregateResult:
    """
    Aggregate a subject's reviews.

    Args:
        userkey: Identifier of the reviewed subject
        reviews_by_sentiment: POSITIVE / NEGATIVE / NEUTRAL review lists
        current_score: Current reputation score, anchors the timeline's last month

    Returns:
        AggregateResult; empty inputs yield zeroed counts and empty lists

    Raises:
        MissingSentimentError: a sentiment group is missing from the mapping
    """
    missing = [
        s.value for s in Sentiment
        if s not in reviews_by_sentiment and s.value not in reviews_by_sentiment
    ]
    if missing:
        raise MissingSentimentError(missing)

    positive = _group(reviews_by_sentiment, Sentiment.POSITIVE)
    negative = _group(reviews_by_sentiment, Sentiment.NEGATIVE)
    neutral = _group(reviews_by_sentiment, Sentiment.NEUTRAL)

    counts = SentimentCounts(positive=len(positive), negative=len(negative), neutral=len(neutral))

    month_index = bucket_reviews(positive, negative, neutral)
    timeline = build_timeline(month_index, current_score)

    positives = SentimentGroup(keywords=extract_keywords(positive), examples=sample_snippets(positive))
    negatives = SentimentGroup(keywords=extract_keywords(negative), examples=sample_snippets(negative))

    outliers = find_outliers([*positive, *negative, *neutral])
    spikes = detect_spikes(timeline, month_index.reviews)

    logger.info(
        f"Aggregated {counts.total} reviews for {userkey}: "
        f"{len(timeline)} months, {len(spikes)} spikes, {len(outliers)} outliers"
    )

    return AggregateResult(
        userkey=userkey,
        counts=counts,
        timeline=timeline,
        spikes=spikes,
        positives=positives,
        negatives=negatives,
        outliers=outliers,
    )
