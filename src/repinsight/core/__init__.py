"""Core modules for RepInsight."""

from .models import *
from .config import settings
from .errors import *
from .aggregate import aggregate

__all__ = [
    "settings",
    "aggregate",
    "Sentiment",
    "SpikeType",
    "Votes",
    "Review",
    "Keyword",
    "Snippet",
    "Outlier",
    "TimelineMonth",
    "Spike",
    "SentimentCounts",
    "SentimentGroup",
    "AggregateResult",
    "ThemeEvidence",
    "SummaryStats",
    "SummaryResult",
    "SpikeInsight",
    "EthosProfile",
    "Report",
    "RepInsightError",
    "MalformedReviewError",
    "MissingSentimentError",
    "EthosAPIError",
    "LLMResponseError",
]
