"""Reputation report pipeline: fetch, aggregate, summarize, explain spikes."""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence

from ..core.aggregate import aggregate
from ..core.constants import PromptConstants
from ..core.models import (
    EthosProfile,
    Report,
    Review,
    Sentiment,
    SummaryResult,
    SummaryStats,
)
from .ethos_client import EthosService
from .llm import LLMService, LLMServiceFactory
from .summary_cache import SummaryCache

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def display_name(userkey: str, profile: Optional[EthosProfile] = None) -> str:
    """Name used in prompts: twitter handle, then display name, then the userkey's last segment."""
    if profile is not None and (profile.twitter or profile.display_name):
        return profile.twitter or profile.display_name
    return userkey.split(":")[-1] or "the user"


def review_texts(reviews_by_sentiment: Mapping[Sentiment, Sequence[Review]]) -> Dict[str, List[str]]:
    """Comments longer than MIN_REVIEW_TEXT_LENGTH, keyed "positive"/"negative"/"neutral"."""
    def texts(sentiment: Sentiment) -> List[str]:
        reviews = reviews_by_sentiment.get(sentiment) or reviews_by_sentiment.get(sentiment.value) or []
        return [
            r.comment for r in reviews
            if r.comment and len(r.comment) > PromptConstants.MIN_REVIEW_TEXT_LENGTH
        ]

    return {
        "positive": texts(Sentiment.POSITIVE),
        "negative": texts(Sentiment.NEGATIVE),
        "neutral": texts(Sentiment.NEUTRAL),
    }


def empty_report(userkey: str, profile: Optional[EthosProfile] = None) -> Report:
    """Report for a subject with no reviews."""
    return Report(
        userkey=userkey,
        profile=profile,
        summary=SummaryResult(
            summary="No reviews found for this user.",
            positive_summary="No positive reviews.",
            negative_summary="No negative reviews.",
            positive_notes="Limited positive feedback.",
            negative_notes="No significant concerns.",
            positive_themes=[],
            negative_themes=[],
            positives=[],
            negatives=[],
            stats=SummaryStats(positive=0, negative=0, neutral=0, pct_positive=0),
            outliers=[],
        ),
        timeline=[],
        spike_insights=[],
        last_updated=_now_iso(),
    )


class ReportService:
    """Composes the review source, the aggregation engine, the LLM service and the cache."""

    def __init__(
        self,
        ethos: Optional[EthosService] = None,
        llm: Optional[LLMService] = None,
        cache: Optional[SummaryCache] = None,
    ):
        self._ethos = ethos
        self.llm = llm or LLMServiceFactory.create()
        self.cache = cache

    @property
    def ethos(self) -> EthosService:
        """Ethos client, created on first live fetch."""
        if self._ethos is None:
            self._ethos = EthosService()
        return self._ethos

    def report_from_reviews(
        self,
        userkey: str,
        reviews_by_sentiment: Mapping[Sentiment, Sequence[Review]],
        current_score: Optional[float] = None,
        profile: Optional[EthosProfile] = None,
        profile_name: Optional[str] = None,
    ) -> Report:
        """Build a report from reviews already in memory."""
        total = sum(len(v) for v in reviews_by_sentiment.values())
        if total == 0:
            return empty_report(userkey, profile)

        agg = aggregate(userkey, reviews_by_sentiment, current_score)
        name = profile_name or display_name(userkey, profile)

        summary = self.llm.summarize(agg, review_texts(reviews_by_sentiment), name)
        logger.info(f"Detected {len(agg.spikes)} spike(s) for {userkey}, analyzing...")
        insights = self.llm.analyze_spikes(agg.spikes, name)

        return Report(
            userkey=userkey,
            profile=profile,
            summary=summary,
            timeline=agg.timeline,
            spike_insights=insights,
            last_updated=_now_iso(),
        )

    def build_report(self, userkey: str, force_refresh: bool = False) -> Report:
        """Fetch a subject's reviews and build their report, serving from cache when possible."""
        if self.cache is not None and not force_refresh:
            cached = self.cache.get(userkey)
            if cached is not None:
                logger.info(f"Returning cached report for {userkey}")
                return cached

        logger.info(f"Generating fresh report for {userkey}")
        profile = self.ethos.resolve_profile(userkey)
        reviews = self.ethos.fetch_all_reviews(userkey)

        report = self.report_from_reviews(userkey, reviews, current_score=profile.score, profile=profile)

        if self.cache is not None:
            self.cache.set(userkey, report)
        return report
