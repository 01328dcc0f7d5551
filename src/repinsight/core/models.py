"""Data models for RepInsight."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any

from .constants import TimelineConstants
from .errors import MalformedReviewError

_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class Sentiment(str, Enum):
    """Sentiment label attached to each review by the upstream source."""
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"


class SpikeType(str, Enum):
    """Dominant sentiment of a spike month."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    MIXED = "mixed"


@dataclass(frozen=True)
class Votes:
    """Up/down votes cast on a review."""
    upvotes: int = 0
    downvotes: int = 0

    @property
    def net(self) -> int:
        return self.upvotes - self.downvotes


@dataclass(frozen=True)
class Review:
    """Represents a single review received by a subject."""
    id: str
    score: Sentiment
    created_at: str  # ISO-8601
    comment: Optional[str] = None
    votes: Optional[Votes] = None
    author: Optional[str] = None
    subject: Optional[str] = None

    @property
    def month(self) -> str:
        """Calendar month key, "YYYY-MM"."""
        return self.created_at[:TimelineConstants.MONTH_KEY_LENGTH]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], score: Optional[str] = None) -> "Review":
        """Build a review from its wire representation, failing fast on malformed input."""
        if not isinstance(data, dict):
            raise MalformedReviewError(f"Review must be an object, got {type(data).__name__}")

        review_id = data.get("id")
        if review_id is None or str(review_id) == "":
            raise MalformedReviewError("Review is missing an id", field="id")
        review_id = str(review_id)

        raw_score = score if score is not None else data.get("score")
        try:
            sentiment = Sentiment(str(raw_score).upper())
        except ValueError:
            raise MalformedReviewError(
                f"Unknown sentiment {raw_score!r}", field="score", review_id=review_id
            ) from None

        created_at = data.get("createdAt", data.get("created_at"))
        if not isinstance(created_at, str) or not _MONTH_RE.match(created_at[:TimelineConstants.MONTH_KEY_LENGTH]):
            raise MalformedReviewError(
                f"createdAt must be an ISO-8601 timestamp, got {created_at!r}",
                field="createdAt",
                review_id=review_id,
            )

        comment = data.get("comment")
        if comment is not None and not isinstance(comment, str):
            raise MalformedReviewError("comment must be a string", field="comment", review_id=review_id)

        votes = None
        raw_votes = data.get("votes")
        if raw_votes is not None:
            if not isinstance(raw_votes, dict):
                raise MalformedReviewError("votes must be an object", field="votes", review_id=review_id)
            try:
                up = int(raw_votes.get("upvotes") or 0)
                down = int(raw_votes.get("downvotes") or 0)
            except (TypeError, ValueError):
                raise MalformedReviewError(
                    "vote counts must be integers", field="votes", review_id=review_id
                ) from None
            if up < 0 or down < 0:
                raise MalformedReviewError("vote counts cannot be negative", field="votes", review_id=review_id)
            votes = Votes(upvotes=up, downvotes=down)

        return cls(
            id=review_id,
            score=sentiment,
            created_at=created_at,
            comment=comment,
            votes=votes,
            author=data.get("author"),
            subject=data.get("subject"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "score": self.score.value,
            "createdAt": self.created_at,
        }
        if self.comment is not None:
            data["comment"] = self.comment
        if self.votes is not None:
            data["votes"] = {"upvotes": self.votes.upvotes, "downvotes": self.votes.downvotes}
        if self.author is not None:
            data["author"] = self.author
        if self.subject is not None:
            data["subject"] = self.subject
        return data


@dataclass(frozen=True)
class Keyword:
    """Salient term in a sentiment group; weight is normalized to [0, 1]."""
    term: str
    weight: float


@dataclass(frozen=True)
class Snippet:
    """Representative excerpt of a review comment."""
    id: str
    snippet: str


@dataclass(frozen=True)
class Outlier:
    """Review flagged as statistically extreme."""
    id: str
    reason: str


@dataclass(frozen=True)
class TimelineMonth:
    """Review counts and synthetic reputation score for one calendar month."""
    month: str
    pos: int
    neg: int
    neu: int
    score: int

    @property
    def review_count(self) -> int:
        return self.pos + self.neg + self.neu

    def to_dict(self) -> Dict[str, Any]:
        return {"month": self.month, "pos": self.pos, "neg": self.neg, "neu": self.neu, "score": self.score}


@dataclass(frozen=True)
class Spike:
    """Month with anomalous review volume."""
    month: str
    type: SpikeType
    magnitude: float  # times the average monthly volume
    change_percent: int  # vs previous month
    review_count: int
    avg_review_count: float
    reviews: List[Review] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "type": self.type.value,
            "magnitude": self.magnitude,
            "changePercent": self.change_percent,
            "reviewCount": self.review_count,
            "avgReviewCount": self.avg_review_count,
            "reviews": [r.to_dict() for r in self.reviews],
        }


@dataclass(frozen=True)
class SentimentCounts:
    """Review counts per sentiment."""
    positive: int
    negative: int
    neutral: int

    @property
    def total(self) -> int:
        return self.positive + self.negative + self.neutral

    def to_dict(self) -> Dict[str, int]:
        return {
            "positive": self.positive,
            "negative": self.negative,
            "neutral": self.neutral,
            "total": self.total,
        }


@dataclass(frozen=True)
class SentimentGroup:
    """Keywords and example snippets for one sentiment."""
    keywords: List[Keyword] = field(default_factory=list)
    examples: List[Snippet] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keywords": [{"term": k.term, "weight": k.weight} for k in self.keywords],
            "examples": [{"id": s.id, "snippet": s.snippet} for s in self.examples],
        }


@dataclass(frozen=True)
class AggregateResult:
    """Everything derived from one subject's reviews."""
    userkey: str
    counts: SentimentCounts
    timeline: List[TimelineMonth]
    spikes: List[Spike]
    positives: SentimentGroup
    negatives: SentimentGroup
    outliers: List[Outlier]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userkey": self.userkey,
            "counts": self.counts.to_dict(),
            "timeline": [m.to_dict() for m in self.timeline],
            "spikes": [s.to_dict() for s in self.spikes],
            "positives": self.positives.to_dict(),
            "negatives": self.negatives.to_dict(),
            "outliers": [{"id": o.id, "reason": o.reason} for o in self.outliers],
        }


@dataclass(frozen=True)
class ThemeEvidence:
    """Theme label with supporting quotes."""
    theme: str
    evidence: List[str]


@dataclass(frozen=True)
class SummaryStats:
    """Headline statistics included with every summary."""
    positive: int
    negative: int
    neutral: int
    pct_positive: float


@dataclass(frozen=True)
class SummaryResult:
    """Natural-language summary of a subject's reviews."""
    summary: str
    positive_summary: str
    negative_summary: str
    positive_notes: str
    negative_notes: str
    positive_themes: List[str]
    negative_themes: List[str]
    positives: List[ThemeEvidence]
    negatives: List[ThemeEvidence]
    stats: SummaryStats
    outliers: List[Dict[str, str]]  # {"reviewId", "why"}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "positiveSummary": self.positive_summary,
            "negativeSummary": self.negative_summary,
            "positiveNotes": self.positive_notes,
            "negativeNotes": self.negative_notes,
            "positiveThemes": list(self.positive_themes),
            "negativeThemes": list(self.negative_themes),
            "positives": [{"theme": t.theme, "evidence": list(t.evidence)} for t in self.positives],
            "negatives": [{"theme": t.theme, "evidence": list(t.evidence)} for t in self.negatives],
            "stats": {
                "positive": self.stats.positive,
                "negative": self.stats.negative,
                "neutral": self.stats.neutral,
                "pctPositive": self.stats.pct_positive,
            },
            "outliers": [dict(o) for o in self.outliers],
        }


@dataclass(frozen=True)
class SpikeInsight:
    """Explanation of why a spike happened."""
    month: str
    type: SpikeType
    magnitude: float
    review_count: int
    analysis: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "type": self.type.value,
            "magnitude": self.magnitude,
            "reviewCount": self.review_count,
            "analysis": self.analysis,
        }


@dataclass
class EthosProfile:
    """Profile of a reviewed subject on Ethos Network."""
    userkey: str
    twitter: Optional[str] = None
    primary_wallet: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    score: Optional[int] = None  # current credibility score

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userkey": self.userkey,
            "twitter": self.twitter,
            "primaryWallet": self.primary_wallet,
            "displayName": self.display_name,
            "avatarUrl": self.avatar_url,
            "score": self.score,
        }


@dataclass
class Report:
    """Full reputation report served to callers."""
    userkey: str
    summary: SummaryResult
    timeline: List[TimelineMonth]
    spike_insights: List[SpikeInsight]
    last_updated: str
    profile: Optional[EthosProfile] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"userkey": self.userkey}
        if self.profile is not None:
            data["profile"] = self.profile.to_dict()
        data.update(self.summary.to_dict())
        data["timeline"] = [m.to_dict() for m in self.timeline]
        data["spikeInsights"] = [i.to_dict() for i in self.spike_insights]
        data["lastUpdated"] = self.last_updated
        return data
