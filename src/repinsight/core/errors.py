"""Exception hierarchy for RepInsight."""

from typing import Optional


class RepInsightError(Exception):
    """Base class for all RepInsight errors."""


class MalformedReviewError(RepInsightError, ValueError):
    """A review record cannot be aggregated (bad id, sentiment, date or votes)."""

    def __init__(self, message: str, field: Optional[str] = None, review_id: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self.review_id = review_id


class MissingSentimentError(RepInsightError, KeyError):
    """The reviews-by-sentiment mapping is missing one of the three sentiment keys."""

    def __init__(self, missing):
        self.missing = sorted(missing)
        super().__init__(f"Missing sentiment groups: {', '.join(self.missing)}")

    def __str__(self) -> str:
        return self.args[0]


class EthosAPIError(RepInsightError):
    """Ethos Network API returned an error response."""

    def __init__(self, message: str, status_code: int, endpoint: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


class LLMResponseError(RepInsightError):
    """The language model returned content that could not be parsed."""
