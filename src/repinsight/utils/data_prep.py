"""Loading review sets and exporting results as JSON."""

import datetime
import json
from typing import Any, Dict, List, Union

from ..core.errors import MalformedReviewError
from ..core.models import Review, Sentiment


def parse_reviews(data: Union[Dict[str, Any], List[Dict[str, Any]]]) -> Dict[Sentiment, List[Review]]:
    """
    Parse reviews grouped by sentiment.

    Accepts either ``{"POSITIVE": [...], "NEGATIVE": [...], "NEUTRAL": [...]}``
    (a missing group is treated as empty) or a flat list of reviews carrying
    their own ``score``.
    """
    grouped: Dict[Sentiment, List[Review]] = {s: [] for s in Sentiment}

    if isinstance(data, dict):
        for key, items in data.items():
            try:
                sentiment = Sentiment(str(key).upper())
            except ValueError:
                raise MalformedReviewError(f"Unknown sentiment group {key!r}", field="score") from None
            if not isinstance(items, list):
                raise MalformedReviewError(f"Group {key!r} must be a list of reviews", field="score")
            grouped[sentiment].extend(Review.from_dict(item, score=sentiment.value) for item in items)
    elif isinstance(data, list):
        for item in data:
            review = Review.from_dict(item)
            grouped[review.score].append(review)
    else:
        raise MalformedReviewError(f"Expected an object or a list of reviews, got {type(data).__name__}")

    return grouped


def load_reviews(filename: str) -> Dict[Sentiment, List[Review]]:
    """Load and validate a review set from a JSON file."""
    with open(filename, "r", encoding="utf-8") as f:
        return parse_reviews(json.load(f))


def export_to_json(data: Dict[str, Any], filename: str) -> None:
    """Export data to JSON file."""
    data.setdefault("metadata", {})
    data["metadata"]["export_timestamp"] = datetime.datetime.now().isoformat()

    with open(filename, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
