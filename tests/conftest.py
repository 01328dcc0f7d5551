"""Shared fixtures for RepInsight tests."""

import pytest

from repinsight.core.models import Review, Sentiment, Votes


class FakeCache:
    """In-memory stand-in for diskcache.Cache."""

    def __init__(self):
        self.store = {}
        self.expires = {}

    def get(self, key, default=None):
        return self.store.get(key, default)

    def set(self, key, value, expire=None):
        self.store[key] = value
        self.expires[key] = expire
        return True

    def delete(self, key):
        self.expires.pop(key, None)
        return self.store.pop(key, None) is not None

    def clear(self):
        count = len(self.store)
        self.store.clear()
        self.expires.clear()
        return count


@pytest.fixture
def fake_cache():
    return FakeCache()


@pytest.fixture
def make_review():
    """Factory for reviews with sensible defaults."""
    counter = {"n": 0}

    def _make(score="POSITIVE", created_at="2024-01-15T12:00:00Z", comment=None, votes=None, review_id=None):
        counter["n"] += 1
        if isinstance(votes, tuple):
            votes = Votes(upvotes=votes[0], downvotes=votes[1])
        return Review(
            id=review_id or f"r{counter['n']}",
            score=Sentiment(score),
            created_at=created_at,
            comment=comment,
            votes=votes,
        )

    return _make


@pytest.fixture
def empty_reviews():
    return {Sentiment.POSITIVE: [], Sentiment.NEGATIVE: [], Sentiment.NEUTRAL: []}
