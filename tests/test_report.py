"""Tests for the report pipeline and the summary cache."""

from unittest.mock import Mock, patch

import pytest

from repinsight.core.models import EthosProfile, Sentiment
from repinsight.services.llm import FallbackLLMService
from repinsight.services.report import ReportService, display_name, review_texts
from repinsight.services.summary_cache import SummaryCache


class TestSummaryCache:
    """Test the TTL cache wrapper."""

    def test_set_get_delete(self, fake_cache):
        cache = SummaryCache(cache=fake_cache, ttl_seconds=60)

        assert cache.get("u") is None
        cache.set("u", {"summary": "x"})
        assert cache.get("u") == {"summary": "x"}
        assert fake_cache.expires["summary:u"] == 60

        cache.delete("u")
        assert cache.get("u") is None

    def test_per_entry_ttl_and_clear(self, fake_cache):
        cache = SummaryCache(cache=fake_cache, ttl_seconds=60)

        cache.set("a", 1, ttl=5)
        cache.set("b", 2)
        assert fake_cache.expires["summary:a"] == 5

        cache.clear()
        assert cache.get("a") is None
        assert cache.get("b") is None

    def test_default_ttl_from_settings(self, fake_cache):
        from repinsight.core.config import settings

        cache = SummaryCache(cache=fake_cache)
        assert cache.ttl_seconds == settings.summary_cache_ttl_hours * 3600


def test_display_name():
    assert display_name("service:x.com:123", EthosProfile(userkey="x", twitter="alice", display_name="Alice")) == "alice"
    assert display_name("service:x.com:123", EthosProfile(userkey="x", display_name="Alice")) == "Alice"
    assert display_name("service:x.com:123", EthosProfile(userkey="x")) == "123"
    assert display_name("address:0xabc") == "0xabc"
    assert display_name("") == "the user"


def test_review_texts_filters_short_comments(make_review):
    grouped = {
        Sentiment.POSITIVE: [make_review(comment="Great collaborator"), make_review(comment="ok"), make_review()],
        Sentiment.NEGATIVE: [make_review(score="NEGATIVE", comment="Rugged the community")],
        Sentiment.NEUTRAL: [],
    }

    assert review_texts(grouped) == {
        "positive": ["Great collaborator"],
        "negative": ["Rugged the community"],
        "neutral": [],
    }


class TestReportService:
    """Test report building with mocked collaborators."""

    def setup_method(self):
        self.ethos = Mock()
        self.llm = FallbackLLMService()

    def _reviews(self, make_review):
        positive = [make_review(comment="Delivered the bounty on time", created_at=f"2024-0{m}-03T00:00:00Z")
                    for m in (1, 2, 3)]
        negative = [make_review(score="NEGATIVE", comment="Ignored my messages for weeks",
                                created_at="2024-03-09T00:00:00Z")]
        return {Sentiment.POSITIVE: positive, Sentiment.NEGATIVE: negative, Sentiment.NEUTRAL: []}

    def test_build_report(self, make_review, fake_cache):
        self.ethos.resolve_profile.return_value = EthosProfile(userkey="service:x.com:1", twitter="alice", score=1500)
        self.ethos.fetch_all_reviews.return_value = self._reviews(make_review)
        service = ReportService(ethos=self.ethos, llm=self.llm, cache=SummaryCache(cache=fake_cache))

        report = service.build_report("service:x.com:1")

        assert report.timeline[-1].score == 1500
        assert report.summary.stats.positive == 3
        assert report.profile.twitter == "alice"
        data = report.to_dict()
        assert data["summary"].startswith("Based on 4 reviews")
        assert "spikeInsights" in data
        assert "lastUpdated" in data

    def test_cached_report_is_reused(self, make_review, fake_cache):
        self.ethos.resolve_profile.return_value = EthosProfile(userkey="u", score=900)
        self.ethos.fetch_all_reviews.return_value = self._reviews(make_review)
        service = ReportService(ethos=self.ethos, llm=self.llm, cache=SummaryCache(cache=fake_cache))

        first = service.build_report("u")
        second = service.build_report("u")

        assert second is first
        assert self.ethos.fetch_all_reviews.call_count == 1

    def test_force_refresh_bypasses_cache(self, make_review, fake_cache):
        self.ethos.resolve_profile.return_value = EthosProfile(userkey="u")
        self.ethos.fetch_all_reviews.return_value = self._reviews(make_review)
        service = ReportService(ethos=self.ethos, llm=self.llm, cache=SummaryCache(cache=fake_cache))

        service.build_report("u")
        service.build_report("u", force_refresh=True)

        assert self.ethos.fetch_all_reviews.call_count == 2

    def test_offline_report_does_not_build_ethos_client(self, make_review):
        with patch("repinsight.services.report.EthosService") as mock_ethos_cls:
            service = ReportService(llm=self.llm)
            service.report_from_reviews("u", self._reviews(make_review))

        mock_ethos_cls.assert_not_called()

    def test_ethos_client_created_on_first_fetch(self, empty_reviews):
        with patch("repinsight.services.report.EthosService") as mock_ethos_cls:
            mock_ethos_cls.return_value.resolve_profile.return_value = EthosProfile(userkey="u")
            mock_ethos_cls.return_value.fetch_all_reviews.return_value = empty_reviews
            service = ReportService(llm=self.llm)

            service.build_report("u")
            service.build_report("u", force_refresh=True)

        mock_ethos_cls.assert_called_once_with()

    def test_no_reviews(self, empty_reviews):
        self.ethos.resolve_profile.return_value = EthosProfile(userkey="u")
        self.ethos.fetch_all_reviews.return_value = empty_reviews
        service = ReportService(ethos=self.ethos, llm=self.llm)

        report = service.build_report("u")

        assert report.summary.summary == "No reviews found for this user."
        assert report.timeline == []
        assert report.spike_insights == []

    def test_upstream_errors_propagate(self):
        self.ethos.resolve_profile.side_effect = RuntimeError("network down")
        service = ReportService(ethos=self.ethos, llm=self.llm)

        with pytest.raises(RuntimeError):
            service.build_report("u")

    def test_report_from_reviews_explains_spikes(self, make_review):
        reviews = {Sentiment.POSITIVE: [], Sentiment.NEGATIVE: [], Sentiment.NEUTRAL: []}
        for month, n in (("2024-01", 2), ("2024-02", 2), ("2024-03", 2), ("2024-04", 12)):
            reviews[Sentiment.POSITIVE].extend(
                make_review(created_at=f"{month}-10T00:00:00Z", comment="Great launch, smooth mint")
                for _ in range(n)
            )
        llm = Mock(wraps=self.llm)
        service = ReportService(ethos=self.ethos, llm=llm)

        report = service.report_from_reviews("u", reviews, profile_name="alice")

        assert [i.month for i in report.spike_insights] == ["2024-04"]
        assert report.spike_insights[0].analysis.startswith("Spike in positive reviews (12 reviews")
        assert llm.summarize.call_args.args[2] == "alice"
        self.ethos.fetch_all_reviews.assert_not_called()
