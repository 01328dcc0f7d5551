"""Tests for spike detection and classification."""

import pytest

from repinsight.core.models import SpikeType, TimelineMonth
from repinsight.core.spikes import change_percent, classify_spike, detect_spikes


def _month(i, pos=0, neg=0, neu=0):
    return TimelineMonth(month=f"{2023 + i // 12}-{i % 12 + 1:02d}", pos=pos, neg=neg, neu=neu, score=1000)


@pytest.mark.parametrize("pos,neg,count,expected", [
    (6, 1, 10, SpikeType.POSITIVE),   # clear positive majority
    (6, 3, 10, SpikeType.POSITIVE),   # too negative for rule 1, but dominant
    (3, 4, 10, SpikeType.NEGATIVE),   # substantial negative share
    (6, 4, 10, SpikeType.NEGATIVE),   # negative share checked before dominance
    (5, 3, 10, SpikeType.POSITIVE),   # 0.5 > 0.3 * 1.5
    (1, 3, 10, SpikeType.NEGATIVE),   # 0.3 > 0.1 * 1.5
    (3, 3, 10, SpikeType.MIXED),
    (2, 3, 10, SpikeType.MIXED),      # 0.3 is not > 0.2 * 1.5
    (0, 0, 10, SpikeType.MIXED),      # all neutral
])
def test_classify_spike(pos, neg, count, expected):
    assert classify_spike(pos, neg, count) == expected


def test_change_percent():
    assert change_percent(10, None) == 0.0
    assert change_percent(10, _month(0)) == 0.0
    assert change_percent(10, _month(0, pos=4)) == 150.0


class TestDetectSpikes:
    """Test spike detection over a timeline."""

    def test_magnitude_spike_positive(self):
        """A 20-review month against a 5/month average is a 4x positive spike."""
        timeline = [_month(0), _month(1), _month(2), _month(3, pos=18, neg=2)]

        spikes = detect_spikes(timeline)

        assert len(spikes) == 1
        spike = spikes[0]
        assert spike.month == "2023-04"
        assert spike.magnitude == 4.0
        assert spike.type == SpikeType.POSITIVE
        assert spike.review_count == 20
        assert spike.avg_review_count == 5.0
        assert spike.change_percent == 0

    def test_change_percent_spike_below_magnitude_threshold(self):
        timeline = [_month(0, pos=4), _month(1, pos=4), _month(2, pos=4), _month(3, pos=4), _month(4, pos=10)]

        spikes = detect_spikes(timeline)

        assert len(spikes) == 1
        assert spikes[0].magnitude == 1.92
        assert spikes[0].change_percent == 150
        assert spikes[0].avg_review_count == 5.2

    def test_fewer_than_three_months(self):
        timeline = [_month(0, pos=1), _month(1, neg=100)]
        assert detect_spikes(timeline) == []

    def test_low_average_volume(self):
        timeline = [_month(0, pos=1), _month(1, pos=1), _month(2, pos=3)]
        assert detect_spikes(timeline) == []

    def test_steady_volume_has_no_spikes(self):
        timeline = [_month(i, pos=3, neg=2) for i in range(6)]
        assert detect_spikes(timeline) == []

    def test_capped_and_sorted_by_magnitude(self):
        counts = [1, 20, 1, 21, 1, 22, 1, 23, 1, 24, 1, 25, 1, 26]
        timeline = [_month(i, neg=c) for i, c in enumerate(counts)]

        spikes = detect_spikes(timeline)

        assert len(spikes) == 5
        assert [s.review_count for s in spikes] == [26, 25, 24, 23, 22]
        magnitudes = [s.magnitude for s in spikes]
        assert magnitudes == sorted(magnitudes, reverse=True)
        assert all(s.type == SpikeType.NEGATIVE for s in spikes)

    def test_spike_carries_month_reviews(self, make_review):
        reviews = [make_review(created_at="2023-04-02T00:00:00Z") for _ in range(20)]
        timeline = [_month(0), _month(1), _month(2), _month(3, pos=20)]

        spikes = detect_spikes(timeline, {"2023-04": reviews})

        assert spikes[0].reviews == reviews

    def test_missing_month_reviews_default_to_empty(self):
        timeline = [_month(0), _month(1), _month(2), _month(3, pos=20)]
        assert detect_spikes(timeline)[0].reviews == []
