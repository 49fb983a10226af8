"""
Unit tests for report generation.
"""

from __future__ import annotations

import pytest

from ppg_monitor.rate import Confidence
from ppg_monitor.report import (
    CONSULT_PROVIDER,
    MENTION_LOW_RATE,
    REST_AND_REMEASURE,
    HeartRateCategory,
    categorize,
    generate_report,
    recommendations_for,
)


class TestCategorize:

    @pytest.mark.parametrize(
        "bpm, category",
        [
            (45, HeartRateCategory.BRADYCARDIA),
            (59, HeartRateCategory.BRADYCARDIA),
            (60, HeartRateCategory.NORMAL),
            (100, HeartRateCategory.NORMAL),
            (101, HeartRateCategory.ELEVATED),
            (120, HeartRateCategory.ELEVATED),
            (121, HeartRateCategory.TACHYCARDIA),
            (None, HeartRateCategory.UNKNOWN),
        ],
    )
    def test_buckets(self, bpm, category):
        assert categorize(bpm) is category


class TestRecommendations:

    def test_normal_rate_has_none(self):
        assert recommendations_for(72) == []

    def test_very_low_rate(self):
        assert recommendations_for(45) == [CONSULT_PROVIDER, MENTION_LOW_RATE]

    def test_mildly_low_rate(self):
        assert recommendations_for(55) == [MENTION_LOW_RATE]

    def test_elevated_rate(self):
        assert recommendations_for(110) == [REST_AND_REMEASURE]

    def test_high_rate(self):
        assert recommendations_for(130) == [CONSULT_PROVIDER, REST_AND_REMEASURE]


class TestGenerateReport:

    def test_insufficient_data(self):
        report = generate_report(None, Confidence.LOW, data_points=12, duration_seconds=0.4)
        assert report.heart_rate is None
        assert report.confidence is Confidence.UNKNOWN
        assert report.category is HeartRateCategory.UNKNOWN
        assert "Not enough data" in report.message
        assert report.data_points == 12

    def test_normal_report_dict(self):
        d = generate_report(72, Confidence.HIGH, data_points=450, duration_seconds=15.0).to_dict()
        assert d["heart_rate"] == 72
        assert d["confidence"] == "high"
        assert d["category"] == "Normal"
        assert d["recommendations"] == []
        assert d["data_points"] == 450
        assert d["duration_seconds"] == 15.0
        assert "60-100 BPM" in d["message"]
