"""
Production readiness tests.

Tests performance, scalability, memory use, and error handling.
"""

import os
import time
from datetime import timedelta

import pandas as pd
import psutil
import pytest

from lead_scoring import LeadFeatureExtractor, LeadScorer, generate_sample_leads
from lead_scoring.extraction.temporal import detect_activity_burst
from lead_scoring.scorer import SAMPLE_AS_OF


def _large_frame(sample_frame, copies):
    frames = []
    for i in range(copies):
        frame = sample_frame.copy()
        frame["LEAD_ID"] = frame["LEAD_ID"] + f"_{i}"
        frames.append(frame)
    return pd.concat(frames, ignore_index=True)


class TestProductionPerformance:
    """Production performance and scalability tests."""

    def test_batch_scoring_performance_10k_leads(self, sample_frame):
        """Should score 10K leads in <5 seconds."""
        df = _large_frame(sample_frame, 100)
        scorer = LeadScorer()

        start = time.time()
        result = scorer.score_frame(df)
        elapsed = time.time() - start

        assert elapsed < 5.0, \
            f"Too slow: {elapsed:.2f}s for 10K leads (target: <5s)"
        assert len(result.df) == 10000

    def test_extraction_performance_1k_leads(self):
        """Should extract features for 1K leads in <10 seconds."""
        leads = generate_sample_leads(n_leads=1000, seed=5)
        extractor = LeadFeatureExtractor()

        start = time.time()
        df = extractor.extract_frame(leads, as_of=SAMPLE_AS_OF)
        elapsed = time.time() - start

        assert elapsed < 10.0, \
            f"Too slow: {elapsed:.2f}s for 1K leads (target: <10s)"
        assert len(df) == 1000

    def test_burst_scan_is_linear(self):
        """100K spread-out activities scan quickly (no pairwise comparison)."""
        timestamps = [SAMPLE_AS_OF + timedelta(hours=25 * i) for i in range(100_000)]

        start = time.time()
        assert detect_activity_burst(timestamps) is False
        elapsed = time.time() - start

        assert elapsed < 2.0, f"Burst scan took {elapsed:.2f}s"

    def test_memory_usage_reasonable(self, sample_frame):
        """Should not use >500MB for 10K leads."""
        process = psutil.Process(os.getpid())
        mem_before = process.memory_info().rss / 1024 / 1024  # MB

        df = _large_frame(sample_frame, 100)
        result = LeadScorer().score_frame(df)

        mem_after = process.memory_info().rss / 1024 / 1024  # MB
        mem_used = mem_after - mem_before

        assert len(result.df) == 10000
        assert mem_used < 500, \
            f"Excessive memory: {mem_used:.1f}MB (target: <500MB)"


class TestErrorHandling:
    """Production error handling tests."""

    def test_missing_required_column_clear_error(self):
        """Should name the missing columns."""
        bad_df = pd.DataFrame({"LEAD_ID": ["TEST"]})

        with pytest.raises(ValueError) as exc_info:
            LeadScorer().score_frame(bad_df)

        error_msg = str(exc_info.value)
        assert "Missing required columns" in error_msg
        assert "has_company" in error_msg

    def test_malformed_crm_record_still_scores(self, as_of):
        """Garbage values degrade to defaults instead of failing."""
        scorer = LeadScorer()
        result = scorer.score_lead(
            {
                "email": "@@",
                "createdAt": "yesterday-ish",
                "totalEmailsSent": "lots",
                "timezone": "Not/AZone",
            },
            activities=[{"type": None, "occurredAt": 12.5}, {}],
            sequence={"totalSteps": "four"},
            as_of=as_of,
        )

        assert 0 <= result.score <= 100

    def test_future_timestamps_do_not_go_negative(self, extractor, as_of):
        """Clock skew never produces negative ages."""
        features = extractor.extract(
            {"createdAt": (as_of + timedelta(days=2)).isoformat()},
            activities=[{"type": "page_view", "occurredAt": (as_of + timedelta(hours=5)).isoformat()}],
            as_of=as_of,
        )

        assert features.temporal.days_since_created == 0
        assert features.temporal.days_since_last_activity == 0
        assert features.temporal.recency_score == 100
