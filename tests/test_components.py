"""
Unit tests for individual scoring components.
"""

import pandas as pd
import pytest

from lead_scoring.components import (
    BehavioralScorer,
    DemographicScorer,
    EngagementScorer,
    TemporalScorer,
)
from lead_scoring.features import EmailDomainType


def _frame(make_features, *rows):
    return pd.DataFrame([make_features(**row).to_record() for row in rows])


class TestDemographicScorer:
    """Tests for profile and firmographic contributions."""

    def test_boolean_contributions(self, default_config, make_features):
        """Presence flags contribute their weight when true."""
        scorer = DemographicScorer(default_config.weights)
        df = _frame(make_features, {"has_company": True, "has_phone": True}, {})
        contributions = scorer.contributions(df)

        assert contributions["has_company_contribution"].tolist() == [10, 0]
        assert contributions["has_title_contribution"].tolist() == [0, 0]
        assert contributions["has_phone_contribution"].tolist() == [5, 0]

    def test_seniority_rank_times_weight(self, default_config, make_features):
        """c_level=5, vp=4, director=3, manager=2, individual=1, unknown=0; weight 3."""
        scorer = DemographicScorer(default_config.weights)
        levels = ["c_level", "vp", "director", "manager", "individual", "unknown"]
        df = _frame(make_features, *[{"title_seniority": level} for level in levels])

        contributions = scorer.contributions(df)["title_seniority_contribution"]

        assert contributions.tolist() == [15, 12, 9, 6, 3, 0]

    def test_enum_and_string_values_agree(self, default_config):
        """Enum members and their string values score the same."""
        scorer = DemographicScorer(default_config.weights)
        df = pd.DataFrame({
            "has_company": [False, False],
            "has_title": [False, False],
            "has_phone": [False, False],
            "email_domain_type": [EmailDomainType.CORPORATE, "corporate"],
            "title_seniority": ["unknown", "unknown"],
            "company_size_estimate": ["unknown", "unknown"],
        })

        assert scorer.score(df).tolist() == [9, 9]

    def test_category_subtotal(self, default_config, make_features):
        """score() sums the category's contributions."""
        scorer = DemographicScorer(default_config.weights)
        df = _frame(make_features, {
            "has_company": True,
            "has_title": True,
            "email_domain_type": "corporate",
            "title_seniority": "vp",
            "company_size_estimate": "startup",
        })

        # 10 + 10 + 3*3 + 3*4 + 2*2
        assert scorer.score(df).iloc[0] == 45

    def test_missing_column_raises_error(self, default_config):
        """Should raise ValueError naming the missing columns."""
        scorer = DemographicScorer(default_config.weights)
        df = pd.DataFrame({"has_company": [True]})

        with pytest.raises(ValueError, match="title_seniority"):
            scorer.contributions(df)


class TestBehavioralScorer:
    """Tests for activity-count contributions."""

    def test_counts_clipped_to_cap(self, default_config, make_features):
        """Runaway counts stop adding points at the cap."""
        scorer = BehavioralScorer(default_config.weights)
        df = _frame(
            make_features,
            {"email_open_count": 4},
            {"email_open_count": 10},
            {"email_open_count": 250},
        )

        contributions = scorer.contributions(df)["email_open_count_contribution"]

        assert contributions.tolist() == [4, 10, 10]

    def test_fractional_weights(self, default_config, make_features):
        """Weights may be fractional (page views are worth half a point)."""
        scorer = BehavioralScorer(default_config.weights)
        df = _frame(make_features, {"page_view_count": 7})

        assert scorer.contributions(df)["page_view_count_contribution"].iloc[0] == 3.5

    def test_contribution_columns(self, default_config):
        scorer = BehavioralScorer(default_config.weights)

        assert len(scorer.contribution_columns) == 10
        assert "meeting_count_contribution" in scorer.contribution_columns


class TestTemporalScorer:
    """Tests for recency and timing contributions."""

    def test_stale_lead_penalty_is_capped(self, default_config, make_features):
        """The no-activity sentinel costs no more than 60 days of inactivity."""
        scorer = TemporalScorer(default_config.weights)
        df = _frame(
            make_features,
            {"days_since_last_activity": 60},
            {"days_since_last_activity": 9999},
        )

        contributions = scorer.contributions(df)["days_since_last_activity_contribution"]

        assert contributions.tolist() == [-15, -15]

    def test_burst_and_patterns(self, default_config, make_features):
        scorer = TemporalScorer(default_config.weights)
        df = _frame(make_features, {
            "activity_burst": True,
            "day_pattern": "weekday",
            "time_pattern": "after_hours",
            "recency_score": 50.0,
        })
        contributions = scorer.contributions(df).iloc[0]

        assert contributions["activity_burst_contribution"] == 8
        assert contributions["day_pattern_contribution"] == 2
        assert contributions["time_pattern_contribution"] == 0
        assert contributions["recency_score_contribution"] == pytest.approx(7.5)


class TestEngagementScorer:
    """Tests for email and sequence contributions."""

    def test_null_response_time_contributes_nothing(self, default_config, make_features):
        """Leads outside a sequence are not penalized for response time."""
        scorer = EngagementScorer(default_config.weights)
        df = _frame(
            make_features,
            {"avg_response_time": None},
            {"avg_response_time": 10.0},
            {"avg_response_time": 500.0},
        )

        contributions = scorer.contributions(df)["avg_response_time_contribution"]

        assert contributions.tolist() == pytest.approx([0.0, -1.0, -7.2])

    def test_rates_and_active_sequence(self, default_config, make_features):
        scorer = EngagementScorer(default_config.weights)
        df = _frame(make_features, {
            "email_open_rate": 0.5,
            "email_click_rate": 0.25,
            "sequence_engagement": 1.0,
            "is_in_active_sequence": True,
            "current_sequence_step": 3,
        })
        contributions = scorer.contributions(df).iloc[0]

        assert contributions["email_open_rate_contribution"] == 4
        assert contributions["email_click_rate_contribution"] == 2.5
        assert contributions["sequence_engagement_contribution"] == 12
        assert contributions["is_in_active_sequence_contribution"] == 5
        assert contributions["current_sequence_step_contribution"] == 0
