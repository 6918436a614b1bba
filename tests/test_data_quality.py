"""
Data quality and schema validation tests.

Tests feature-frame validation, output ranges, and CSV round trips.
"""

import pandas as pd
import pandera as pa
import pytest

from lead_scoring import FeatureWeights, LeadScorer, ScoringConfig
from lead_scoring.schemas import FEATURE_FRAME_SCHEMA, scoring_output_schema


class TestFeatureSchema:
    """Feature frames are validated before scoring."""

    def test_extracted_frame_matches_schema(self, sample_frame):
        """Extractor output always satisfies the scoring schema."""
        validated = FEATURE_FRAME_SCHEMA.validate(sample_frame)
        assert len(validated) == len(sample_frame)

    def test_schema_covers_every_required_column(self, scorer):
        assert set(scorer.REQUIRED_COLUMNS) <= set(FEATURE_FRAME_SCHEMA.columns)

    def test_invalid_category_rejected(self, scorer, feature_rows):
        """Categories outside the enum fail validation."""
        bad = feature_rows.copy()
        bad.loc[0, "title_seniority"] = "supreme_leader"

        with pytest.raises(pa.errors.SchemaError):
            scorer.score_frame(bad)

    def test_negative_count_rejected(self, scorer, feature_rows):
        """Counters cannot be negative."""
        bad = feature_rows.copy()
        bad["email_open_count"] = [-1, 0, 0]

        with pytest.raises(pa.errors.SchemaError):
            scorer.score_frame(bad)

    def test_duplicate_lead_ids_rejected(self, scorer, feature_rows):
        bad = feature_rows.copy()
        bad["LEAD_ID"] = ["L-1", "L-1", "L-2"]

        with pytest.raises(pa.errors.SchemaError):
            scorer.score_frame(bad)

    def test_null_handling_documented(self, feature_rows):
        """avg_response_time and current_sequence_step may be null, recency may not."""
        nullable = feature_rows.copy()
        nullable["avg_response_time"] = None
        nullable["current_sequence_step"] = None
        assert len(FEATURE_FRAME_SCHEMA.validate(nullable)) == 3

        bad = feature_rows.copy()
        bad["recency_score"] = [50.0, None, 0.0]
        with pytest.raises(pa.errors.SchemaError):
            FEATURE_FRAME_SCHEMA.validate(bad)

    def test_lead_id_optional(self, scorer, feature_rows):
        """Frames without identifiers can still be scored."""
        result = scorer.score_frame(feature_rows.drop(columns=["LEAD_ID"]))
        assert len(result.df) == 3

    def test_extra_columns_allowed(self, scorer, feature_rows):
        """Labels and informational columns pass through."""
        df = feature_rows.assign(IS_CONVERTED=[1, 0, 0], OWNER="sdr-team")
        result = scorer.score_frame(df)

        assert result.df["IS_CONVERTED"].tolist() == [1, 0, 0]
        assert (result.df["OWNER"] == "sdr-team").all()


class TestOutputQuality:
    """Scored frames have valid ranges and types."""

    def test_output_matches_schema(self, scorer, sample_frame):
        result = scorer.score_frame(sample_frame)
        schema = scoring_output_schema(scorer.config.level_names)

        assert len(schema.validate(result.df)) == len(sample_frame)

    def test_no_missing_scores(self, scorer, sample_frame):
        df = scorer.score_frame(sample_frame).df

        assert df["LEAD_SCORE"].notna().all()
        assert df[scorer.components["engagement"].contribution_columns].notna().all().all()

    def test_priority_ranks_unique(self, scorer, sample_frame):
        ranks = scorer.score_frame(sample_frame).df["PRIORITY_RANK"]
        assert sorted(ranks) == list(range(1, len(sample_frame) + 1))

    def test_levels_consistent_with_scores(self, scorer, sample_frame):
        df = scorer.score_frame(sample_frame).df
        expected = df["LEAD_SCORE"].apply(scorer.config.get_score_level)

        assert (df["SCORE_LEVEL"] == expected).all()


class TestCsvRoundTrip:
    """Feature frames survive being written to and read from CSV."""

    def test_scores_identical_after_csv(self, scorer, sample_frame, tmp_path):
        path = tmp_path / "features.csv"
        sample_frame.to_csv(path, index=False)
        reloaded = pd.read_csv(path)

        original = scorer.score_frame(sample_frame).df["LEAD_SCORE"]
        roundtrip = scorer.score_frame(reloaded).df["LEAD_SCORE"]

        assert roundtrip.tolist() == pytest.approx(original.tolist())

    def test_reloaded_frame_validates(self, sample_frame, tmp_path):
        path = tmp_path / "features.csv"
        sample_frame.to_csv(path, index=False)

        validated = FEATURE_FRAME_SCHEMA.validate(pd.read_csv(path))
        assert validated["has_company"].dtype == bool


class TestScorerConfigIsolation:
    """Scorers never share mutable weight state."""

    def test_two_scorers_independent(self, make_features):
        features = make_features(activity_burst=True)
        tuned = LeadScorer(ScoringConfig(
            weights=FeatureWeights().with_overrides({"temporal.activity_burst": 30})
        ))
        default = LeadScorer()

        assert tuned.score(features).breakdown["activity_burst"] == 30
        assert default.score(features).breakdown["activity_burst"] == 8
