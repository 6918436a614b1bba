"""
Tests for weight tables and scoring configuration.
"""

import dataclasses

import pytest
import yaml

from lead_scoring.config import (
    DEFAULT_CAPS,
    DEFAULT_RANKS,
    DEFAULT_WEIGHTS,
    ConfigurationError,
    FeatureWeights,
    ScoringConfig,
)


def _weights_without(category, name):
    table = dict(DEFAULT_WEIGHTS[category])
    del table[name]
    return {category: table}


class TestFeatureWeightsValidation:
    """Misconfigured weights fail at load time, never per scoring call."""

    def test_default_table_is_valid(self):
        """Defaults cover every weighted feature."""
        FeatureWeights()

    def test_missing_weight_raises(self):
        """A feature in the data model without a weight is rejected."""
        with pytest.raises(ConfigurationError, match="has_phone"):
            FeatureWeights(**_weights_without("demographic", "has_phone"))

    def test_unknown_feature_raises(self):
        """Weights for features that do not exist are rejected."""
        table = {**DEFAULT_WEIGHTS["behavioral"], "webinar_count": 3}
        with pytest.raises(ConfigurationError, match="webinar_count"):
            FeatureWeights(behavioral=table)

    def test_text_features_cannot_be_weighted(self):
        """Informational fields are not part of the weight table."""
        table = {**DEFAULT_WEIGHTS["demographic"], "email_domain": 1}
        with pytest.raises(ConfigurationError, match="email_domain"):
            FeatureWeights(demographic=table)

    def test_non_numeric_weight_raises(self):
        with pytest.raises(ConfigurationError, match="must be a number"):
            FeatureWeights().with_overrides({"temporal.activity_burst": "high"})

    def test_non_finite_weight_raises(self):
        with pytest.raises(ConfigurationError, match="not finite"):
            FeatureWeights().with_overrides({"temporal.activity_burst": float("inf")})

    def test_rank_table_missing_category_raises(self):
        """Every category of a categorical feature needs a rank."""
        ranks = {**DEFAULT_RANKS, "title_seniority": {"c_level": 5, "vp": 4}}
        with pytest.raises(ConfigurationError, match="missing categories"):
            FeatureWeights(ranks=ranks)

    def test_rank_table_unknown_category_raises(self):
        with pytest.raises(ConfigurationError, match="unknown categories"):
            FeatureWeights().with_overrides(ranks={"day_pattern": {"holiday": 3}})

    def test_missing_rank_table_raises(self):
        ranks = {k: v for k, v in DEFAULT_RANKS.items() if k != "time_pattern"}
        with pytest.raises(ConfigurationError, match="rank table"):
            FeatureWeights(ranks=ranks)

    @pytest.mark.parametrize("cap", [0, -5, None, "ten"])
    def test_numeric_cap_must_be_positive(self, cap):
        """Numeric features need a positive cap to bound the score range."""
        caps = {**DEFAULT_CAPS, "page_view_count": cap}
        with pytest.raises(ConfigurationError, match="page_view_count"):
            FeatureWeights(caps=caps)

    def test_all_zero_weights_raise(self):
        """A table that cannot separate leads is rejected."""
        zeroed = {
            category: {name: 0 for name in table}
            for category, table in DEFAULT_WEIGHTS.items()
        }
        with pytest.raises(ConfigurationError, match="empty score range"):
            FeatureWeights(**zeroed)

    def test_override_key_must_name_category(self):
        with pytest.raises(ConfigurationError, match="category.feature"):
            FeatureWeights().with_overrides({"activity_burst": 3})


class TestFeatureWeightsBehavior:
    """Tests for derived bounds and immutability."""

    def test_default_raw_bounds(self):
        """Bounds follow from weights, ranks and caps."""
        low, high = FeatureWeights().raw_bounds()

        assert low == pytest.approx(-29.5)
        assert high == pytest.approx(232.0)

    def test_bounds_recomputed_after_override(self):
        """Changing a weight moves the attainable range."""
        base_low, base_high = FeatureWeights().raw_bounds()
        low, high = FeatureWeights().with_overrides(
            {"behavioral.meeting_count": 10, "engagement.avg_response_time": -0.5}
        ).raw_bounds()

        # meeting cap 2: +2*2 on the max; response cap 72: -0.4*72 on the min
        assert high == pytest.approx(base_high + 4)
        assert low == pytest.approx(base_low - 28.8)

    def test_negative_rank_weight_bounds(self):
        """A negative categorical weight contributes to the minimum."""
        low, _ = FeatureWeights().with_overrides(
            {"temporal.day_pattern": -1}
        ).raw_bounds()

        assert low == pytest.approx(-29.5 - 2)

    def test_overrides_return_new_object(self):
        """Overrides never mutate the original table."""
        base = FeatureWeights()
        tuned = base.with_overrides({"temporal.activity_burst": 12})

        assert tuned.weight("temporal", "activity_burst") == 12
        assert base.weight("temporal", "activity_burst") == 8

    def test_partial_rank_override(self):
        """Rank overrides merge into the existing table."""
        tuned = FeatureWeights().with_overrides(ranks={"title_seniority": {"manager": 3}})

        assert tuned.ranks["title_seniority"]["manager"] == 3
        assert tuned.ranks["title_seniority"]["c_level"] == 5

    def test_tables_are_read_only(self):
        """Weight tables cannot be changed in place."""
        weights = FeatureWeights()

        with pytest.raises(TypeError):
            weights.demographic["has_company"] = 100
        with pytest.raises(dataclasses.FrozenInstanceError):
            weights.demographic = {}

    def test_defaults_not_shared_mutably(self):
        """Mutating the input dict after construction has no effect."""
        table = dict(DEFAULT_WEIGHTS["temporal"])
        weights = FeatureWeights(temporal=table)
        table["activity_burst"] = 99

        assert weights.weight("temporal", "activity_burst") == 8

    def test_default_tables_read_only(self):
        """Module defaults cannot be patched to change later tables."""
        with pytest.raises(TypeError):
            DEFAULT_WEIGHTS["temporal"]["activity_burst"] = 99
        with pytest.raises(TypeError):
            DEFAULT_WEIGHTS["temporal"] = {}
        with pytest.raises(TypeError):
            DEFAULT_RANKS["title_seniority"]["vp"] = 9
        with pytest.raises(TypeError):
            DEFAULT_CAPS["page_view_count"] = 1

        weights = FeatureWeights()
        assert weights.weight("temporal", "activity_burst") == 8
        assert weights.ranks["title_seniority"]["vp"] == 4
        assert weights.caps["page_view_count"] == 20

    def test_to_dict_round_trip(self):
        weights = FeatureWeights().with_overrides({"behavioral.call_count": 6})
        assert FeatureWeights(**weights.to_dict()) == weights


class TestScoringConfig:
    """Tests for ScoringConfig construction and loading."""

    @pytest.mark.parametrize(
        "score, level",
        [(100, "HOT"), (80, "HOT"), (79.9, "WARM"), (50, "WARM"),
         (20, "COLD"), (19.99, "DEAD"), (0, "DEAD")],
    )
    def test_score_levels(self, default_config, score, level):
        """HOT >= 80, WARM >= 50, COLD >= 20, DEAD below."""
        assert default_config.get_score_level(score) == level

    def test_level_names_low_to_high(self, default_config):
        assert default_config.level_names == ["DEAD", "COLD", "WARM", "HOT"]

    def test_custom_levels_sorted(self):
        config = ScoringConfig(score_levels=[("LOW", 0), ("TOP", 90), ("MID", 40)])

        assert config.level_names == ["LOW", "MID", "TOP"]
        assert config.get_score_level(95) == "TOP"
        assert config.get_score_level(45) == "MID"

    @pytest.mark.parametrize(
        "score, tier",
        [(100, "top"), (75, "top"), (74.9, "high"), (50, "high"),
         (25, "medium"), (24.9, "low"), (0, "low")],
    )
    def test_priority_tiers(self, default_config, score, tier):
        assert default_config.get_priority_tier(score) == tier

    def test_priority_tiers_from_dict(self):
        config = ScoringConfig.from_dict({"priority_tiers": {"later": 0, "now": 60}})

        assert config.priority_tiers == (("now", 60.0), ("later", 0.0))
        assert config.get_priority_tier(61) == "now"
        assert config.get_priority_tier(59) == "later"

    def test_priority_tiers_must_start_at_zero(self):
        with pytest.raises(ConfigurationError, match="priority_tiers"):
            ScoringConfig(priority_tiers=[("top", 75), ("high", 50)])

    def test_stale_thresholds_ordered(self):
        with pytest.raises(ConfigurationError, match="stale_after_days"):
            ScoringConfig(stale_after_days=30, very_stale_after_days=14)

    def test_levels_must_start_at_zero(self):
        with pytest.raises(ConfigurationError, match="starting at 0"):
            ScoringConfig(score_levels=[("HOT", 80), ("WARM", 50)])

    @pytest.mark.parametrize(
        "overrides",
        [
            {"recency_half_life_days": 0},
            {"burst_min_events": 0},
            {"burst_window_hours": -1},
            {"business_hours": (18, 9)},
            {"business_hours": (9, 24)},
        ],
    )
    def test_invalid_extraction_constants(self, overrides):
        with pytest.raises(ConfigurationError):
            ScoringConfig(**overrides)

    def test_free_domains_normalized(self):
        config = ScoringConfig(free_email_domains={"Gmail.COM"})
        assert config.free_email_domains == frozenset({"gmail.com"})

    def test_from_dict_applies_partial_weights(self):
        """A config only lists what it changes."""
        config = ScoringConfig.from_dict({
            "weights": {
                "temporal": {"activity_burst": 12},
                "ranks": {"title_seniority": {"manager": 3}},
                "caps": {"page_view_count": 30},
            },
            "recency_half_life_days": 10,
            "score_levels": {"HOT": 75, "WARM": 45, "COLD": 15, "DEAD": 0},
        })

        assert config.weights.weight("temporal", "activity_burst") == 12
        assert config.weights.weight("temporal", "recency_score") == 0.15
        assert config.weights.ranks["title_seniority"]["manager"] == 3
        assert config.weights.caps["page_view_count"] == 30
        assert config.recency_half_life_days == 10
        assert config.get_score_level(76) == "HOT"

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ConfigurationError, match="recency_half_life"):
            ScoringConfig.from_dict({"recency_half_life": 10})

    def test_from_dict_rejects_unknown_features(self):
        with pytest.raises(ConfigurationError, match="webinar_count"):
            ScoringConfig.from_dict({"weights": {"behavioral": {"webinar_count": 2}}})

    def test_from_yaml(self, tmp_path, caplog):
        """YAML files load through from_dict and log at INFO."""
        path = tmp_path / "tenant.yaml"
        path.write_text(yaml.safe_dump({
            "version": "2.1.0",
            "weights": {"engagement": {"email_click_rate": 15}},
            "burst_min_events": 4,
        }))

        with caplog.at_level("INFO", logger="lead_scoring.config"):
            config = ScoringConfig.from_yaml(path)

        assert config.version == "2.1.0"
        assert config.burst_min_events == 4
        assert config.weights.weight("engagement", "email_click_rate") == 15
        assert "2.1.0" in caplog.text

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert ScoringConfig.from_yaml(path) == ScoringConfig()

    def test_with_weights(self, default_config):
        tuned = default_config.with_weights(
            FeatureWeights().with_overrides({"behavioral.call_count": 6})
        )

        assert tuned.weights.weight("behavioral", "call_count") == 6
        assert default_config.weights.weight("behavioral", "call_count") == 4
