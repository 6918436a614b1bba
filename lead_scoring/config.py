"""
Scoring configuration for lead scoring.

All weights, categorical rank tables, numeric caps and extraction constants
are defined here. Configuration objects are passed explicitly to the
extractor and scorer; overrides produce new objects so that per-tenant or
per-experiment weights never share mutable state.

Default weights are expressed in "points" so that the contribution of each
feature can be read directly from a score breakdown:
- Demographic: profile completeness and buyer seniority (max 57)
- Behavioral: activity counts, capped to avoid runaway leads (max 103)
- Temporal: recency and bursts, with stale-lead penalties (-22.3 to +27)
- Engagement: email and sequence engagement quality (-7.2 to +45)
"""

import logging
import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

import yaml

from .features import (
    BOOLEAN,
    CATEGORICAL,
    INFO,
    NUMERIC,
    WEIGHTED_CATEGORIES,
    feature_specs,
    weighted_feature_specs,
)

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when scoring configuration is incomplete or inconsistent."""


def _freeze(mapping: Mapping) -> Mapping:
    return MappingProxyType(
        {
            key: _freeze(value) if isinstance(value, Mapping) else value
            for key, value in mapping.items()
        }
    )


def _thaw(mapping: Mapping) -> dict:
    return {
        key: _thaw(value) if isinstance(value, Mapping) else value
        for key, value in mapping.items()
    }


def _sorted_levels(levels) -> Tuple[Tuple[str, float], ...]:
    """(name, lower bound) pairs, highest bound first."""
    return tuple(
        sorted(
            ((str(name), float(bound)) for name, bound in levels),
            key=lambda level: level[1],
            reverse=True,
        )
    )


def _level_for(levels: Tuple[Tuple[str, float], ...], score: float) -> str:
    for name, bound in levels:
        if score >= bound:
            return name
    return levels[-1][0]


DEFAULT_WEIGHTS: Mapping[str, Mapping[str, float]] = _freeze({
    "demographic": {
        "has_company": 10,
        "has_title": 10,
        "has_phone": 5,
        "email_domain_type": 3,      # x rank (corporate=3)
        "title_seniority": 3,        # x rank (c_level=5)
        "company_size_estimate": 2,  # x rank (enterprise=4)
    },
    "behavioral": {
        "email_open_count": 1,
        "email_click_count": 2,
        "page_view_count": 0.5,
        "form_submit_count": 5,
        "meeting_count": 8,
        "call_count": 4,
        "total_activities": 0.25,
        "activity_velocity": 5,
        "channel_diversity": 1,
        "high_value_action_count": 2,
    },
    "temporal": {
        "days_since_created": -0.02,
        "days_since_last_activity": -0.25,  # stale leads lose up to 15
        "recency_score": 0.15,
        "activity_burst": 8,
        "day_pattern": 1,
        "time_pattern": 1,
    },
    "engagement": {
        "total_engagement_score": 0.1,
        "email_open_rate": 8,
        "email_click_rate": 10,
        "sequence_engagement": 12,
        "avg_response_time": -0.1,  # slow responders lose up to 7.2
        "current_sequence_step": 0,
        "is_in_active_sequence": 5,
    },
})

DEFAULT_RANKS: Mapping[str, Mapping[str, int]] = _freeze({
    "email_domain_type": {
        "corporate": 3,
        "government": 2,
        "edu": 1,
        "free": 0,
        "unknown": 0,
    },
    "title_seniority": {
        "c_level": 5,
        "vp": 4,
        "director": 3,
        "manager": 2,
        "individual": 1,
        "unknown": 0,
    },
    "company_size_estimate": {
        "enterprise": 4,
        "mid_market": 3,
        "startup": 2,
        "smb": 1,
        "unknown": 0,
    },
    "day_pattern": {"weekday": 2, "mixed": 1, "weekend": 0},
    "time_pattern": {"business_hours": 2, "mixed": 1, "after_hours": 0},
})

# Values are clipped to [0, cap] before weighting
DEFAULT_CAPS: Mapping[str, float] = _freeze({
    "email_open_count": 10,
    "email_click_count": 5,
    "page_view_count": 20,
    "form_submit_count": 3,
    "meeting_count": 2,
    "call_count": 3,
    "total_activities": 40,
    "activity_velocity": 1.0,
    "channel_diversity": 5,
    "high_value_action_count": 5,
    "days_since_created": 365,
    "days_since_last_activity": 60,
    "recency_score": 100,
    "total_engagement_score": 100,
    "email_open_rate": 1.0,
    "email_click_rate": 1.0,
    "sequence_engagement": 1.0,
    "avg_response_time": 72,
    "current_sequence_step": 20,
})


@dataclass(frozen=True)
class FeatureWeights:
    """
    Weight table for the weighted scorer.

    Every weighted feature in the data model must have a weight. Categorical
    features also need a rank for every category, and numeric features need
    a positive cap. Violations raise ConfigurationError at construction.

    Attributes:
        demographic/behavioral/temporal/engagement: feature name -> weight
        ranks: categorical feature name -> {category value: rank}
        caps: numeric feature name -> upper clip bound
    """

    demographic: Mapping[str, float] = field(
        default_factory=lambda: DEFAULT_WEIGHTS["demographic"]
    )
    behavioral: Mapping[str, float] = field(
        default_factory=lambda: DEFAULT_WEIGHTS["behavioral"]
    )
    temporal: Mapping[str, float] = field(
        default_factory=lambda: DEFAULT_WEIGHTS["temporal"]
    )
    engagement: Mapping[str, float] = field(
        default_factory=lambda: DEFAULT_WEIGHTS["engagement"]
    )
    ranks: Mapping[str, Mapping[str, int]] = field(
        default_factory=lambda: DEFAULT_RANKS
    )
    caps: Mapping[str, float] = field(default_factory=lambda: DEFAULT_CAPS)

    def __post_init__(self):
        for name in (*WEIGHTED_CATEGORIES, "ranks", "caps"):
            object.__setattr__(self, name, _freeze(getattr(self, name)))
        self.validate()

    def validate(self) -> None:
        """Check the table covers the data model exactly."""
        for category in WEIGHTED_CATEGORIES:
            table = getattr(self, category)
            specs = [s for s in feature_specs(category) if s.kind != INFO]
            expected = {s.name for s in specs}

            missing = expected - set(table)
            if missing:
                raise ConfigurationError(
                    f"Missing {category} weights for features: {sorted(missing)}"
                )
            unknown = set(table) - expected
            if unknown:
                raise ConfigurationError(
                    f"Unknown {category} features in weight table: {sorted(unknown)}"
                )

            for spec in specs:
                weight = table[spec.name]
                if isinstance(weight, bool) or not isinstance(weight, (int, float)):
                    raise ConfigurationError(
                        f"Weight for {spec.key} must be a number, got {weight!r}"
                    )
                if not math.isfinite(weight):
                    raise ConfigurationError(f"Weight for {spec.key} is not finite")

                if spec.kind == CATEGORICAL:
                    self._validate_ranks(spec)
                elif spec.kind == NUMERIC:
                    cap = self.caps.get(spec.name)
                    if (
                        not isinstance(cap, (int, float))
                        or not math.isfinite(cap)
                        or cap <= 0
                    ):
                        raise ConfigurationError(
                            f"Numeric feature {spec.key} needs a positive cap"
                        )

        low, high = self.raw_bounds()
        if not high > low:
            raise ConfigurationError(
                "Weight table produces an empty score range "
                f"(min raw {low}, max raw {high})"
            )

    def _validate_ranks(self, spec) -> None:
        ranks = self.ranks.get(spec.name)
        if ranks is None:
            raise ConfigurationError(
                f"Categorical feature {spec.key} needs a rank table"
            )
        categories = {member.value for member in spec.enum}
        missing = categories - set(ranks)
        if missing:
            raise ConfigurationError(
                f"Rank table for {spec.key} is missing categories: {sorted(missing)}"
            )
        unknown = set(ranks) - categories
        if unknown:
            raise ConfigurationError(
                f"Rank table for {spec.key} has unknown categories: {sorted(unknown)}"
            )
        for category, rank in ranks.items():
            if isinstance(rank, bool) or not isinstance(rank, (int, float)):
                raise ConfigurationError(
                    f"Rank for {spec.key}={category} must be a number, got {rank!r}"
                )

    def weight(self, category: str, name: str) -> float:
        return float(getattr(self, category)[name])

    def value_range(self, spec) -> Tuple[float, float]:
        """Lowest and highest value a feature can take before weighting."""
        if spec.kind == BOOLEAN:
            return 0.0, 1.0
        if spec.kind == CATEGORICAL:
            ranks = self.ranks[spec.name].values()
            return float(min(ranks)), float(max(ranks))
        return 0.0, float(self.caps[spec.name])

    def raw_bounds(self) -> Tuple[float, float]:
        """
        Minimum and maximum attainable raw score.

        Derived from the table on every call, so overrides and custom tables
        always rescale correctly.
        """
        low = high = 0.0
        for spec in weighted_feature_specs():
            weight = self.weight(spec.category, spec.name)
            lo, hi = self.value_range(spec)
            a, b = weight * lo, weight * hi
            low += min(a, b)
            high += max(a, b)
        return low, high

    def with_overrides(
        self,
        weights: Optional[Mapping[str, float]] = None,
        ranks: Optional[Mapping[str, Mapping[str, int]]] = None,
        caps: Optional[Mapping[str, float]] = None,
    ) -> "FeatureWeights":
        """
        Return a new validated table with selected entries replaced.

        Args:
            weights: "category.feature" -> weight
            ranks: categorical feature -> partial rank table
            caps: numeric feature -> cap

        Example:
            >>> tenant_weights = FeatureWeights().with_overrides(
            ...     weights={"temporal.activity_burst": 12}
            ... )
        """
        tables = {c: dict(getattr(self, c)) for c in WEIGHTED_CATEGORIES}
        for key, value in (weights or {}).items():
            category, _, name = key.partition(".")
            if category not in tables or not name:
                raise ConfigurationError(
                    f"Weight override {key!r} must be 'category.feature'"
                )
            tables[category][name] = value

        new_ranks = _thaw(self.ranks)
        for name, table in (ranks or {}).items():
            new_ranks.setdefault(name, {}).update(table)

        new_caps = {**self.caps, **(caps or {})}
        return FeatureWeights(**tables, ranks=new_ranks, caps=new_caps)

    def to_dict(self) -> dict:
        return {
            **{c: dict(getattr(self, c)) for c in WEIGHTED_CATEGORIES},
            "ranks": _thaw(self.ranks),
            "caps": dict(self.caps),
        }


@dataclass(frozen=True)
class ScoringConfig:
    """
    Configuration for feature extraction and scoring.

    Extraction constants:
    - free_email_domains: domains classified as "free"
    - recency_half_life_days: half-life of the recency decay
    - no_activity_days: days_since_last_activity sentinel for leads with
      no activity at all
    - burst_window_hours / burst_min_events: activity burst definition
    - business_hours: (first hour, last hour) inclusive, lead local time

    Score levels map the 0-100 score to HOT/WARM/COLD/DEAD.
    """

    weights: FeatureWeights = field(default_factory=FeatureWeights)

    free_email_domains: frozenset = frozenset({
        "gmail.com",
        "yahoo.com",
        "hotmail.com",
        "outlook.com",
        "aol.com",
        "icloud.com",
        "mail.com",
        "protonmail.com",
        "zoho.com",
        "yandex.com",
        "gmx.com",
        "live.com",
    })
    recency_half_life_days: float = 7.0
    no_activity_days: int = 9999
    burst_window_hours: float = 24.0
    burst_min_events: int = 3
    business_hours: Tuple[int, int] = (9, 17)

    # Lower bound (inclusive) of each level, checked from highest
    score_levels: Tuple[Tuple[str, float], ...] = (
        ("HOT", 80.0),
        ("WARM", 50.0),
        ("COLD", 20.0),
        ("DEAD", 0.0),
    )

    # Call-list tiers by score, checked from highest
    priority_tiers: Tuple[Tuple[str, float], ...] = (
        ("top", 75.0),
        ("high", 50.0),
        ("medium", 25.0),
        ("low", 0.0),
    )

    # Days without activity before a lead counts as stale / very stale
    stale_after_days: int = 14
    very_stale_after_days: int = 30

    version: str = "1.0.0"

    def __post_init__(self):
        object.__setattr__(
            self,
            "free_email_domains",
            frozenset(d.lower() for d in self.free_email_domains),
        )
        object.__setattr__(self, "business_hours", tuple(self.business_hours))
        object.__setattr__(self, "score_levels", _sorted_levels(self.score_levels))
        object.__setattr__(self, "priority_tiers", _sorted_levels(self.priority_tiers))
        if self.recency_half_life_days <= 0:
            raise ConfigurationError("recency_half_life_days must be positive")
        if self.burst_min_events < 1 or self.burst_window_hours <= 0:
            raise ConfigurationError("Burst window and minimum events must be positive")
        start, end = self.business_hours
        if not 0 <= start <= end <= 23:
            raise ConfigurationError(
                f"business_hours must be hours within a day, got {self.business_hours}"
            )
        if not self.score_levels or self.score_levels[-1][1] > 0:
            raise ConfigurationError("score_levels must include a level starting at 0")
        if not self.priority_tiers or self.priority_tiers[-1][1] > 0:
            raise ConfigurationError("priority_tiers must include a tier starting at 0")
        if not 0 < self.stale_after_days <= self.very_stale_after_days:
            raise ConfigurationError(
                "stale_after_days must be positive and at most very_stale_after_days"
            )

    @property
    def level_names(self) -> list[str]:
        """Level names from lowest to highest."""
        return [name for name, _ in reversed(self.score_levels)]

    def get_score_level(self, score: float) -> str:
        """Map a 0-100 score to its level name."""
        return _level_for(self.score_levels, score)

    def get_priority_tier(self, score: float) -> str:
        """Map a 0-100 score to its call-list tier."""
        return _level_for(self.priority_tiers, score)

    def with_weights(self, weights: FeatureWeights) -> "ScoringConfig":
        return replace(self, weights=weights)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScoringConfig":
        """
        Build a config from a plain mapping (e.g. parsed YAML).

        The optional ``weights`` section is applied on top of the defaults, so
        a file only needs to list the entries it changes::

            weights:
              temporal: {activity_burst: 12}
              ranks: {title_seniority: {manager: 3}}
            recency_half_life_days: 10
        """
        data = dict(data or {})
        weight_data = data.pop("weights", None) or {}

        overrides = {
            f"{category}.{name}": value
            for category in WEIGHTED_CATEGORIES
            for name, value in (weight_data.get(category) or {}).items()
        }
        weights = FeatureWeights().with_overrides(
            weights=overrides,
            ranks=weight_data.get("ranks"),
            caps=weight_data.get("caps"),
        )

        for key in ("score_levels", "priority_tiers"):
            if key in data:
                levels = data[key]
                if isinstance(levels, Mapping):
                    levels = list(levels.items())
                data[key] = tuple(tuple(level) for level in levels)
        if "free_email_domains" in data:
            data["free_email_domains"] = frozenset(data["free_email_domains"])

        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")

        return cls(weights=weights, **data)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "ScoringConfig":
        """Load configuration from a YAML file."""
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        config = cls.from_dict(data)
        logger.info("Loaded scoring config %s from %s", config.version, path)
        return config


# Default configuration instance
DEFAULT_CONFIG = ScoringConfig()
