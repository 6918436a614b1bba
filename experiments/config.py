"""
Experiment configuration for lead scoring weight tuning.

Defines the ExperimentConfig dataclass for YAML-driven experimentation.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Literal, Optional

import yaml

from lead_scoring.config import ScoringConfig


@dataclass
class ExperimentConfig:
    """
    Configuration for a single experiment.

    Load from YAML:
        config = ExperimentConfig.from_yaml("configs/engagement_heavy.yaml")

    Create programmatically:
        config = ExperimentConfig(
            name="burst_heavy",
            description="Reward activity bursts more",
            weights={"temporal.activity_burst": 15}
        )
    """

    # Metadata
    name: str
    description: str = ""

    # Weight overrides applied on top of the default table
    # Keys are "category.feature", e.g. "engagement.email_click_rate"
    weights: dict[str, float] = field(default_factory=dict)

    # Partial rank tables, e.g. {"title_seniority": {"manager": 3}}
    ranks: dict[str, dict[str, float]] = field(default_factory=dict)

    # Numeric caps, e.g. {"page_view_count": 30}
    caps: dict[str, float] = field(default_factory=dict)

    # Threshold optimization (thresholds are LEAD_SCORE values, 0-100)
    optimize_metric: Literal["f1", "f2", "accuracy", "precision", "recall"] = "f1"
    min_recall: Optional[float] = None
    min_precision: Optional[float] = None
    threshold_step: int = 5

    # Pass/fail criteria
    min_accuracy: float = 0.50
    min_f1: Optional[float] = None
    min_auc: Optional[float] = None
    # Highest populated level must convert this much better than the lowest
    min_level_lift: Optional[float] = None

    # Data paths (relative to experiments/)
    train_path: str = "data/train.csv"
    val_path: str = "data/validation.csv"
    test_path: str = "data/test.csv"

    @classmethod
    def from_yaml(cls, path: Path | str) -> "ExperimentConfig":
        """Load configuration from YAML file."""
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls(**data)

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(asdict(self), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    def scoring_config(self) -> ScoringConfig:
        """
        Build the scoring configuration this experiment evaluates.

        Raises:
            ConfigurationError: If an override names an unknown feature or
                leaves the weight table inconsistent
        """
        base = ScoringConfig()
        weights = base.weights.with_overrides(
            weights=self.weights, ranks=self.ranks, caps=self.caps
        )
        return base.with_weights(weights)

    def get_weight(self, key: str) -> float:
        """Effective weight for "category.feature" (override or default)."""
        if key in self.weights:
            return self.weights[key]
        category, _, name = key.partition(".")
        return ScoringConfig().weights.weight(category, name)

    def weight_changes(self) -> dict[str, dict[str, float]]:
        """Overridden weights with their default and tuned values."""
        defaults = ScoringConfig().weights
        changes = {}
        for key, tuned in self.weights.items():
            category, _, name = key.partition(".")
            changes[key] = {"default": defaults.weight(category, name), "tuned": float(tuned)}
        return changes
