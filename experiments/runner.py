"""
Experiment runner for lead scoring weight tuning.

One run scores the train/validation/test splits with the experiment's
weight table, picks a LEAD_SCORE threshold on validation, and measures the
test split:

- classification metrics at the threshold
- the raw score range the weight table can produce
- conversion rate per score level and the lift from lowest to highest
- mean contribution per feature category
- how many test leads land in each priority tier

Every run is logged; only passing runs get artifacts.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from .artifacts import ArtifactManager
from .config import ExperimentConfig
from .evaluator import Evaluator
from .logger import ExperimentLogger

log = logging.getLogger(__name__)

SPLITS = {"train": "train_path", "val": "val_path", "test": "test_path"}

# (metric, ExperimentConfig attribute holding its floor)
METRIC_FLOORS = [
    ("accuracy", "min_accuracy"),
    ("f1", "min_f1"),
    ("auc_roc", "min_auc"),
]


@dataclass
class ExperimentResult:
    """
    Measurements for one weight table on the labeled splits.

    Attributes:
        metrics: "<split>_<metric>" -> value at the chosen threshold
        raw_bounds: (min, max) raw score of the weight table
        weight_changes: overridden "category.feature" -> default/tuned
        level_conversion: level -> {"leads", "conversion_rate"} on test,
            lowest level first
        level_lift: highest minus lowest level conversion rate on test
        category_means: feature category -> mean contribution on test
        priority_tiers: tier -> number of test leads
        failed_checks: acceptance checks the run did not meet
    """

    experiment_id: str
    config: ExperimentConfig
    threshold: float
    metrics: dict
    raw_bounds: tuple[float, float]
    timestamp: datetime
    weight_changes: dict = field(default_factory=dict)
    level_conversion: dict = field(default_factory=dict)
    level_lift: Optional[float] = None
    category_means: dict = field(default_factory=dict)
    priority_tiers: dict = field(default_factory=dict)
    failed_checks: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def passed(self) -> bool:
        return not self.failed_checks

    @property
    def status(self) -> str:
        return "PASS" if self.passed else "FAIL"

    def summary(self) -> str:
        """Human-readable summary."""
        low, high = self.raw_bounds
        lines = [
            f"[{self.experiment_id}] {self.config.name} - {self.status}",
            f"  Accuracy:  {self.metrics.get('test_accuracy', 0):.1%}",
            f"  Precision: {self.metrics.get('test_precision', 0):.1%}",
            f"  Recall:    {self.metrics.get('test_recall', 0):.1%}",
            f"  F1:        {self.metrics.get('test_f1', 0):.3f}",
            f"  AUC:       {self.metrics.get('test_auc_roc', 0):.3f}",
            f"  Threshold: {self.threshold:.0f}",
            f"  Raw range: {low:.1f} to {high:.1f}",
        ]
        if self.level_conversion:
            lines.append("  Conversion by level: " + ", ".join(
                f"{level} {row['conversion_rate']:.0%} ({row['leads']})"
                for level, row in self.level_conversion.items()
            ))
        if self.level_lift is not None:
            lines.append(f"  Level lift: {self.level_lift:+.3f}")
        for check in self.failed_checks:
            lines.append(f"  Failed: {check}")
        return "\n".join(lines)


def acceptance_failures(result: ExperimentResult) -> list[str]:
    """
    Checks a run must meet to pass, as readable failure messages.

    Metric floors apply to the test split. The level lift check asks that
    the best score level actually converts better than the worst one.
    """
    config = result.config
    failures = []

    for metric, attr in METRIC_FLOORS:
        floor = getattr(config, attr)
        value = result.metrics[f"test_{metric}"]
        if floor is not None and value < floor:
            failures.append(f"test {metric} {value:.3f} below {floor:.3f}")

    if config.min_level_lift is not None:
        if result.level_lift is None:
            failures.append("level lift undefined: fewer than two populated score levels")
        elif result.level_lift < config.min_level_lift:
            failures.append(
                f"level lift {result.level_lift:+.3f} below {config.min_level_lift:+.3f}"
            )

    return failures


class ExperimentRunner:
    """
    Single entry point for running experiments.

    Usage:
        runner = ExperimentRunner()
        result = runner.run_from_yaml("configs/engagement_heavy.yaml")

        config = ExperimentConfig(name="custom", weights={...})
        result = runner.run(config)

        results = runner.run_batch(["configs/baseline.yaml", "configs/engagement_heavy.yaml"])
    """

    def __init__(
        self,
        base_path: Optional[Path] = None,
        logs_dir: str = "logs",
        artifacts_dir: str = "artifacts",
    ):
        """
        Args:
            base_path: Root for data, logs and artifacts (default: this package)
            logs_dir: Subdirectory for JSON logs
            artifacts_dir: Subdirectory for artifacts of passing runs
        """
        self.base_path = Path(base_path or Path(__file__).parent)
        self.logs_dir = self.base_path / logs_dir
        self.artifacts_dir = self.base_path / artifacts_dir

        self.logger = ExperimentLogger(self.logs_dir)
        self.artifact_manager = ArtifactManager(self.artifacts_dir)
        self.evaluator = Evaluator()

    def generate_experiment_id(self) -> str:
        """exp_YYYYMMDD_HHMMSS_xxxx, sortable by start time."""
        return f"exp_{datetime.now():%Y%m%d_%H%M%S}_{uuid.uuid4().hex[:4]}"

    def _load_splits(self, config: ExperimentConfig) -> dict[str, pd.DataFrame]:
        return {
            split: pd.read_csv(self.base_path / getattr(config, attr))
            for split, attr in SPLITS.items()
        }

    def _measure(
        self, experiment_id: str, config: ExperimentConfig, started: datetime
    ) -> tuple[ExperimentResult, pd.DataFrame, pd.DataFrame]:
        """Score every split and collect the test measurements."""
        scoring_config = config.scoring_config()
        batches = {
            split: self.evaluator.score_batch(df, scoring_config)
            for split, df in self._load_splits(config).items()
        }

        # Threshold is chosen on validation only
        threshold, sweep = self.evaluator.find_optimal_threshold(batches["val"].df, config)

        metrics = {}
        for split, batch in batches.items():
            for name, value in self.evaluator.calculate_metrics(batch.df, threshold).items():
                metrics[f"{split}_{name}"] = value

        test = batches["test"]
        rates = self.evaluator.level_conversion_rates(test.df, test.level_order)
        tiers = test.df["PRIORITY_TIER"].value_counts()

        result = ExperimentResult(
            experiment_id=experiment_id,
            config=config,
            threshold=threshold,
            metrics=metrics,
            raw_bounds=scoring_config.weights.raw_bounds(),
            timestamp=started,
            weight_changes=config.weight_changes(),
            level_conversion={
                level: {
                    "leads": int(row["leads"]),
                    "conversion_rate": float(row["conversion_rate"]),
                }
                for level, row in rates.iterrows()
            },
            level_lift=self.evaluator.level_lift(rates),
            category_means={
                category: float(mean)
                for category, mean in test.category_breakdown()["mean"].items()
            },
            priority_tiers={
                name: int(tiers.get(name, 0)) for name, _ in scoring_config.priority_tiers
            },
        )
        result.failed_checks = acceptance_failures(result)
        return result, sweep, test.df

    def run(self, config: ExperimentConfig) -> ExperimentResult:
        """
        Run a single experiment.

        Raises:
            ConfigurationError: If the experiment's weight overrides are invalid.
                The error is logged before it propagates.
        """
        experiment_id = self.generate_experiment_id()
        started = datetime.now()
        log.info("Running experiment %s (%s)", experiment_id, config.name)

        try:
            result, sweep, test_scored = self._measure(experiment_id, config, started)
        except Exception as e:
            self.logger.record_error(experiment_id, config, e)
            log.error("Experiment %s errored: %s", experiment_id, e)
            raise

        result.duration_seconds = (datetime.now() - started).total_seconds()
        self.logger.record(result)

        if result.passed:
            exp_dir = self.artifact_manager.save_artifacts(result, sweep, test_scored)
            log.info("Saved artifacts to %s", exp_dir)
        else:
            for check in result.failed_checks:
                log.info("Experiment %s failed check: %s", experiment_id, check)

        log.info(
            "Experiment %s finished: %s (test AUC %.3f, level lift %s)",
            experiment_id,
            result.status,
            result.metrics["test_auc_roc"],
            "n/a" if result.level_lift is None else f"{result.level_lift:+.3f}",
        )
        return result

    def run_from_yaml(self, config_path: str | Path) -> ExperimentResult:
        """Load a YAML config (absolute or relative to base_path) and run it."""
        path = Path(config_path)
        if not path.is_absolute():
            path = self.base_path / path
        return self.run(ExperimentConfig.from_yaml(path))

    def run_batch(
        self,
        config_paths: list[str | Path],
        stop_on_failure: bool = False,
    ) -> list[ExperimentResult]:
        """
        Run several YAML configs in order.

        Args:
            config_paths: Paths to YAML configs
            stop_on_failure: Re-raise the first error instead of moving on

        Returns:
            Results of the runs that completed (errored runs are only logged)
        """
        results = []
        errors = 0
        for path in config_paths:
            try:
                results.append(self.run_from_yaml(path))
            except Exception as e:
                errors += 1
                log.error("Batch run failed for %s: %s", path, e)
                if stop_on_failure:
                    raise

        passed = sum(result.passed for result in results)
        log.info(
            "Batch finished: %d passed, %d failed, %d errored",
            passed,
            len(results) - passed,
            errors,
        )
        return results

    def list_experiments(self) -> pd.DataFrame:
        """History of logged runs, newest first."""
        return self.logger.summary_frame()
