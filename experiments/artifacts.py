"""
Artifacts for passing lead scoring experiments.

Each passing run gets a directory named after its experiment ID:

    config.yaml               experiment config, reloadable
    weights.csv               every weighted feature, default vs. tuned
    metrics.csv               test metrics at the chosen threshold
    level_conversion.csv      leads and conversion rate per score level
    threshold_sweep.csv       validation metrics per threshold
    predictions.csv           test leads in call order
    confusion_matrix.png
    threshold_sweep.png
    score_distribution.png
    level_conversion.png
"""

from pathlib import Path
from typing import TYPE_CHECKING, Optional

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from sklearn.metrics import confusion_matrix

from lead_scoring.config import ScoringConfig
from lead_scoring.features import weighted_feature_specs

from .config import ExperimentConfig
from .dataset import LABEL_COLUMN

if TYPE_CHECKING:
    from .runner import ExperimentResult

PREDICTION_COLUMNS = [
    "LEAD_ID", "LEAD_SCORE", "RAW_SCORE", "SCORE_LEVEL",
    "PRIORITY_RANK", "PRIORITY_TIER", LABEL_COLUMN,
]

TABLES = ["weights", "metrics", "level_conversion", "threshold_sweep", "predictions"]


def weight_table(config: ExperimentConfig) -> pd.DataFrame:
    """Default and tuned weight of every weighted feature."""
    default = ScoringConfig().weights
    tuned = config.scoring_config().weights
    rows = []
    for spec in weighted_feature_specs():
        rows.append({
            "category": spec.category,
            "feature": spec.name,
            "kind": spec.kind,
            "default": default.weight(spec.category, spec.name),
            "tuned": tuned.weight(spec.category, spec.name),
        })
    table = pd.DataFrame(rows)
    table["changed"] = table["default"] != table["tuned"]
    return table


class ArtifactManager:
    """Writes and reloads the artifacts of passing runs."""

    def __init__(self, artifacts_dir: Path):
        self.artifacts_dir = artifacts_dir
        self.artifacts_dir.mkdir(parents=True, exist_ok=True)

    def save_artifacts(
        self,
        result: "ExperimentResult",
        threshold_sweep: pd.DataFrame,
        test_predictions: pd.DataFrame,
    ) -> Path:
        """
        Save tables and plots for a passing run.

        Args:
            result: ExperimentResult from the runner
            threshold_sweep: Validation sweep from threshold selection
            test_predictions: Scored test split

        Returns:
            The run's artifact directory
        """
        exp_dir = self.artifacts_dir / result.experiment_id
        exp_dir.mkdir(exist_ok=True)
        result.config.to_yaml(exp_dir / "config.yaml")

        levels = pd.DataFrame.from_dict(result.level_conversion, orient="index")
        levels.index.name = "SCORE_LEVEL"

        tables = {
            "weights": weight_table(result.config),
            "metrics": pd.DataFrame([{
                "threshold": result.threshold,
                "raw_min": result.raw_bounds[0],
                "raw_max": result.raw_bounds[1],
                "level_lift": result.level_lift,
                **{
                    key[len("test_"):]: value
                    for key, value in result.metrics.items()
                    if key.startswith("test_")
                },
            }]),
            "level_conversion": levels.reset_index(),
            "threshold_sweep": threshold_sweep,
            "predictions": test_predictions[
                [c for c in PREDICTION_COLUMNS if c in test_predictions.columns]
            ].sort_values("PRIORITY_RANK"),
        }
        for name, table in tables.items():
            table.to_csv(exp_dir / f"{name}.csv", index=False)

        self._plot_confusion_matrix(test_predictions, result.threshold, exp_dir)
        self._plot_threshold_sweep(threshold_sweep, result.threshold, exp_dir)
        self._plot_score_distribution(test_predictions, result.threshold, exp_dir)
        self._plot_level_conversion(tables["level_conversion"], exp_dir)

        return exp_dir

    def _save(self, fig, path: Path) -> None:
        fig.tight_layout()
        fig.savefig(path, dpi=150)
        plt.close(fig)

    def _plot_confusion_matrix(
        self, df: pd.DataFrame, threshold: float, output_dir: Path
    ) -> None:
        y_pred = (df["LEAD_SCORE"] >= threshold).astype(int)
        cm = confusion_matrix(df[LABEL_COLUMN], y_pred, labels=[0, 1])

        fig, ax = plt.subplots(figsize=(8, 6))
        sns.heatmap(
            cm,
            annot=True,
            fmt="d",
            cmap="Blues",
            ax=ax,
            xticklabels=["Below threshold", "Sales-ready"],
            yticklabels=["Did not convert", "Converted"],
        )
        ax.set_title(f"Test leads at LEAD_SCORE >= {threshold:.0f}")
        self._save(fig, output_dir / "confusion_matrix.png")

    def _plot_threshold_sweep(
        self, sweep: pd.DataFrame, threshold: float, output_dir: Path
    ) -> None:
        long = sweep.melt(
            id_vars="threshold",
            value_vars=["accuracy", "precision", "recall", "f1"],
            var_name="metric",
        )
        fig, ax = plt.subplots(figsize=(10, 6))
        sns.lineplot(data=long, x="threshold", y="value", hue="metric", linewidth=2, ax=ax)
        ax.axvline(threshold, color="red", linestyle="--", alpha=0.7,
                   label=f"Chosen ({threshold:.0f})")
        ax.set_xlabel("Lead score threshold")
        ax.set_ylabel("Validation metric")
        ax.set_ylim(0, 1)
        ax.legend()
        ax.grid(True, alpha=0.3)
        self._save(fig, output_dir / "threshold_sweep.png")

    def _plot_score_distribution(
        self, df: pd.DataFrame, threshold: float, output_dir: Path
    ) -> None:
        fig, ax = plt.subplots(figsize=(10, 6))
        sns.histplot(
            data=df,
            x="LEAD_SCORE",
            hue=LABEL_COLUMN,
            bins=20,
            binrange=(0, 100),
            multiple="stack",
            ax=ax,
        )
        ax.axvline(x=threshold, color="red", linestyle="--", alpha=0.7)
        ax.set_xlabel("Lead score")
        ax.set_title("Test score distribution by outcome")
        self._save(fig, output_dir / "score_distribution.png")

    def _plot_level_conversion(self, levels: pd.DataFrame, output_dir: Path) -> None:
        """Conversion rate per level, lowest level on the left."""
        fig, ax = plt.subplots(figsize=(8, 5))
        sns.barplot(data=levels, x="SCORE_LEVEL", y="conversion_rate", color="steelblue", ax=ax)
        for i, leads in enumerate(levels["leads"]):
            ax.annotate(f"n={leads}", (i, 0), ha="center", va="bottom")
        ax.set_ylim(0, 1)
        ax.set_xlabel("Score level")
        ax.set_ylabel("Conversion rate")
        ax.set_title("Test conversion by score level")
        self._save(fig, output_dir / "level_conversion.png")

    def load_experiment(self, experiment_id: str) -> Optional[dict]:
        """
        Reload a run's config and tables.

        Returns:
            {"config": ExperimentConfig, <table name>: DataFrame, ...}, or
            None if the run has no artifacts
        """
        exp_dir = self.artifacts_dir / experiment_id
        if not exp_dir.exists():
            return None

        loaded = {"config": ExperimentConfig.from_yaml(exp_dir / "config.yaml")}
        for name in TABLES:
            loaded[name] = pd.read_csv(exp_dir / f"{name}.csv")
        return loaded
