"""
JSON run log for lead scoring experiments.

One file per run, named after the experiment ID. A completed run records
what the weight table is (overrides and the raw range they produce) next
to what it did on the test split (metrics, conversion per level, category
contributions, priority tier counts) and which acceptance checks failed.
Errored runs record the exception instead.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from .config import ExperimentConfig
    from .runner import ExperimentResult

SUMMARY_METRICS = ["accuracy", "precision", "recall", "f1", "auc_roc"]


def _config_entry(config: "ExperimentConfig") -> dict:
    return {
        "name": config.name,
        "description": config.description,
        "weights": config.weights,
        "ranks": config.ranks,
        "caps": config.caps,
        "optimize_metric": config.optimize_metric,
        "min_recall": config.min_recall,
        "min_precision": config.min_precision,
        "min_accuracy": config.min_accuracy,
        "min_f1": config.min_f1,
        "min_auc": config.min_auc,
        "min_level_lift": config.min_level_lift,
    }


class ExperimentLogger:
    """Reads and writes the per-run JSON log."""

    def __init__(self, logs_dir: Path):
        self.logs_dir = logs_dir
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, experiment_id: str) -> Path:
        return self.logs_dir / f"{experiment_id}.json"

    def _dump(self, entry: dict) -> Path:
        path = self.path_for(entry["experiment_id"])
        with open(path, "w") as f:
            json.dump(entry, f, indent=2, default=str)
        return path

    def record(self, result: "ExperimentResult") -> Path:
        """Write the log entry of a completed (passing or failing) run."""
        low, high = result.raw_bounds
        return self._dump({
            "experiment_id": result.experiment_id,
            "timestamp": result.timestamp.isoformat(),
            "duration_seconds": result.duration_seconds,
            "status": result.status,
            "passed": result.passed,
            "failed_checks": result.failed_checks,
            "config": _config_entry(result.config),
            "weight_table": {
                "raw_bounds": [low, high],
                "changes": result.weight_changes,
            },
            "results": {
                "threshold": result.threshold,
                "metrics": result.metrics,
                "level_conversion": result.level_conversion,
                "level_lift": result.level_lift,
                "category_means": result.category_means,
                "priority_tiers": result.priority_tiers,
            },
        })

    def record_error(
        self, experiment_id: str, config: "ExperimentConfig", error: BaseException
    ) -> Path:
        """Write the log entry of a run that raised (bad weights, missing data, ...)."""
        return self._dump({
            "experiment_id": experiment_id,
            "timestamp": datetime.now().isoformat(),
            "status": "ERROR",
            "passed": False,
            "config": _config_entry(config),
            "error_type": type(error).__name__,
            "error": str(error),
        })

    def get_all_logs(self) -> list[dict]:
        """All log entries, oldest first."""
        logs = []
        for path in sorted(self.logs_dir.glob("exp_*.json")):
            with open(path) as f:
                logs.append(json.load(f))
        return logs

    def summary_frame(self) -> pd.DataFrame:
        """
        One row per run, newest first.

        Columns: experiment_id, name, timestamp, status, threshold, raw_min,
        raw_max, the test metrics, level_lift and the number of failed checks.
        Errored runs only fill the identifying columns.
        """
        rows = []
        for entry in self.get_all_logs():
            row = {
                "experiment_id": entry["experiment_id"],
                "name": entry["config"]["name"],
                "timestamp": entry["timestamp"],
                "status": entry["status"],
            }
            results = entry.get("results")
            if results is not None:
                low, high = entry["weight_table"]["raw_bounds"]
                row.update(threshold=results["threshold"], raw_min=low, raw_max=high)
                for key in SUMMARY_METRICS:
                    row[key] = results["metrics"].get(f"test_{key}")
                row["level_lift"] = results.get("level_lift")
                row["failed_checks"] = len(entry.get("failed_checks", []))
            rows.append(row)

        if not rows:
            return pd.DataFrame()
        return pd.DataFrame(rows).sort_values("timestamp", ascending=False)
