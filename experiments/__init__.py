"""
Experiment pipeline for lead scoring weight tuning.

Usage:
    from experiments import ExperimentRunner, ExperimentConfig, create_dataset

    # Build labeled train/validation/test CSVs
    create_dataset()

    # Run from YAML
    runner = ExperimentRunner()
    result = runner.run_from_yaml("configs/engagement_heavy.yaml")
    print(result.summary())

    # Run programmatically
    config = ExperimentConfig(
        name="custom",
        description="Reward meetings more",
        weights={"behavioral.meeting_count": 12}
    )
    result = runner.run(config)

CLI:
    python -m experiments.run --generate-data
    python -m experiments.run configs/baseline.yaml
    python -m experiments.run --list
"""

from .config import ExperimentConfig
from .runner import ExperimentRunner, ExperimentResult
from .evaluator import Evaluator
from .dataset import build_feature_frame, create_dataset, split_dataset
from .logger import ExperimentLogger
from .artifacts import ArtifactManager

__all__ = [
    "ExperimentConfig",
    "ExperimentRunner",
    "ExperimentResult",
    "Evaluator",
    "ExperimentLogger",
    "ArtifactManager",
    "build_feature_frame",
    "create_dataset",
    "split_dataset",
]
