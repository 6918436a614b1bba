#!/usr/bin/env python3
"""
Command line for the weight-tuning pipeline.

Usage:
    python -m experiments.run --generate-data [--n-leads 1000 --seed 7]
    python -m experiments.run configs/baseline.yaml configs/engagement_heavy.yaml
    python -m experiments.run --list
    python -m experiments.run --compare --sort-by level_lift
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .dataset import create_dataset
from .logger import SUMMARY_METRICS
from .runner import ExperimentRunner

PACKAGE_DIR = Path(__file__).parent

SORT_COLUMNS = SUMMARY_METRICS + ["level_lift"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m experiments.run",
        description="Score labeled leads with candidate weight tables and compare them",
    )
    parser.add_argument("configs", nargs="*", help="YAML experiment config(s)")
    parser.add_argument(
        "--base-path",
        type=Path,
        default=None,
        help="Root for data/, logs/ and artifacts/ (default: the experiments package)",
    )

    data = parser.add_argument_group("dataset")
    data.add_argument("--generate-data", action="store_true",
                      help="Write synthetic train/validation/test CSVs first")
    data.add_argument("--n-leads", type=int, default=600,
                      help="Leads to generate (default: 600)")
    data.add_argument("--seed", type=int, default=42,
                      help="Random seed for generation and splitting (default: 42)")

    history = parser.add_argument_group("history")
    history.add_argument("--list", action="store_true", help="Show logged runs, newest first")
    history.add_argument("--compare", action="store_true",
                         help="Show completed runs ranked by --sort-by")
    history.add_argument("--sort-by", choices=SORT_COLUMNS, default="auc_roc",
                         help="Ranking column for --compare (default: auc_roc)")

    parser.add_argument("--stop-on-failure", action="store_true",
                        help="Stop at the first config that errors")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def resolve_config(path: Path) -> Path:
    """Relative paths that do not exist fall back to the experiments package."""
    if not path.is_absolute() and not path.exists() and (PACKAGE_DIR / path).exists():
        return PACKAGE_DIR / path
    return path


def show_history(runner: ExperimentRunner, sort_by: Optional[str] = None) -> int:
    df = runner.list_experiments()
    if df.empty:
        print("No experiments found.")
        return 0
    if sort_by is not None:
        df = df[df["status"] != "ERROR"]
        if sort_by in df.columns:
            df = df.sort_values(sort_by, ascending=False, na_position="last")
        print(f"\nCompleted experiments by {sort_by}:\n")
    print(df.to_string(index=False))
    return 0


def run_configs(runner: ExperimentRunner, paths: list[Path], stop_on_failure: bool) -> int:
    results = []
    for path in map(resolve_config, paths):
        if not path.exists():
            print(f"Config not found: {path}")
            if stop_on_failure:
                return 1
            continue

        print(f"\n{'=' * 60}\n{path.name}\n{'=' * 60}")
        try:
            result = runner.run_from_yaml(path.resolve())
        except Exception as e:
            print(f"ERROR: {e}")
            if stop_on_failure:
                return 1
            continue

        results.append(result)
        print(result.summary())
        if result.passed:
            print(f"Artifacts: {runner.artifacts_dir / result.experiment_id}")

    if len(results) > 1:
        print(f"\n{'=' * 60}\nBATCH SUMMARY\n{'=' * 60}")
        for result in sorted(results, key=lambda r: r.metrics["test_auc_roc"], reverse=True):
            lift = "n/a" if result.level_lift is None else f"{result.level_lift:+.3f}"
            print(
                f"  [{result.status}] {result.config.name}: "
                f"AUC {result.metrics['test_auc_roc']:.3f}, level lift {lift}"
            )
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    runner = ExperimentRunner(base_path=args.base_path)

    if args.list or args.compare:
        return show_history(runner, args.sort_by if args.compare else None)

    if args.generate_data:
        paths = create_dataset(runner.base_path / "data", n_leads=args.n_leads, seed=args.seed)
        for split, path in paths.items():
            print(f"{split}: {path}")
        if not args.configs:
            return 0

    if not args.configs:
        parser.print_help()
        return 1

    return run_configs(runner, [Path(p) for p in args.configs], args.stop_on_failure)


if __name__ == "__main__":
    sys.exit(main())
