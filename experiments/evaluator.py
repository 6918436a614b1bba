"""
Evaluator for lead scoring experiments.

Scores labeled feature frames with an experiment's weight table and
measures how well LEAD_SCORE separates converted from unconverted leads.
"""

from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.metrics import (
    accuracy_score,
    precision_score,
    recall_score,
    f1_score,
    fbeta_score,
    roc_auc_score,
    confusion_matrix,
)

from lead_scoring.config import ScoringConfig
from lead_scoring.scorer import BatchScoringResult, LeadScorer

from .config import ExperimentConfig
from .dataset import LABEL_COLUMN

# Levels with fewer test leads are too noisy to compare
MIN_LEVEL_LEADS = 5


class Evaluator:
    """Handles scoring and metric calculation for experiments."""

    def score_dataset(
        self, df: pd.DataFrame, config: ExperimentConfig
    ) -> pd.DataFrame:
        """
        Score a labeled feature frame with the experiment's weights.

        Args:
            df: DataFrame with feature columns and IS_CONVERTED
            config: ExperimentConfig with weight overrides

        Returns:
            DataFrame with LEAD_SCORE, SCORE_LEVEL and contributions added
        """
        return self.score_batch(df, config.scoring_config()).df

    def score_batch(
        self, df: pd.DataFrame, scoring_config: ScoringConfig
    ) -> BatchScoringResult:
        """Score a frame and keep the batch result for level and category views."""
        return LeadScorer(scoring_config).score_frame(df)

    def find_optimal_threshold(
        self, df: pd.DataFrame, config: ExperimentConfig
    ) -> Tuple[float, pd.DataFrame]:
        """
        Find optimal threshold on validation set.

        Args:
            df: Scored DataFrame with LEAD_SCORE and IS_CONVERTED
            config: ExperimentConfig with optimization settings

        Returns:
            Tuple of (best_threshold, sweep_results_df)
        """
        y_true = df[LABEL_COLUMN]
        scores = df["LEAD_SCORE"]

        thresholds = np.arange(0, 100 + config.threshold_step, config.threshold_step)
        thresholds = thresholds[thresholds <= 100]
        results = []

        for thresh in thresholds:
            y_pred = (scores >= thresh).astype(int)
            results.append({
                "threshold": float(thresh),
                "accuracy": accuracy_score(y_true, y_pred),
                "precision": precision_score(y_true, y_pred, zero_division=0),
                "recall": recall_score(y_true, y_pred, zero_division=0),
                "f1": f1_score(y_true, y_pred, zero_division=0),
                "f2": fbeta_score(y_true, y_pred, beta=2, zero_division=0),
            })

        results_df = pd.DataFrame(results)

        # Apply constraints
        valid = results_df.copy()
        if config.min_recall:
            valid = valid[valid["recall"] >= config.min_recall]
        if config.min_precision:
            valid = valid[valid["precision"] >= config.min_precision]

        if len(valid) == 0:
            valid = results_df  # Fallback to unconstrained

        best_idx = valid[config.optimize_metric].idxmax()
        best_threshold = float(results_df.loc[best_idx, "threshold"])

        return best_threshold, results_df

    def calculate_metrics(
        self, df: pd.DataFrame, threshold: float
    ) -> dict:
        """
        Calculate all metrics at a given threshold.

        Args:
            df: Scored DataFrame with LEAD_SCORE and IS_CONVERTED
            threshold: Score threshold for "sales-ready"

        Returns:
            Dictionary with all metrics
        """
        y_true = df[LABEL_COLUMN]
        y_pred = (df["LEAD_SCORE"] >= threshold).astype(int)
        y_prob = df["LEAD_SCORE"] / 100

        cm = confusion_matrix(y_true, y_pred, labels=[0, 1])

        return {
            "accuracy": accuracy_score(y_true, y_pred),
            "precision": precision_score(y_true, y_pred, zero_division=0),
            "recall": recall_score(y_true, y_pred, zero_division=0),
            "f1": f1_score(y_true, y_pred, zero_division=0),
            "f2": fbeta_score(y_true, y_pred, beta=2, zero_division=0),
            "auc_roc": roc_auc_score(y_true, y_prob)
            if len(np.unique(y_true)) > 1
            else 0.0,
            "true_positives": int(cm[1, 1]),
            "true_negatives": int(cm[0, 0]),
            "false_positives": int(cm[0, 1]),
            "false_negatives": int(cm[1, 0]),
        }

    def level_conversion_rates(
        self, df: pd.DataFrame, level_order: Optional[Sequence[str]] = None
    ) -> pd.DataFrame:
        """
        Conversion rate per score level.

        A useful weight table shows conversion rising from DEAD to HOT.

        Args:
            df: Scored DataFrame with SCORE_LEVEL and IS_CONVERTED
            level_order: Level names from lowest to highest. Empty levels
                are dropped.
        """
        rates = (
            df.groupby("SCORE_LEVEL")[LABEL_COLUMN]
            .agg(leads="count", conversion_rate="mean")
            .round(3)
        )
        if level_order is not None:
            rates = rates.reindex(list(level_order)).dropna(how="all")
            rates["leads"] = rates["leads"].astype(int)
        return rates

    def level_lift(
        self, rates: pd.DataFrame, min_leads: int = MIN_LEVEL_LEADS
    ) -> Optional[float]:
        """
        Conversion rate of the highest level minus that of the lowest.

        Rates must be ordered from lowest to highest level. Only levels with
        at least min_leads leads are compared; with fewer than two such
        levels the lift is undefined (None).
        """
        populated = rates[rates["leads"] >= min_leads]
        if len(populated) < 2:
            return None
        return float(
            populated["conversion_rate"].iloc[-1] - populated["conversion_rate"].iloc[0]
        )
