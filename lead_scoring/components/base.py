"""Base class for weighted scoring components."""

from typing import TYPE_CHECKING

import pandas as pd

from ..features import BOOLEAN, CATEGORICAL, INFO, FeatureSpec, feature_specs

if TYPE_CHECKING:
    from ..config import FeatureWeights


def contribution_column(feature: str) -> str:
    return f"{feature}_contribution"


class BaseScorer:
    """
    Weighted scorer for one feature category.

    Each component turns its category's feature columns into per-feature
    contributions using vectorized pandas operations:
    - boolean: weight if true, else 0
    - numeric: weight * value clipped to [0, cap]; missing counts as 0
    - categorical: weight * rank(category); unranked values count as 0
    """

    category: str = "base"

    def __init__(self, weights: "FeatureWeights"):
        """
        Initialize scorer with a weight table.

        Args:
            weights: Validated FeatureWeights instance
        """
        self.weights = weights

    @property
    def specs(self) -> list[FeatureSpec]:
        """Weighted features of this category."""
        return [s for s in feature_specs(self.category) if s.kind != INFO]

    @property
    def required_columns(self) -> list[str]:
        """List of columns required by this scorer."""
        return [s.name for s in self.specs]

    @property
    def contribution_columns(self) -> list[str]:
        return [contribution_column(s.name) for s in self.specs]

    def validate(self, df: pd.DataFrame) -> None:
        """Validate required columns exist."""
        missing = set(self.required_columns) - set(df.columns)
        if missing:
            raise ValueError(
                f"{self.__class__.__name__} requires columns: {sorted(missing)}"
            )

    def feature_values(self, df: pd.DataFrame, spec: FeatureSpec) -> pd.Series:
        """Numeric value of a feature before weighting."""
        column = df[spec.name]
        if spec.kind == BOOLEAN:
            return column.fillna(False).astype(bool).astype(float)
        if spec.kind == CATEGORICAL:
            ranks = dict(self.weights.ranks[spec.name])
            labels = column.map(lambda v: getattr(v, "value", v))
            return labels.map(ranks).fillna(0).astype(float)
        values = pd.to_numeric(column, errors="coerce").fillna(0).astype(float)
        return values.clip(lower=0, upper=self.weights.caps[spec.name])

    def contributions(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Per-feature contributions for all rows.

        Args:
            df: DataFrame with this category's feature columns

        Returns:
            DataFrame with one <feature>_contribution column per feature
        """
        self.validate(df)
        return pd.DataFrame(
            {
                contribution_column(spec.name): self.feature_values(df, spec)
                * self.weights.weight(self.category, spec.name)
                for spec in self.specs
            },
            index=df.index,
        )

    def score(self, df: pd.DataFrame) -> pd.Series:
        """Category subtotal (sum of its contributions)."""
        return self.contributions(df).sum(axis=1)
