"""
Data schema definitions for lead scoring.

Uses Pandera for runtime validation of feature frames to catch pipeline
errors (bad categories, negative counts) before scoring. The feature schema
is generated from the feature records so it can never drift from them.
"""

from typing import Iterable

from pandera import Check, Column, DataFrameSchema

from .features import BOOLEAN, CATEGORICAL, weighted_feature_specs


def _feature_column(spec) -> Column:
    if spec.kind == BOOLEAN:
        return Column(bool, nullable=False, description=spec.key)
    if spec.kind == CATEGORICAL:
        return Column(
            str,
            nullable=False,
            checks=Check.isin([member.value for member in spec.enum]),
            description=spec.key,
        )
    if spec.annotation is int:
        return Column(
            int,
            nullable=False,
            checks=Check.greater_than_or_equal_to(0),
            description=spec.key,
        )
    return Column(
        float,
        nullable=spec.annotation is not float,  # Optional[...] fields
        checks=Check.greater_than_or_equal_to(0),
        description=spec.key,
    )


# Schema for scoring input (one row per lead, one column per feature)
FEATURE_FRAME_SCHEMA = DataFrameSchema(
    {
        "LEAD_ID": Column(
            str,
            nullable=False,
            unique=True,
            required=False,
            description="Unique lead identifier",
        ),
        **{spec.name: _feature_column(spec) for spec in weighted_feature_specs()},
    },
    strict=False,  # Allow extra columns (labels, informational features)
    coerce=True,
    description="Schema for lead scoring feature frames",
)


def scoring_output_schema(level_names: Iterable[str]) -> DataFrameSchema:
    """Schema for scored frames, given the configured level names."""
    return DataFrameSchema(
        {
            "LEAD_SCORE": Column(
                float,
                nullable=False,
                checks=[
                    Check.greater_than_or_equal_to(0),
                    Check.less_than_or_equal_to(100),
                ],
            ),
            "RAW_SCORE": Column(float, nullable=False),
            "SCORE_LEVEL": Column(
                str, nullable=False, checks=Check.isin(list(level_names))
            ),
            "PRIORITY_RANK": Column(
                int, nullable=False, checks=Check.greater_than_or_equal_to(1)
            ),
            "PRIORITY_TIER": Column(str, nullable=False, required=False),
        },
        strict=False,  # Allow feature and contribution columns
        description="Schema for lead scoring output frames",
    )
