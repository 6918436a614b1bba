"""Temporal scoring component."""

from .base import BaseScorer


class TemporalScorer(BaseScorer):
    """
    Score recency and timing.

    Default weights are negative for lead age and days since last activity,
    which penalizes stale leads; recency and activity bursts add points.
    """

    category = "temporal"
