"""Engagement scoring component."""

from .base import BaseScorer


class EngagementScorer(BaseScorer):
    """
    Score email and nurture-sequence engagement quality.

    Rates are already bounded to [0, 1]. A missing average response time
    contributes nothing; slow responses cost points.
    """

    category = "engagement"
