"""Behavioral scoring component."""

from .base import BaseScorer


class BehavioralScorer(BaseScorer):
    """
    Score activity volume and mix.

    Counts are clipped to their caps so a single very noisy lead cannot
    dominate a ranking. Meetings and form submits weigh most per event.
    """

    category = "behavioral"
