"""Demographic scoring component."""

from .base import BaseScorer


class DemographicScorer(BaseScorer):
    """
    Score profile completeness and buyer fit.

    Presence flags reward leads sales can actually qualify. Seniority,
    email domain and company size use their rank tables, so a C-level
    contact at an enterprise on a corporate domain earns the most.
    """

    category = "demographic"
