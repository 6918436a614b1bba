"""Weighted scoring components for lead scoring."""

from .base import BaseScorer, contribution_column
from .demographic import DemographicScorer
from .behavioral import BehavioralScorer
from .temporal import TemporalScorer
from .engagement import EngagementScorer

__all__ = [
    "BaseScorer",
    "contribution_column",
    "DemographicScorer",
    "BehavioralScorer",
    "TemporalScorer",
    "EngagementScorer",
]
