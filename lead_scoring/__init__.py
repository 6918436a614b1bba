"""
Lead Scoring Package

A feature-weighted scoring system that turns CRM lead data into a
0-100 priority score with an explanation.
"""

from .config import ConfigurationError, FeatureWeights, ScoringConfig
from .extraction import KeywordTextAnalyzer, LeadFeatureExtractor
from .features import LeadFeatures
from .inputs import ActivityEvent, LeadProfile, LeadRecord, SequenceEngagement
from .insights import LeadInsights, Recommendation, RiskFactor
from .scorer import BatchScoringResult, LeadScorer, ScoreResult, generate_sample_leads

__all__ = [
    "LeadScorer",
    "ScoreResult",
    "BatchScoringResult",
    "LeadFeatureExtractor",
    "KeywordTextAnalyzer",
    "LeadInsights",
    "RiskFactor",
    "Recommendation",
    "LeadFeatures",
    "LeadProfile",
    "ActivityEvent",
    "SequenceEngagement",
    "LeadRecord",
    "FeatureWeights",
    "ScoringConfig",
    "ConfigurationError",
    "generate_sample_leads",
]
__version__ = "1.0.0"
