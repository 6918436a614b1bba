"""Feature extractors for lead scoring."""

from .base import BaseExtractor, ExtractionContext
from .demographic import DemographicExtractor
from .behavioral import BehavioralExtractor
from .temporal import TemporalExtractor
from .engagement import EngagementExtractor
from .text import KeywordTextAnalyzer, TextAnalyzer, extract_text_features
from .extractor import LeadFeatureExtractor

__all__ = [
    "BaseExtractor",
    "ExtractionContext",
    "DemographicExtractor",
    "BehavioralExtractor",
    "TemporalExtractor",
    "EngagementExtractor",
    "TextAnalyzer",
    "KeywordTextAnalyzer",
    "extract_text_features",
    "LeadFeatureExtractor",
]
