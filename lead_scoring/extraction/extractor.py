"""
LeadFeatureExtractor - builds LeadFeatures from raw CRM inputs.

Usage:
    from lead_scoring import LeadFeatureExtractor, LeadProfile

    extractor = LeadFeatureExtractor()
    features = extractor.extract(
        LeadProfile(email="jane@acme.io", title="VP Sales"),
        activities=[{"type": "email_open", "occurred_at": "2026-03-02T10:00Z"}],
        as_of=datetime(2026, 3, 5, tzinfo=timezone.utc),
    )
"""

from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Union

import pandas as pd

from ..config import DEFAULT_CONFIG, ScoringConfig
from ..features import LeadFeatures
from ..inputs import (
    ActivityEvent,
    LeadProfile,
    LeadRecord,
    SequenceEngagement,
    as_utc,
)
from .base import ExtractionContext
from .behavioral import BehavioralExtractor
from .demographic import DemographicExtractor
from .engagement import EngagementExtractor
from .temporal import TemporalExtractor
from .text import TextAnalyzer, extract_text_features

ProfileInput = Union[LeadProfile, Mapping[str, Any], None]
ActivityInput = Union[ActivityEvent, Mapping[str, Any]]
SequenceInput = Union[SequenceEngagement, Mapping[str, Any], None]


def _utc(moment: Optional[datetime]) -> datetime:
    return as_utc(moment) or datetime.now(timezone.utc)


class LeadFeatureExtractor:
    """
    Derives a LeadFeatures snapshot per lead.

    Extraction is pure given ``as_of``: pass it explicitly for reproducible
    features (it defaults to the current time).

    Categories:
    - demographic: profile completeness, email domain, seniority, size
    - behavioral: activity counters, velocity, diversity
    - temporal: age, recency decay, bursts, day/time patterns
    - engagement: email rates, sequence progress
    - text: optional analyzer output (never weighted)
    """

    def __init__(
        self,
        config: Optional[ScoringConfig] = None,
        text_analyzer: Optional[TextAnalyzer] = None,
    ):
        """
        Initialize extractor with configuration.

        Args:
            config: ScoringConfig instance. Uses DEFAULT_CONFIG if None.
            text_analyzer: Optional message analyzer. Text features are
                all-null when omitted.
        """
        self.config = config or DEFAULT_CONFIG
        self.text_analyzer = text_analyzer
        self._init_extractors()

    def _init_extractors(self) -> None:
        """Initialize all category extractors."""
        self.extractors = {
            "demographic": DemographicExtractor(self.config),
            "behavioral": BehavioralExtractor(self.config),
            "temporal": TemporalExtractor(self.config),
            "engagement": EngagementExtractor(self.config),
        }

    def extract(
        self,
        profile: ProfileInput = None,
        activities: Iterable[ActivityInput] = (),
        sequence: SequenceInput = None,
        as_of: Optional[datetime] = None,
    ) -> LeadFeatures:
        """
        Extract all feature categories for one lead.

        Args:
            profile: LeadProfile or a mapping accepted by LeadProfile.from_dict
            activities: ActivityEvent objects or mappings, any order
            sequence: SequenceEngagement, mapping, or None if not enrolled
            as_of: Reference time for ages and recency (default: now, UTC)

        Returns:
            LeadFeatures snapshot
        """
        if profile is None:
            profile = LeadProfile()
        elif isinstance(profile, Mapping):
            profile = LeadProfile.from_dict(profile)

        if isinstance(sequence, Mapping):
            sequence = SequenceEngagement.from_dict(sequence)

        events = tuple(
            a if isinstance(a, ActivityEvent) else ActivityEvent.from_dict(a)
            for a in (activities or ())
        )

        context = ExtractionContext(
            profile=profile,
            activities=events,
            sequence=sequence,
            as_of=_utc(as_of),
        )

        extracted = {
            name: extractor.extract(context)
            for name, extractor in self.extractors.items()
        }
        text = extract_text_features(profile.message, self.text_analyzer)
        return LeadFeatures(**extracted, text=text)

    def extract_record(
        self, record: LeadRecord, as_of: Optional[datetime] = None
    ) -> LeadFeatures:
        """Extract features for a LeadRecord."""
        return self.extract(
            record.profile, record.activities, record.sequence, as_of=as_of
        )

    def extract_frame(
        self, records: Iterable[LeadRecord], as_of: Optional[datetime] = None
    ) -> pd.DataFrame:
        """
        Extract features for many leads into one DataFrame.

        Columns: LEAD_ID, one column per feature, and IS_CONVERTED when
        every record carries a known outcome.

        Args:
            records: LeadRecords to extract
            as_of: Shared reference time (default: now, UTC)

        Returns:
            DataFrame ready for LeadScorer.score_frame
        """
        as_of = _utc(as_of)
        records = list(records)
        rows = []
        for record in records:
            row = {"LEAD_ID": record.lead_id}
            row.update(self.extract_record(record, as_of=as_of).to_record())
            rows.append(row)

        df = pd.DataFrame(rows, columns=["LEAD_ID", *LeadFeatures().to_record()])
        if records and all(r.converted is not None for r in records):
            df["IS_CONVERTED"] = [int(r.converted) for r in records]
        return df
