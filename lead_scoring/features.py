"""
Feature records for lead scoring.

Each feature category is a frozen dataclass with named fields. Every field
declares its kind through dataclass metadata so that the weight table can be
checked against the records at load time:

- boolean: contributes the weight when true
- numeric: contributes weight * value (value clipped to a configured cap)
- categorical: contributes weight * rank(category)
- info: carried through for callers, never weighted
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Optional, Tuple, Type

BOOLEAN = "boolean"
NUMERIC = "numeric"
CATEGORICAL = "categorical"
INFO = "info"

WEIGHTED_CATEGORIES = ("demographic", "behavioral", "temporal", "engagement")


class EmailDomainType(str, Enum):
    CORPORATE = "corporate"
    FREE = "free"
    EDU = "edu"
    GOVERNMENT = "government"
    UNKNOWN = "unknown"


class TitleSeniority(str, Enum):
    C_LEVEL = "c_level"
    VP = "vp"
    DIRECTOR = "director"
    MANAGER = "manager"
    INDIVIDUAL = "individual"
    UNKNOWN = "unknown"


class CompanySizeEstimate(str, Enum):
    ENTERPRISE = "enterprise"
    MID_MARKET = "mid_market"
    SMB = "smb"
    STARTUP = "startup"
    UNKNOWN = "unknown"


class DayPattern(str, Enum):
    WEEKDAY = "weekday"
    WEEKEND = "weekend"
    MIXED = "mixed"


class TimePattern(str, Enum):
    BUSINESS_HOURS = "business_hours"
    AFTER_HOURS = "after_hours"
    MIXED = "mixed"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Intent(str, Enum):
    DEMO_REQUEST = "demo_request"
    PRICING = "pricing"
    SUPPORT = "support"
    PARTNERSHIP = "partnership"
    INQUIRY = "inquiry"


class UrgencyLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def _feature(kind: str, default: Any = None, enum: Optional[Type[Enum]] = None):
    """Declare a feature field with its scoring kind."""
    return field(default=default, metadata={"kind": kind, "enum": enum})


@dataclass(frozen=True)
class DemographicFeatures:
    """Profile completeness and firmographic signals."""

    has_company: bool = _feature(BOOLEAN, False)
    has_title: bool = _feature(BOOLEAN, False)
    has_phone: bool = _feature(BOOLEAN, False)
    email_domain_type: EmailDomainType = _feature(
        CATEGORICAL, EmailDomainType.UNKNOWN, EmailDomainType
    )
    title_seniority: TitleSeniority = _feature(
        CATEGORICAL, TitleSeniority.UNKNOWN, TitleSeniority
    )
    company_size_estimate: CompanySizeEstimate = _feature(
        CATEGORICAL, CompanySizeEstimate.UNKNOWN, CompanySizeEstimate
    )
    email_domain: Optional[str] = _feature(INFO, None)


@dataclass(frozen=True)
class BehavioralFeatures:
    """Activity counters and the rates derived from them."""

    email_open_count: int = _feature(NUMERIC, 0)
    email_click_count: int = _feature(NUMERIC, 0)
    page_view_count: int = _feature(NUMERIC, 0)
    form_submit_count: int = _feature(NUMERIC, 0)
    meeting_count: int = _feature(NUMERIC, 0)
    call_count: int = _feature(NUMERIC, 0)
    total_activities: int = _feature(NUMERIC, 0)
    activity_velocity: float = _feature(NUMERIC, 0.0)
    channel_diversity: int = _feature(NUMERIC, 0)
    high_value_action_count: int = _feature(NUMERIC, 0)


@dataclass(frozen=True)
class TemporalFeatures:
    """Lead age, recency and activity timing."""

    days_since_created: int = _feature(NUMERIC, 0)
    days_since_last_activity: int = _feature(NUMERIC, 0)
    recency_score: float = _feature(NUMERIC, 0.0)
    activity_burst: bool = _feature(BOOLEAN, False)
    day_pattern: DayPattern = _feature(CATEGORICAL, DayPattern.MIXED, DayPattern)
    time_pattern: TimePattern = _feature(CATEGORICAL, TimePattern.MIXED, TimePattern)


@dataclass(frozen=True)
class EngagementFeatures:
    """Email and nurture-sequence engagement quality."""

    total_engagement_score: float = _feature(NUMERIC, 0.0)
    email_open_rate: float = _feature(NUMERIC, 0.0)
    email_click_rate: float = _feature(NUMERIC, 0.0)
    sequence_engagement: float = _feature(NUMERIC, 0.0)
    avg_response_time: Optional[float] = _feature(NUMERIC, None)
    current_sequence_step: Optional[int] = _feature(NUMERIC, None)
    is_in_active_sequence: bool = _feature(BOOLEAN, False)


@dataclass(frozen=True)
class TextFeatures:
    """Message understanding results. Never weighted."""

    sentiment: Optional[Sentiment] = _feature(INFO, None)
    intent: Optional[Intent] = _feature(INFO, None)
    urgency_level: Optional[UrgencyLevel] = _feature(INFO, None)
    topic_tags: Tuple[str, ...] = _feature(INFO, ())
    has_message: bool = _feature(INFO, False)
    message_length: int = _feature(INFO, 0)

    @classmethod
    def empty(cls, message: Optional[str] = None) -> "TextFeatures":
        """
        Text features when no analyzer is available.

        Message presence and length come from the raw text; everything that
        needs language understanding stays null.
        """
        text = (message or "").strip()
        return cls(has_message=bool(text), message_length=len(text))


@dataclass(frozen=True)
class FeatureSpec:
    """Scoring-relevant description of one feature field."""

    category: str
    name: str
    kind: str
    enum: Optional[Type[Enum]] = None
    annotation: Any = None

    @property
    def key(self) -> str:
        return f"{self.category}.{self.name}"


CATEGORY_TYPES = {
    "demographic": DemographicFeatures,
    "behavioral": BehavioralFeatures,
    "temporal": TemporalFeatures,
    "engagement": EngagementFeatures,
}


def feature_specs(category: str) -> list[FeatureSpec]:
    """All feature fields of a category, in declaration order."""
    record_type = CATEGORY_TYPES[category]
    return [
        FeatureSpec(
            category=category,
            name=f.name,
            kind=f.metadata["kind"],
            enum=f.metadata.get("enum"),
            annotation=f.type,
        )
        for f in fields(record_type)
    ]


def weighted_feature_specs() -> list[FeatureSpec]:
    """Every feature that must carry a weight, across all categories."""
    return [
        spec
        for category in WEIGHTED_CATEGORIES
        for spec in feature_specs(category)
        if spec.kind != INFO
    ]


@dataclass(frozen=True)
class LeadFeatures:
    """Complete feature snapshot for one lead at scoring time."""

    demographic: DemographicFeatures = field(default_factory=DemographicFeatures)
    behavioral: BehavioralFeatures = field(default_factory=BehavioralFeatures)
    temporal: TemporalFeatures = field(default_factory=TemporalFeatures)
    engagement: EngagementFeatures = field(default_factory=EngagementFeatures)
    text: TextFeatures = field(default_factory=TextFeatures)

    def to_record(self) -> dict[str, Any]:
        """
        Flatten weighted categories into one row keyed by feature name.

        Enum values are stored as their string value so the row can be
        placed directly into a pandas DataFrame.
        """
        record: dict[str, Any] = {}
        for category in WEIGHTED_CATEGORIES:
            values = getattr(self, category)
            for spec in feature_specs(category):
                value = getattr(values, spec.name)
                if isinstance(value, Enum):
                    value = value.value
                record[spec.name] = value
        return record
