"""
Input records supplied by the CRM data layer.

All fields are optional. ``from_dict`` accepts snake_case or camelCase keys
and degrades malformed values to None instead of raising, so partially
populated CRM exports can be scored without cleaning.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import pandas as pd


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp into a timezone-aware UTC datetime.

    Naive values are assumed to be UTC. Unparseable values return None.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        ts = pd.to_datetime(value, errors="coerce", utc=True)
    except (TypeError, ValueError, OverflowError):
        return None
    if not isinstance(ts, pd.Timestamp) or pd.isna(ts):
        return None
    return ts.to_pydatetime().astimezone(timezone.utc)


def as_utc(value: Any) -> Optional[datetime]:
    """
    Normalize a timestamp to aware UTC.

    Naive datetimes are taken as UTC; anything that is not a datetime goes
    through parse_timestamp.
    """
    if isinstance(value, datetime) and not pd.isna(value):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return parse_timestamp(value)


def _to_int(value: Any) -> Optional[int]:
    try:
        if value is None or pd.isna(value):
            return None
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_float(value: Any) -> Optional[float]:
    try:
        if value is None or pd.isna(value):
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    """First present key wins (snake_case first, then camelCase)."""
    for key in keys:
        if key in data:
            return data[key]
    return None


@dataclass(frozen=True)
class ActivityEvent:
    """A timestamped lead activity (email open, page view, meeting, ...)."""

    activity_type: str
    occurred_at: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, "occurred_at", as_utc(self.occurred_at))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ActivityEvent":
        return cls(
            activity_type=_to_str(_pick(data, "activity_type", "activityType", "type"))
            or "",
            occurred_at=parse_timestamp(
                _pick(data, "occurred_at", "occurredAt", "created_at", "createdAt")
            ),
        )


@dataclass(frozen=True)
class LeadProfile:
    """Lead profile fields used for scoring."""

    email: Optional[str] = None
    name: Optional[str] = None
    company: Optional[str] = None
    title: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    timezone: Optional[str] = None
    message: Optional[str] = None
    total_emails_sent: int = 0
    total_emails_opened: int = 0
    total_emails_clicked: int = 0
    total_website_visits: int = 0
    last_engagement_at: Optional[datetime] = None

    def __post_init__(self):
        # Direct construction may pass naive or non-UTC datetimes
        for name in ("created_at", "last_engagement_at"):
            object.__setattr__(self, name, as_utc(getattr(self, name)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LeadProfile":
        return cls(
            email=_to_str(data.get("email")),
            name=_to_str(data.get("name")),
            company=_to_str(data.get("company")),
            title=_to_str(data.get("title")),
            phone=_to_str(data.get("phone")),
            created_at=parse_timestamp(_pick(data, "created_at", "createdAt")),
            timezone=_to_str(data.get("timezone")),
            message=_to_str(data.get("message")),
            total_emails_sent=_to_int(
                _pick(data, "total_emails_sent", "totalEmailsSent")
            ) or 0,
            total_emails_opened=_to_int(
                _pick(data, "total_emails_opened", "totalEmailsOpened")
            ) or 0,
            total_emails_clicked=_to_int(
                _pick(data, "total_emails_clicked", "totalEmailsClicked")
            ) or 0,
            total_website_visits=_to_int(
                _pick(data, "total_website_visits", "totalWebsiteVisits")
            ) or 0,
            last_engagement_at=parse_timestamp(
                _pick(data, "last_engagement_at", "lastEngagementAt")
            ),
        )


@dataclass(frozen=True)
class SequenceEngagement:
    """Nurture-sequence enrollment and response metrics."""

    is_active: bool = False
    steps_completed: int = 0
    total_steps: int = 0
    current_step: Optional[int] = None
    avg_response_hours: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SequenceEngagement":
        return cls(
            is_active=bool(_pick(data, "is_active", "isActive", "isEnrolled")),
            steps_completed=_to_int(
                _pick(data, "steps_completed", "stepsCompleted")
            ) or 0,
            total_steps=_to_int(_pick(data, "total_steps", "totalSteps")) or 0,
            current_step=_to_int(
                _pick(data, "current_step", "currentStep", "sequenceStepIndex")
            ),
            avg_response_hours=_to_float(
                _pick(data, "avg_response_hours", "avgResponseHours")
            ),
        )


@dataclass(frozen=True)
class LeadRecord:
    """Everything the extractor needs for one lead."""

    lead_id: str
    profile: LeadProfile = field(default_factory=LeadProfile)
    activities: tuple[ActivityEvent, ...] = ()
    sequence: Optional[SequenceEngagement] = None
    converted: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LeadRecord":
        """
        Build a record from a nested mapping.

        Expected shape (every key optional except ``lead_id``)::

            {
                "lead_id": "L-1",
                "profile": {...},
                "activities": [{"type": "email_open", "occurred_at": "..."}],
                "sequence": {...},
            }
        """
        activities = _pick(data, "activities") or []
        sequence = _pick(data, "sequence")
        converted = _pick(data, "converted")
        return cls(
            lead_id=str(_pick(data, "lead_id", "leadId", "id")),
            profile=LeadProfile.from_dict(_pick(data, "profile") or {}),
            activities=tuple(ActivityEvent.from_dict(a) for a in activities),
            sequence=SequenceEngagement.from_dict(sequence) if sequence else None,
            converted=None if converted is None else bool(converted),
        )
