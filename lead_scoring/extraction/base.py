"""Base class for feature extractors."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from functools import cached_property
from typing import TYPE_CHECKING, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..inputs import ActivityEvent, LeadProfile, SequenceEngagement

if TYPE_CHECKING:
    from ..config import ScoringConfig

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """IANA timezone for a lead, falling back to UTC."""
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using UTC", name)
        return timezone.utc


def whole_days_between(start: datetime, end: datetime) -> int:
    """Whole days elapsed from start to end, never negative."""
    return max(0, int((end - start).total_seconds() // SECONDS_PER_DAY))


@dataclass(frozen=True)
class ExtractionContext:
    """
    Normalized inputs shared by all extractors for one lead.

    Activities without a timestamp are kept for counting but excluded from
    ``timestamps``, which is sorted ascending.
    """

    profile: LeadProfile
    activities: tuple[ActivityEvent, ...]
    sequence: Optional[SequenceEngagement]
    as_of: datetime

    @cached_property
    def timestamps(self) -> list[datetime]:
        stamps = [a.occurred_at for a in self.activities if a.occurred_at is not None]
        if any(later < earlier for earlier, later in zip(stamps, stamps[1:])):
            stamps.sort()
        return stamps

    @cached_property
    def local_timezone(self) -> tzinfo:
        return resolve_timezone(self.profile.timezone)

    @cached_property
    def days_since_created(self) -> int:
        if self.profile.created_at is None:
            return 0
        return whole_days_between(self.profile.created_at, self.as_of)

    @cached_property
    def last_activity_at(self) -> Optional[datetime]:
        candidates = [self.profile.last_engagement_at]
        if self.timestamps:
            candidates.append(self.timestamps[-1])
        present = [c for c in candidates if c is not None]
        return max(present) if present else None


class BaseExtractor(ABC):
    """
    Abstract base class for feature extractors.

    Each extractor derives one feature category from the shared context.
    Extractors never raise on missing lead data; they fall back to the
    documented defaults (unknown, False, 0 or None).
    """

    name: str = "base"

    def __init__(self, config: "ScoringConfig"):
        """
        Initialize extractor with configuration.

        Args:
            config: ScoringConfig instance with extraction constants
        """
        self.config = config

    @abstractmethod
    def extract(self, context: ExtractionContext):
        """
        Derive this extractor's feature record.

        Args:
            context: ExtractionContext for one lead

        Returns:
            Frozen feature dataclass for the category
        """
        pass
