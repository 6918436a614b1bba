"""Temporal feature extraction."""

from collections import deque
from datetime import datetime, timedelta, tzinfo
from typing import Sequence

from ..features import DayPattern, TemporalFeatures, TimePattern
from .base import BaseExtractor, ExtractionContext, whole_days_between


def recency_score(days_since_last_activity: float, half_life_days: float) -> float:
    """
    Exponential decay of inactivity: 100 right after activity, 50 after one
    half-life, approaching 0 afterwards.
    """
    days = max(0.0, float(days_since_last_activity))
    decay = 0.5 ** (days / half_life_days)
    return float(min(100, max(0, round(decay * 100))))


def detect_activity_burst(
    timestamps: Sequence[datetime],
    window: timedelta = timedelta(hours=24),
    min_events: int = 3,
) -> bool:
    """
    True if any window of the given length holds min_events or more.

    Timestamps must be sorted ascending. A deque holds the events inside the
    current window; each timestamp enters and leaves it once.
    """
    if len(timestamps) < min_events:
        return False
    in_window = deque()
    for ts in timestamps:
        in_window.append(ts)
        while ts - in_window[0] >= window:
            in_window.popleft()
        if len(in_window) >= min_events:
            return True
    return False


def _aggregate(labels: set, single: dict, mixed):
    if len(labels) == 1:
        return single[labels.pop()]
    return mixed


def detect_day_pattern(timestamps: Sequence[datetime], tz: tzinfo) -> DayPattern:
    """weekday / weekend when every activity agrees, otherwise mixed."""
    if not timestamps:
        return DayPattern.MIXED
    labels = {ts.astimezone(tz).weekday() >= 5 for ts in timestamps}
    return _aggregate(
        labels, {False: DayPattern.WEEKDAY, True: DayPattern.WEEKEND}, DayPattern.MIXED
    )


def detect_time_pattern(
    timestamps: Sequence[datetime], tz: tzinfo, business_hours: tuple[int, int]
) -> TimePattern:
    """business_hours / after_hours when every activity agrees, otherwise mixed."""
    if not timestamps:
        return TimePattern.MIXED
    start, end = business_hours
    labels = {start <= ts.astimezone(tz).hour <= end for ts in timestamps}
    return _aggregate(
        labels,
        {True: TimePattern.BUSINESS_HOURS, False: TimePattern.AFTER_HOURS},
        TimePattern.MIXED,
    )


class TemporalExtractor(BaseExtractor):
    """
    Lead age, recency and activity timing.

    A lead that never had any activity gets the no-activity sentinel for
    days_since_last_activity, which decays recency_score to 0.
    Day and time patterns use the lead's timezone (UTC if unknown).
    """

    name = "temporal"

    def extract(self, context: ExtractionContext) -> TemporalFeatures:
        last = context.last_activity_at
        if last is None:
            days_since_last = self.config.no_activity_days
        else:
            days_since_last = whole_days_between(last, context.as_of)

        timestamps = context.timestamps
        tz = context.local_timezone

        return TemporalFeatures(
            days_since_created=context.days_since_created,
            days_since_last_activity=days_since_last,
            recency_score=recency_score(
                days_since_last, self.config.recency_half_life_days
            ),
            activity_burst=detect_activity_burst(
                timestamps,
                window=timedelta(hours=self.config.burst_window_hours),
                min_events=self.config.burst_min_events,
            ),
            day_pattern=detect_day_pattern(timestamps, tz),
            time_pattern=detect_time_pattern(
                timestamps, tz, self.config.business_hours
            ),
        )
