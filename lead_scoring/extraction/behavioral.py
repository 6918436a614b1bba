"""Behavioral feature extraction."""

from collections import Counter

from ..features import BehavioralFeatures
from .base import BaseExtractor, ExtractionContext

# Substring -> counter, checked in order (first match wins)
ACTIVITY_KINDS = [
    ("open", "email_open"),
    ("click", "email_click"),
    ("view", "page_view"),
    ("submit", "form_submit"),
    ("meeting", "meeting"),
    ("call", "call"),
]


def classify_activity(activity_type: str) -> str | None:
    """Map a free-form activity type onto one of the tracked counters."""
    normalized = activity_type.strip().lower()
    for needle, kind in ACTIVITY_KINDS:
        if needle in normalized:
            return kind
    return None


class BehavioralExtractor(BaseExtractor):
    """
    Activity counters for a lead.

    activity_velocity is activities per day since creation (minimum one
    day). channel_diversity counts distinct raw activity types.
    high_value_action_count = form submits + email clicks.
    """

    name = "behavioral"

    def extract(self, context: ExtractionContext) -> BehavioralFeatures:
        counts = Counter()
        types = set()
        for activity in context.activities:
            normalized = activity.activity_type.strip().lower()
            if normalized:
                types.add(normalized)
            kind = classify_activity(normalized)
            if kind:
                counts[kind] += 1

        total = len(context.activities)
        days_active = max(1, context.days_since_created)

        return BehavioralFeatures(
            email_open_count=counts["email_open"],
            email_click_count=counts["email_click"],
            page_view_count=counts["page_view"],
            form_submit_count=counts["form_submit"],
            meeting_count=counts["meeting"],
            call_count=counts["call"],
            total_activities=total,
            activity_velocity=total / days_active,
            channel_diversity=len(types),
            high_value_action_count=counts["form_submit"] + counts["email_click"],
        )
