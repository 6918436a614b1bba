"""Engagement feature extraction."""

import logging

from ..features import EngagementFeatures
from .base import BaseExtractor, ExtractionContext

logger = logging.getLogger(__name__)


def safe_rate(numerator: float, denominator: float, label: str = "rate") -> float:
    """numerator / denominator, or 0 when the denominator is not positive."""
    if not denominator or denominator <= 0:
        logger.debug("Undefined %s (denominator %r), using 0", label, denominator)
        return 0.0
    return numerator / denominator


class EngagementExtractor(BaseExtractor):
    """
    Email and nurture-sequence engagement.

    - email_open_rate = opens / sent, email_click_rate = clicks / opens
    - sequence_engagement = steps completed / total steps, within [0, 1]
    - total_engagement_score (0-100) = open_rate*30 + click_rate*40
      + sequence_engagement*20 + 10 if the lead visited the website
    """

    name = "engagement"

    def extract(self, context: ExtractionContext) -> EngagementFeatures:
        profile = context.profile
        sequence = context.sequence

        sent = max(0, profile.total_emails_sent)
        opened = max(0, profile.total_emails_opened)
        clicked = max(0, profile.total_emails_clicked)

        open_rate = safe_rate(opened, sent, "email_open_rate")
        click_rate = safe_rate(clicked, opened, "email_click_rate")

        if sequence is not None:
            sequence_engagement = min(
                1.0,
                safe_rate(
                    max(0, sequence.steps_completed),
                    sequence.total_steps,
                    "sequence_engagement",
                ),
            )
            avg_response_time = sequence.avg_response_hours
            if avg_response_time is not None and avg_response_time < 0:
                avg_response_time = None
            current_step = sequence.current_step
            is_active = sequence.is_active
        else:
            sequence_engagement = 0.0
            avg_response_time = None
            current_step = None
            is_active = False

        total_score = (
            open_rate * 30
            + click_rate * 40
            + sequence_engagement * 20
            + (10 if profile.total_website_visits > 0 else 0)
        )

        return EngagementFeatures(
            total_engagement_score=float(min(100, round(total_score))),
            email_open_rate=open_rate,
            email_click_rate=click_rate,
            sequence_engagement=sequence_engagement,
            avg_response_time=avg_response_time,
            current_sequence_step=current_step,
            is_in_active_sequence=is_active,
        )
