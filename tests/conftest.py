"""
Pytest fixtures for lead scoring tests.
"""

from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

# Add project root to path
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from lead_scoring.config import ScoringConfig
from lead_scoring.extraction import LeadFeatureExtractor
from lead_scoring.features import CATEGORY_TYPES, LeadFeatures, feature_specs
from lead_scoring.inputs import ActivityEvent, LeadProfile
from lead_scoring.scorer import SAMPLE_AS_OF, LeadScorer, generate_sample_leads

# Wednesday, noon UTC
AS_OF = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)


def build_features(**values) -> LeadFeatures:
    """LeadFeatures with the given feature values, defaults elsewhere."""
    parts = {}
    for category, record_type in CATEGORY_TYPES.items():
        names = {spec.name for spec in feature_specs(category)}
        parts[category] = record_type(
            **{name: value for name, value in values.items() if name in names}
        )
    return LeadFeatures(**parts)


@pytest.fixture
def as_of():
    """Fixed reference time for extraction."""
    return AS_OF


@pytest.fixture
def default_config():
    """Default scoring configuration."""
    return ScoringConfig()


@pytest.fixture
def scorer(default_config):
    """LeadScorer with default config."""
    return LeadScorer(default_config)


@pytest.fixture
def extractor(default_config):
    """LeadFeatureExtractor with default config and no text analyzer."""
    return LeadFeatureExtractor(default_config)


@pytest.fixture
def make_features():
    """Factory for LeadFeatures from flat feature values."""
    return build_features


@pytest.fixture
def sample_leads():
    """100 sample leads with known outcomes."""
    return generate_sample_leads(n_leads=100, seed=42)


@pytest.fixture
def sample_frame(extractor, sample_leads):
    """Feature frame for the 100 sample leads."""
    return extractor.extract_frame(sample_leads, as_of=SAMPLE_AS_OF)


@pytest.fixture
def engaged_profile(as_of):
    """Complete profile of a senior buyer at a corporate domain."""
    return LeadProfile(
        email="dana@acme.io",
        name="Dana Reyes",
        company="Acme Global Holdings",
        title="VP of Engineering",
        phone="+1-555-0100",
        created_at=as_of - timedelta(days=10),
        timezone="America/New_York",
        total_emails_sent=10,
        total_emails_opened=5,
        total_emails_clicked=2,
        total_website_visits=3,
    )


@pytest.fixture
def burst_activities(as_of):
    """Three weekday business-hours activities within a few hours (UTC)."""
    day = as_of - timedelta(days=1)  # Tuesday
    return [
        ActivityEvent("email_open", day.replace(hour=14)),
        ActivityEvent("page_view", day.replace(hour=15)),
        ActivityEvent("form_submit", day.replace(hour=16)),
    ]


@pytest.fixture
def feature_rows(make_features):
    """Small feature frame with a strong lead, an empty lead and a stale lead."""
    strong = make_features(
        has_company=True,
        has_title=True,
        has_phone=True,
        email_domain_type="corporate",
        title_seniority="c_level",
        company_size_estimate="enterprise",
        meeting_count=2,
        form_submit_count=3,
        recency_score=100.0,
        activity_burst=True,
        email_open_rate=0.8,
        email_click_rate=0.5,
    )
    empty = make_features()
    stale = make_features(
        has_company=True,
        days_since_created=365,
        days_since_last_activity=9999,
    )
    rows = []
    for lead_id, features in [("STRONG", strong), ("EMPTY", empty), ("STALE", stale)]:
        rows.append({"LEAD_ID": lead_id, **features.to_record()})
    return pd.DataFrame(rows)
