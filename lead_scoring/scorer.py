"""
Main LeadScorer class - orchestrates weighted scoring components.

Usage:
    from lead_scoring import LeadScorer, ScoringConfig

    # With default config
    scorer = LeadScorer()
    result = scorer.score(features)          # one LeadFeatures snapshot
    print(result.score, result.level)
    print(result.explain())

    # With a tenant-specific weight table
    weights = FeatureWeights().with_overrides({"temporal.activity_burst": 12})
    scorer = LeadScorer(ScoringConfig(weights=weights))

    # Batch scoring of a feature frame
    batch = scorer.score_frame(df)
    print(batch.df[["LEAD_ID", "LEAD_SCORE", "SCORE_LEVEL", "PRIORITY_RANK"]])
    print(batch.summary())
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from .components import (
    BehavioralScorer,
    DemographicScorer,
    EngagementScorer,
    TemporalScorer,
)
from .config import DEFAULT_CONFIG, ScoringConfig
from .extraction import LeadFeatureExtractor
from .features import LeadFeatures, weighted_feature_specs
from .inputs import ActivityEvent, LeadProfile, LeadRecord, SequenceEngagement
from .insights import LeadInsights, Recommendation, RiskFactor
from .schemas import FEATURE_FRAME_SCHEMA

CONTRIBUTION_SUFFIX = "_contribution"


@dataclass
class ScoreResult:
    """
    Score for one lead with its explanation.

    Attributes:
        score: Normalized score in [0, 100]
        raw_score: Sum of all contributions before rescaling
        level: Score level name (HOT/WARM/COLD/DEAD by default)
        breakdown: feature name -> contribution to the raw score
        priority_tier: Call-list tier (top/high/medium/low by default)
        confidence: How much evidence the score rests on (0.5-0.95)
        reasoning: One-line reason for the lead's place in the call list
        risk_factors: Signals behind the score, positive ones first
        recommendations: Next actions, most pressing first
    """

    score: float
    raw_score: float
    level: str
    breakdown: dict[str, float] = field(default_factory=dict)
    priority_tier: str = ""
    confidence: float = 0.0
    reasoning: str = ""
    risk_factors: list[RiskFactor] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)

    def top_contributors(self, n: int = 3, positive: bool = True) -> list[tuple[str, float]]:
        """
        Strongest positive (or negative) contributions.

        Args:
            n: Number of features to return
            positive: Rank gains if True, penalties if False

        Returns:
            List of (feature, contribution), strongest first
        """
        items = [
            (name, value)
            for name, value in self.breakdown.items()
            if (value > 0 if positive else value < 0)
        ]
        items.sort(key=lambda item: abs(item[1]), reverse=True)
        return items[:n]

    def category_totals(self) -> dict[str, float]:
        """Contribution subtotal per feature category."""
        totals: dict[str, float] = {}
        for spec in weighted_feature_specs():
            totals[spec.category] = totals.get(spec.category, 0.0) + self.breakdown.get(
                spec.name, 0.0
            )
        return totals

    def explain(self) -> str:
        """One-paragraph, human-readable explanation of the score."""
        text = f"Lead score of {self.score:.0f} ({self.level})."
        gains = self.top_contributors(3)
        if gains:
            text += " Strongest signals: " + ", ".join(
                f"{name.replace('_', ' ')} (+{value:.1f})" for name, value in gains
            ) + "."
        penalties = self.top_contributors(2, positive=False)
        if penalties:
            text += " Holding it back: " + ", ".join(
                f"{name.replace('_', ' ')} ({value:.1f})" for name, value in penalties
            ) + "."
        if self.recommendations:
            text += f" Next step: {self.recommendations[0].action}."
        return text


@dataclass
class BatchScoringResult:
    """
    Container for batch scoring results with contribution breakdown.

    Attributes:
        df: Input frame with scores and contributions added
        contribution_columns: Names of the per-feature contribution columns
        level_order: Score level names from lowest to highest
    """

    df: pd.DataFrame
    contribution_columns: list[str]
    level_order: list[str]

    def get_top_leads(self, min_level: str = "WARM") -> pd.DataFrame:
        """
        Get leads at or above a score level, best first.

        Args:
            min_level: Minimum score level (e.g. "COLD", "WARM", "HOT")

        Returns:
            DataFrame filtered to leads at or above the level, by rank
        """
        min_idx = self.level_order.index(min_level)
        valid_levels = self.level_order[min_idx:]
        top = self.df[self.df["SCORE_LEVEL"].isin(valid_levels)]
        return top.sort_values("PRIORITY_RANK")

    def ranked(self) -> pd.DataFrame:
        """All leads ordered by priority rank (1 = call first)."""
        return self.df.sort_values("PRIORITY_RANK")

    def summary(self) -> pd.DataFrame:
        """
        Generate summary statistics by score level.

        Returns:
            DataFrame with counts and average scores per level
        """
        return (
            self.df.groupby("SCORE_LEVEL")
            .agg(
                count=("LEAD_SCORE", "count"),
                avg_score=("LEAD_SCORE", "mean"),
            )
            .reindex([lvl for lvl in reversed(self.level_order)])
            .dropna(how="all")
            .round(1)
        )

    def category_breakdown(self) -> pd.DataFrame:
        """
        Show average contribution of each feature category.

        Returns:
            DataFrame with mean/min/max per category
        """
        stats = {}
        specs = weighted_feature_specs()
        for category in dict.fromkeys(s.category for s in specs):
            columns = [
                f"{s.name}{CONTRIBUTION_SUFFIX}" for s in specs if s.category == category
            ]
            subtotal = self.df[columns].sum(axis=1)
            stats[category] = {
                "mean": subtotal.mean(),
                "max": subtotal.max(),
                "min": subtotal.min(),
            }
        return pd.DataFrame(stats).T.round(1)


class LeadScorer:
    """
    Vectorized, feature-weighted lead scoring engine.

    Calculates per-feature contributions independently using pandas
    operations, sums them into a raw score, then rescales the raw score to
    0-100 using the minimum and maximum the weight table can produce.

    Components:
    - Demographic: profile completeness, email domain, seniority, size
    - Behavioral: activity counts, velocity, channel diversity
    - Temporal: recency, bursts, stale-lead penalties, timing patterns
    - Engagement: email rates, sequence progress, response time

    Text features are never weighted.
    """

    REQUIRED_COLUMNS = [spec.name for spec in weighted_feature_specs()]

    def __init__(
        self,
        config: Optional[ScoringConfig] = None,
        extractor: Optional[LeadFeatureExtractor] = None,
    ):
        """
        Initialize scorer with configuration.

        Args:
            config: ScoringConfig instance. Uses DEFAULT_CONFIG if None.
            extractor: Extractor used by score_lead/score_records. Built
                from the same config if None.
        """
        self.config = config or DEFAULT_CONFIG
        self.extractor = extractor or LeadFeatureExtractor(self.config)
        self.insights = LeadInsights(self.config)
        self._init_components()

    def _init_components(self) -> None:
        """Initialize all scoring components."""
        weights = self.config.weights
        self.components = {
            "demographic": DemographicScorer(weights),
            "behavioral": BehavioralScorer(weights),
            "temporal": TemporalScorer(weights),
            "engagement": EngagementScorer(weights),
        }

    def validate_input(self, df: pd.DataFrame) -> None:
        """
        Validate required feature columns exist.

        Args:
            df: Input DataFrame

        Raises:
            ValueError: If required columns are missing
        """
        missing = set(self.REQUIRED_COLUMNS) - set(df.columns)
        if missing:
            raise ValueError(f"Missing required columns: {sorted(missing)}")

    def score_frame(self, df: pd.DataFrame) -> BatchScoringResult:
        """
        Calculate lead scores for all rows of a feature frame.

        Args:
            df: DataFrame with one column per weighted feature, as produced
                by LeadFeatureExtractor.extract_frame

        Returns:
            BatchScoringResult with scores, levels, ranks and contributions

        Raises:
            ValueError: If feature columns are missing
            pandera.errors.SchemaError: If feature values are invalid

        Example:
            >>> scorer = LeadScorer()
            >>> batch = scorer.score_frame(feature_df)
            >>> hot = batch.get_top_leads("HOT")
        """
        self.validate_input(df)
        result = FEATURE_FRAME_SCHEMA.validate(df.copy())

        contributions = pd.concat(
            [component.contributions(result) for component in self.components.values()],
            axis=1,
        )
        contribution_cols = list(contributions.columns)
        result = result.assign(**{col: contributions[col] for col in contribution_cols})

        low, high = self.config.weights.raw_bounds()
        raw = contributions.sum(axis=1).astype(float)
        result["RAW_SCORE"] = raw
        result["LEAD_SCORE"] = ((raw - low) / (high - low) * 100).clip(0, 100)

        result["SCORE_LEVEL"] = [
            self.config.get_score_level(score) for score in result["LEAD_SCORE"]
        ]
        result["PRIORITY_RANK"] = (
            result["LEAD_SCORE"].rank(ascending=False, method="first").astype(int)
        )
        result["PRIORITY_TIER"] = [
            self.config.get_priority_tier(score) for score in result["LEAD_SCORE"]
        ]

        return BatchScoringResult(
            df=result,
            contribution_columns=contribution_cols,
            level_order=self.config.level_names,
        )

    def score(self, features: LeadFeatures) -> ScoreResult:
        """
        Score a single lead (pure: same features and weights, same result).

        Args:
            features: LeadFeatures snapshot

        Returns:
            ScoreResult with score, level and per-feature breakdown
        """
        batch = self.score_frame(pd.DataFrame([features.to_record()]))
        row = batch.df.iloc[0]
        score = float(row["LEAD_SCORE"])
        return ScoreResult(
            score=score,
            raw_score=float(row["RAW_SCORE"]),
            level=row["SCORE_LEVEL"],
            breakdown={
                col[: -len(CONTRIBUTION_SUFFIX)]: float(row[col])
                for col in batch.contribution_columns
            },
            priority_tier=row["PRIORITY_TIER"],
            confidence=self.insights.confidence(features),
            reasoning=self.insights.reasoning(features, score),
            risk_factors=self.insights.risk_factors(features),
            recommendations=self.insights.recommendations(features, score),
        )

    def score_lead(
        self,
        profile=None,
        activities=(),
        sequence=None,
        as_of: Optional[datetime] = None,
    ) -> ScoreResult:
        """
        Extract features from raw inputs and score them (convenience method).

        Arguments are passed to LeadFeatureExtractor.extract.
        """
        features = self.extractor.extract(profile, activities, sequence, as_of=as_of)
        return self.score(features)

    def score_records(
        self, records: Iterable[LeadRecord], as_of: Optional[datetime] = None
    ) -> BatchScoringResult:
        """Extract and score many LeadRecords at once."""
        return self.score_frame(self.extractor.extract_frame(records, as_of=as_of))


# Fixed reference time so generated data is reproducible
SAMPLE_AS_OF = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

_SAMPLE_TITLES = [
    ("CEO", 0.9),
    ("Chief Revenue Officer", 0.85),
    ("VP of Marketing", 0.75),
    ("Director of IT", 0.6),
    ("Engineering Manager", 0.45),
    ("Software Engineer", 0.3),
    ("Marketing Analyst", 0.25),
    (None, 0.15),
]
_SAMPLE_COMPANIES = [
    "Acme Global Holdings",
    "Northwind Consulting LLC",
    "Brightpath",
    "Summit Analytics Group",
    "Globex International",
    "Tiny Labs",
    None,
]
_SAMPLE_DOMAINS = ["acme.io", "northwind.com", "gmail.com", "yahoo.com", "mit.edu", "irs.gov"]
_SAMPLE_ACTIVITY_TYPES = ["email_open", "email_click", "page_view", "form_submit", "meeting", "call"]


def generate_sample_leads(
    n_leads: int = 100, seed: int = 42, as_of: datetime = SAMPLE_AS_OF
) -> list[LeadRecord]:
    """
    Generate realistic sample leads with known outcomes.

    Each lead draws a latent buying intent. Intent drives title seniority,
    activity volume, email engagement, recency and the conversion outcome,
    so higher-scoring leads convert more often without scoring being
    perfect.
    """
    rng = np.random.RandomState(seed)
    records = []

    for i in range(n_leads):
        title, seniority = _SAMPLE_TITLES[rng.randint(len(_SAMPLE_TITLES))]
        intent = float(np.clip(0.6 * rng.beta(2, 4) + 0.4 * seniority, 0, 1))

        created_at = as_of - timedelta(days=int(rng.randint(1, 180)))
        age_hours = (as_of - created_at).total_seconds() / 3600
        # Engaged leads were active more recently
        last_seen_hours = age_hours * rng.uniform(0, 1 - 0.8 * intent)

        activities = []
        for _ in range(rng.poisson(1 + 14 * intent)):
            kind = rng.choice(
                _SAMPLE_ACTIVITY_TYPES, p=[0.35, 0.15, 0.3, 0.08, 0.06, 0.06]
            )
            hours_ago = rng.uniform(last_seen_hours, age_hours)
            activities.append(
                ActivityEvent(str(kind), as_of - timedelta(hours=float(hours_ago)))
            )

        sent = int(rng.randint(0, 13))
        opened = int(rng.binomial(sent, 0.15 + 0.6 * intent))
        clicked = int(rng.binomial(opened, 0.1 + 0.5 * intent))

        sequence = None
        if rng.random_sample() < 0.5:
            total_steps = 5
            completed = int(rng.binomial(total_steps, intent))
            sequence = SequenceEngagement(
                is_active=bool(rng.random_sample() < 0.7),
                steps_completed=completed,
                total_steps=total_steps,
                current_step=min(completed + 1, total_steps),
                avg_response_hours=round(float(rng.exponential(48 * (1 - intent) + 2)), 1),
            )

        company = _SAMPLE_COMPANIES[rng.randint(len(_SAMPLE_COMPANIES))]
        domain = _SAMPLE_DOMAINS[rng.randint(len(_SAMPLE_DOMAINS))]
        profile = LeadProfile(
            email=f"lead{i}@{domain}",
            name=f"Lead {i}",
            company=company,
            title=title,
            phone="+1-555-0100" if rng.random_sample() < 0.3 + 0.5 * intent else None,
            created_at=created_at,
            timezone="America/New_York" if rng.random_sample() < 0.6 else None,
            total_emails_sent=sent,
            total_emails_opened=opened,
            total_emails_clicked=clicked,
            total_website_visits=int(rng.poisson(6 * intent)),
        )

        converted = bool(rng.random_sample() < 0.05 + 0.7 * intent**2)
        records.append(
            LeadRecord(
                lead_id=f"LEAD_{i:04d}",
                profile=profile,
                activities=tuple(sorted(activities, key=lambda a: a.occurred_at)),
                sequence=sequence,
                converted=converted,
            )
        )

    return records
