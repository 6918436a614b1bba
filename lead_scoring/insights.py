"""
Rule-based insights for a scored lead.

The weighted score says how good a lead is; these rules say why and what
to do next. Each rule reads the LeadFeatures snapshot (and the score where
the action depends on it):

- risk_factors: positive and negative signals a rep should know about
- recommendations: next actions, most pressing first
- confidence: how much data the score rests on (0.5 to 0.95)
- reasoning: one line for a ranked call list

Usage:
    insights = LeadInsights(config)
    for factor in insights.risk_factors(features):
        print(factor.factor, factor.impact)
"""

from dataclasses import dataclass
from typing import Optional

from .config import DEFAULT_CONFIG, ScoringConfig
from .features import EmailDomainType, LeadFeatures, TitleSeniority

MAX_RISK_FACTORS = 6
MAX_RECOMMENDATIONS = 5

BASE_CONFIDENCE = 0.5
MAX_CONFIDENCE = 0.95

DECISION_MAKERS = (TitleSeniority.C_LEVEL, TitleSeniority.VP)


@dataclass(frozen=True)
class RiskFactor:
    """A signal that moves a lead's conversion odds up or down."""

    factor: str
    impact: str  # high, medium, low
    current_value: str
    trend: str  # improving, stable, declining
    description: str


@dataclass(frozen=True)
class Recommendation:
    """A suggested next action for the lead owner."""

    priority: str  # urgent, high, medium, low
    action: str
    rationale: str
    expected_impact: str
    timeframe: str


class LeadInsights:
    """Explanations and next actions derived from lead features."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def _never_active(self, features: LeadFeatures) -> bool:
        return features.temporal.days_since_last_activity >= self.config.no_activity_days

    def _stale_days(self, features: LeadFeatures) -> Optional[int]:
        """Days since last activity if the lead has gone stale, else None."""
        days = features.temporal.days_since_last_activity
        if self._never_active(features) or days <= self.config.stale_after_days:
            return None
        return days

    def _stale_priority(self, days: int) -> str:
        return "high" if days > self.config.very_stale_after_days else "medium"

    def risk_factors(self, features: LeadFeatures) -> list[RiskFactor]:
        """
        Signals behind the score, positive ones first.

        Returns:
            At most MAX_RISK_FACTORS factors
        """
        demographic = features.demographic
        behavioral = features.behavioral
        seniority = TitleSeniority(demographic.title_seniority)
        factors = []

        if seniority in DECISION_MAKERS:
            factors.append(RiskFactor(
                factor="Decision Maker",
                impact="high",
                current_value=seniority.value.replace("_", "-").upper(),
                trend="stable",
                description="Lead has decision-making authority based on title seniority",
            ))

        if behavioral.high_value_action_count > 0:
            factors.append(RiskFactor(
                factor="High-Value Engagement",
                impact="high",
                current_value=str(behavioral.high_value_action_count),
                trend="improving" if features.temporal.recency_score > 50 else "stable",
                description=(
                    f"{behavioral.high_value_action_count} high-value actions "
                    "(form submissions, meetings, clicks)"
                ),
            ))

        click_rate = features.engagement.email_click_rate
        if click_rate > 0.1:
            factors.append(RiskFactor(
                factor="Email Engagement",
                impact="medium",
                current_value=f"{click_rate * 100:.1f}%",
                trend="stable",
                description="Strong email click-through rate indicates active interest",
            ))

        if features.temporal.activity_burst:
            factors.append(RiskFactor(
                factor="Activity Burst",
                impact="high",
                current_value="Yes",
                trend="improving",
                description="Multiple activities in 24-hour period shows heightened interest",
            ))

        stale_days = self._stale_days(features)
        if stale_days is not None:
            factors.append(RiskFactor(
                factor="Stale Lead",
                impact=self._stale_priority(stale_days),
                current_value=f"{stale_days} days",
                trend="declining",
                description=f"No activity in {stale_days} days indicates cooling interest",
            ))

        if EmailDomainType(demographic.email_domain_type) == EmailDomainType.FREE:
            factors.append(RiskFactor(
                factor="Personal Email",
                impact="medium",
                current_value="Free email provider",
                trend="stable",
                description="Personal email addresses have lower B2B conversion rates",
            ))

        if not demographic.has_company:
            factors.append(RiskFactor(
                factor="Unknown Company",
                impact="medium",
                current_value="Not provided",
                trend="stable",
                description="No company information limits qualification ability",
            ))

        if behavioral.total_activities == 0:
            factors.append(RiskFactor(
                factor="No Engagement",
                impact="high",
                current_value="0 activities",
                trend="stable",
                description="Lead has not engaged with any content or emails",
            ))

        return factors[:MAX_RISK_FACTORS]

    def recommendations(self, features: LeadFeatures, score: float) -> list[Recommendation]:
        """
        Next actions for the lead owner.

        Args:
            features: LeadFeatures snapshot
            score: The lead's 0-100 score

        Returns:
            At most MAX_RECOMMENDATIONS recommendations
        """
        demographic = features.demographic
        behavioral = features.behavioral
        tiers = self.config.priority_tiers
        recommendations = []

        if score >= tiers[0][1]:
            recommendations.append(Recommendation(
                priority="urgent",
                action="Schedule a demo or discovery call",
                rationale="Lead shows strong buying signals and high engagement",
                expected_impact="Move lead to pipeline within 1 week",
                timeframe="Within 24 hours",
            ))

        stale_days = self._stale_days(features)
        if stale_days is not None:
            recommendations.append(Recommendation(
                priority=self._stale_priority(stale_days),
                action="Send re-engagement email with new value proposition",
                rationale=f"Lead has been inactive for {stale_days} days",
                expected_impact="Rekindle interest and trigger engagement",
                timeframe="This week",
            ))

        if not demographic.has_company:
            recommendations.append(Recommendation(
                priority="medium",
                action="Research lead to identify company and qualify",
                rationale="Company information is missing, limiting qualification",
                expected_impact="Better targeting and personalization",
                timeframe="Before next outreach",
            ))

        # Below the second tier the lead still needs warming up
        nurture_below = tiers[1][1] if len(tiers) > 1 else tiers[0][1]
        if not features.engagement.is_in_active_sequence and score < nurture_below:
            recommendations.append(Recommendation(
                priority="medium",
                action="Enroll in nurture sequence",
                rationale="Lead needs consistent touchpoints to build engagement",
                expected_impact="Automated nurturing to warm up lead",
                timeframe="This week",
            ))

        if features.engagement.email_open_rate < 0.2 and behavioral.total_activities < 3:
            recommendations.append(Recommendation(
                priority="low",
                action="Try different email subject lines or content format",
                rationale="Current emails are not resonating with this lead",
                expected_impact="Improved open and click rates",
                timeframe="Next email campaign",
            ))

        if (
            demographic.has_company
            and demographic.title_seniority != TitleSeniority.UNKNOWN
            and behavioral.total_activities < 2
        ):
            recommendations.append(Recommendation(
                priority="high",
                action="Direct outreach via LinkedIn or phone",
                rationale="Good profile match but email engagement is low",
                expected_impact="Personal touch may be more effective",
                timeframe="Within 48 hours",
            ))

        return recommendations[:MAX_RECOMMENDATIONS]

    def confidence(self, features: LeadFeatures) -> float:
        """
        How much evidence the score rests on.

        More activity, a complete profile and recent activity all raise it.
        """
        confidence = BASE_CONFIDENCE

        activities = features.behavioral.total_activities
        if activities > 10:
            confidence += 0.15
        elif activities > 5:
            confidence += 0.1
        elif activities > 0:
            confidence += 0.05

        if features.demographic.has_company:
            confidence += 0.05
        if features.demographic.has_title:
            confidence += 0.05
        if features.demographic.has_phone:
            confidence += 0.03

        days = features.temporal.days_since_last_activity
        if days < 7:
            confidence += 0.1
        elif days < self.config.stale_after_days:
            confidence += 0.05

        return round(min(MAX_CONFIDENCE, confidence), 2)

    def reasoning(self, features: LeadFeatures, score: float) -> str:
        """One-line reason for the lead's place in the call list."""
        reasons = []

        days = features.temporal.days_since_last_activity
        if days < 7:
            reasons.append("recent activity")
        elif self._never_active(features):
            reasons.append("no activity yet")
        elif days > self.config.stale_after_days:
            reasons.append("needs re-engagement")

        if features.engagement.email_open_rate > 0.3:
            reasons.append("strong email engagement")

        if features.behavioral.total_activities > 10:
            reasons.append("highly active")

        levels = self.config.score_levels
        level = self.config.get_score_level(score)
        if level == levels[0][0]:
            reasons.append(f"high score ({level})")
        elif len(levels) > 2 and level == levels[1][0]:
            reasons.append(f"{level.lower()} prospect")

        if features.demographic.has_company:
            reasons.append("company identified")

        if not reasons:
            return "Standard lead requiring nurturing"
        text = ", ".join(reasons)
        return text[0].upper() + text[1:]
