"""Demographic feature extraction."""

import re
from typing import Optional

from ..features import (
    CompanySizeEstimate,
    DemographicFeatures,
    EmailDomainType,
    TitleSeniority,
)
from .base import BaseExtractor, ExtractionContext

EDU_DOMAIN_PATTERN = re.compile(r"\.edu$", re.IGNORECASE)
GOV_DOMAIN_PATTERN = re.compile(r"\.gov$", re.IGNORECASE)

# Checked in order, first match wins
SENIORITY_TIERS = [
    (
        TitleSeniority.C_LEVEL,
        re.compile(
            r"\b(ceo|cto|cfo|cio|coo|cmo|chief|founder)\b|(?<!vice )\bpresident\b",
            re.I,
        ),
    ),
    (TitleSeniority.VP, re.compile(r"\b(vp|vice president|svp|evp)\b", re.I)),
    (TitleSeniority.DIRECTOR, re.compile(r"\b(director|head of)\b", re.I)),
    (
        TitleSeniority.MANAGER,
        re.compile(r"\b(manager|lead|supervisor|team lead)\b", re.I),
    ),
]

ENTERPRISE_KEYWORDS = re.compile(
    r"\b(enterprise|corporation|inc\.|corp\.|holdings|international|global)(?!\w)",
    re.IGNORECASE,
)
SMB_KEYWORDS = re.compile(r"\b(llc|studio|shop|consulting|freelance|solo)\b", re.I)


def _present(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def email_domain(email: Optional[str]) -> Optional[str]:
    """Lowercased domain part of an address, or None if unparseable."""
    if not email or email.count("@") != 1:
        return None
    local, domain = email.strip().split("@")
    domain = domain.strip().lower()
    if not local or not domain:
        return None
    return domain


def classify_email_domain(
    email: Optional[str], free_domains: frozenset
) -> EmailDomainType:
    """
    Classify an email address by its domain.

    Examples:
        a@gmail.com -> free, a@mit.edu -> edu, a@irs.gov -> government,
        a@acme.io -> corporate, None or "" -> unknown
    """
    domain = email_domain(email)
    if not domain:
        return EmailDomainType.UNKNOWN
    if domain in free_domains:
        return EmailDomainType.FREE
    if EDU_DOMAIN_PATTERN.search(domain):
        return EmailDomainType.EDU
    if GOV_DOMAIN_PATTERN.search(domain):
        return EmailDomainType.GOVERNMENT
    return EmailDomainType.CORPORATE


def classify_title_seniority(title: Optional[str]) -> TitleSeniority:
    """Seniority tier of a job title; individual if no keyword matches."""
    if not _present(title):
        return TitleSeniority.UNKNOWN
    for seniority, pattern in SENIORITY_TIERS:
        if pattern.search(title):
            return seniority
    return TitleSeniority.INDIVIDUAL


def estimate_company_size(company: Optional[str]) -> CompanySizeEstimate:
    """
    Rough company size from the company name.

    Keyword hints win; otherwise longer names lean mid-market and very short
    names lean startup.
    """
    if not _present(company):
        return CompanySizeEstimate.UNKNOWN
    company = company.strip()
    if ENTERPRISE_KEYWORDS.search(company):
        return CompanySizeEstimate.ENTERPRISE
    if SMB_KEYWORDS.search(company):
        return CompanySizeEstimate.SMB
    if len(company) < 10:
        return CompanySizeEstimate.STARTUP
    return CompanySizeEstimate.MID_MARKET


class DemographicExtractor(BaseExtractor):
    """
    Profile completeness and firmographics.

    - has_company / has_title / has_phone: non-blank presence flags
    - email_domain_type: free / edu / government / corporate / unknown
    - title_seniority: c_level > vp > director > manager > individual
    - company_size_estimate: keyword and name-length heuristic
    """

    name = "demographic"

    def extract(self, context: ExtractionContext) -> DemographicFeatures:
        profile = context.profile
        return DemographicFeatures(
            has_company=_present(profile.company),
            has_title=_present(profile.title),
            has_phone=_present(profile.phone),
            email_domain_type=classify_email_domain(
                profile.email, self.config.free_email_domains
            ),
            title_seniority=classify_title_seniority(profile.title),
            company_size_estimate=estimate_company_size(profile.company),
            email_domain=email_domain(profile.email),
        )
