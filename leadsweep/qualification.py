"""
Lead Qualification

Decides whether an enriched business is worth forwarding to the lead store.

Rules run in a fixed order and the first failing rule gives the reason:
    1. activity       - business must be OPERATIONAL
    2. contactability - website or phone present (optional)
    3. popularity     - review count known and above the floor
    4. rating         - rating, when present, above the floor
    5. website        - site must look like it needs a better web presence

Two website rules exist. STRICT_CONTENT admits businesses with no site or
a low-quality one (plain http, free site-builder hosting, thin or unreachable
page). NO_WEBSITE_ONLY admits only businesses with no site of their own,
where a social profile counts as no site.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

import httpx

from .config import (
    FREE_PLATFORM_DOMAINS,
    SOCIAL_PROFILE_DOMAINS,
    MIN_WEBSITE_BYTES,
    WEBSITE_FETCH_TIMEOUT,
)
from .exceptions import ConfigurationError
from .models import EnrichedRecord, OperatingStatus

logger = logging.getLogger(__name__)

NO_WEBSITE = "No Website"
LOW_QUALITY = "Low Quality"
GOOD_WEBSITE = "Good Website"
HAS_WEBSITE = "Has Website"

PageFetcher = Callable[[str], bytes]


class WebsiteRule(str, Enum):
    STRICT_CONTENT = "strict-content"
    NO_WEBSITE_ONLY = "no-website"


@dataclass(frozen=True)
class QualificationPolicy:
    """One coherent set of admission rules, chosen once per run."""
    activity_required: bool = True
    allow_unknown_status: bool = False
    contact_required: bool = False
    min_reviews: int = 20
    min_rating: float = 3.0
    website_rule: WebsiteRule = WebsiteRule.NO_WEBSITE_ONLY
    min_website_bytes: int = MIN_WEBSITE_BYTES


@dataclass(frozen=True)
class Verdict:
    admit: bool
    reason: str
    website_quality: str = ""


STRICT_CONTENT_POLICY = QualificationPolicy(
    allow_unknown_status=True,
    min_reviews=5,
    min_rating=3.0,
    website_rule=WebsiteRule.STRICT_CONTENT,
)

NO_WEBSITE_POLICY = QualificationPolicy(
    min_reviews=20,
    min_rating=3.0,
    website_rule=WebsiteRule.NO_WEBSITE_ONLY,
)

POLICIES: Dict[str, QualificationPolicy] = {
    WebsiteRule.STRICT_CONTENT.value: STRICT_CONTENT_POLICY,
    WebsiteRule.NO_WEBSITE_ONLY.value: NO_WEBSITE_POLICY,
}


def get_policy(name: str, **overrides) -> QualificationPolicy:
    """
    Look up a policy preset by name, optionally overriding fields.

    Raises:
        ConfigurationError: If the name is unknown
    """
    try:
        policy = POLICIES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown policy {name!r}; choose one of: {', '.join(sorted(POLICIES))}"
        )
    overrides = {k: v for k, v in overrides.items() if v is not None}
    return replace(policy, **overrides) if overrides else policy


def fetch_page(url: str, timeout: float = WEBSITE_FETCH_TIMEOUT) -> bytes:
    """Fetch a page body. Raises on transport errors and non-2xx responses."""
    response = httpx.get(url, timeout=timeout, follow_redirects=True)
    response.raise_for_status()
    return response.content


def _matches_domain(url: str, domains) -> Optional[str]:
    lowered = url.lower()
    for domain in domains:
        if domain in lowered:
            return domain
    return None


def classify_website_strict(
    url: Optional[str],
    fetcher: PageFetcher = fetch_page,
    min_bytes: int = MIN_WEBSITE_BYTES,
) -> Tuple[str, str]:
    """
    Classify a website for the STRICT_CONTENT rule.

    Only a secure site that is not on a free platform is fetched. A failed
    fetch counts as low quality, since an unreachable site is itself a
    quality signal.

    Returns:
        (quality tag, short explanation)
    """
    if not url:
        return NO_WEBSITE, "no website"
    if not url.lower().startswith("https://"):
        return LOW_QUALITY, "not served over https"

    platform = _matches_domain(url, FREE_PLATFORM_DOMAINS)
    if platform:
        return LOW_QUALITY, f"hosted on {platform}"

    try:
        body = fetcher(url)
    except Exception as e:
        logger.debug("Website fetch failed for %s: %s", url, e)
        return LOW_QUALITY, "unreachable"

    if not body or len(body) < min_bytes:
        return LOW_QUALITY, f"thin page ({len(body or b'')} bytes)"
    return GOOD_WEBSITE, "good website"


def classify_website_presence(url: Optional[str]) -> Tuple[str, str]:
    """Classify a website for the NO_WEBSITE_ONLY rule."""
    if not url:
        return NO_WEBSITE, "no website"
    social = _matches_domain(url, SOCIAL_PROFILE_DOMAINS)
    if social:
        return NO_WEBSITE, f"only a {social} profile"
    return HAS_WEBSITE, "has website"


def qualify(
    record: EnrichedRecord,
    policy: QualificationPolicy = NO_WEBSITE_POLICY,
    fetcher: Optional[PageFetcher] = None,
) -> Verdict:
    """
    Decide whether a record should become a lead.

    Never raises. Missing data fails closed except where a rule says
    otherwise (an absent rating, and UNKNOWN status when the policy allows it).

    Args:
        record: The enriched business
        policy: Admission rules to apply
        fetcher: Page fetcher for the STRICT_CONTENT live check

    Returns:
        Verdict with the admit decision, the reason and the website quality tag
    """
    status = record.operating_status
    if policy.activity_required and status != OperatingStatus.OPERATIONAL:
        if not (status == OperatingStatus.UNKNOWN and policy.allow_unknown_status):
            return Verdict(False, f"inactive ({status.value.lower()})")

    if policy.contact_required and not record.website and not record.phone:
        return Verdict(False, "no website or phone")

    if record.review_count is None:
        return Verdict(False, "review count unknown")
    if record.review_count < policy.min_reviews:
        return Verdict(False, f"too few reviews ({record.review_count} < {policy.min_reviews})")

    if record.rating is not None and record.rating < policy.min_rating:
        return Verdict(False, f"low rating ({record.rating} < {policy.min_rating})")

    if policy.website_rule == WebsiteRule.STRICT_CONTENT:
        quality, detail = classify_website_strict(
            record.website, fetcher or fetch_page, policy.min_website_bytes
        )
        admit = quality in (NO_WEBSITE, LOW_QUALITY)
    else:
        quality, detail = classify_website_presence(record.website)
        admit = quality == NO_WEBSITE

    return Verdict(admit, detail, quality)
