"""
Business records passed between the pipeline stages.

SearchHit -> EnrichedRecord -> Lead
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Optional

from .config import CONTACT_PROFILE_URL_TEMPLATE, PLATFORM_NAME


class OperatingStatus(str, Enum):
    """Business status as reported by the details service"""
    OPERATIONAL = "OPERATIONAL"
    CLOSED_TEMPORARILY = "CLOSED_TEMPORARILY"
    CLOSED_PERMANENTLY = "CLOSED_PERMANENTLY"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "OperatingStatus":
        """Map a raw business_status string, treating anything unrecognised as UNKNOWN."""
        if not value:
            return cls.UNKNOWN
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class SearchHit:
    """A raw result from the search service"""
    place_id: str
    name: str
    address: Optional[str] = None


@dataclass(frozen=True)
class EnrichedRecord:
    """
    A search hit resolved into its full attribute set.

    Every optional field is None when the details service omitted it. None
    means unknown, never zero.
    """
    place_id: str
    name: str
    address: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    operating_status: OperatingStatus = OperatingStatus.UNKNOWN

    @classmethod
    def empty(cls, hit: SearchHit) -> "EnrichedRecord":
        """The record used when details could not be fetched."""
        return cls(place_id=hit.place_id, name=hit.name or "Unknown", address=hit.address)


@dataclass(frozen=True)
class Lead:
    """The fields written to the lead store for an admitted business"""
    contact_profile_url: str
    business_name: str
    business_url: str
    city_state: str
    business_number: str
    website_quality: str
    lead_name: str = ""
    platform: str = PLATFORM_NAME

    @classmethod
    def from_record(cls, record: EnrichedRecord, website_quality: str) -> "Lead":
        return cls(
            contact_profile_url=CONTACT_PROFILE_URL_TEMPLATE.format(place_id=record.place_id),
            business_name=record.name,
            business_url=record.website or "",
            city_state=record.address or "",
            business_number=record.phone or "",
            website_quality=website_quality,
        )

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)
