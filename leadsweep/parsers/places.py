"""
Places API Response Parser

Validates Text Search and Place Details payloads and converts them into
SearchHit / EnrichedRecord objects.

Text Search response:
    results[]           = places (place_id, name, formatted_address, ...)
    next_page_token     = continuation token, present when more pages exist
    status              = OK | ZERO_RESULTS | INVALID_REQUEST | ...
    error_message       = present when the request was rejected

Place Details response:
    result              = place fields requested via `fields`
    status, error_message as above
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from ..models import EnrichedRecord, OperatingStatus, SearchHit

OK_STATUSES = ("OK", "ZERO_RESULTS")


# Response Models
class PlaceResult(BaseModel):
    place_id: Optional[str] = None
    name: Optional[str] = None
    formatted_address: Optional[str] = None


class TextSearchResponse(BaseModel):
    results: List[PlaceResult] = []
    next_page_token: Optional[str] = None
    status: Optional[str] = None
    error_message: Optional[str] = None


class PlaceDetails(BaseModel):
    name: Optional[str] = None
    formatted_address: Optional[str] = None
    website: Optional[str] = None
    formatted_phone_number: Optional[str] = None
    user_ratings_total: Optional[int] = None
    rating: Optional[float] = None
    business_status: Optional[str] = None


class PlaceDetailsResponse(BaseModel):
    result: Optional[PlaceDetails] = None
    status: Optional[str] = None
    error_message: Optional[str] = None


def response_error(response: BaseModel) -> Optional[str]:
    """Return the upstream error message for a response, or None if it succeeded."""
    if response.error_message:
        return response.error_message
    if response.status and response.status not in OK_STATUSES:
        return f"status {response.status}"
    return None


def parse_text_search(payload: Dict[str, Any]) -> TextSearchResponse:
    """
    Validate a Text Search payload.

    Raises:
        pydantic.ValidationError: If the payload does not have the expected shape
    """
    return TextSearchResponse.model_validate(payload)


def extract_hits(response: TextSearchResponse) -> List[SearchHit]:
    """Convert search results into hits, dropping results without a place_id."""
    hits = []
    for place in response.results:
        if not place.place_id:
            continue
        hits.append(SearchHit(
            place_id=place.place_id,
            name=place.name or "",
            address=place.formatted_address,
        ))
    return hits


def extract_place_details(payload: Dict[str, Any], hit: SearchHit) -> Optional[EnrichedRecord]:
    """
    Build an EnrichedRecord from a Place Details payload.

    Args:
        payload: Decoded JSON body of the details response
        hit: The search hit the details were requested for

    Returns:
        EnrichedRecord, or None if the payload is malformed or reports an error
    """
    try:
        response = PlaceDetailsResponse.model_validate(payload)
    except ValidationError:
        return None

    if response_error(response) or response.result is None:
        return None

    details = response.result
    return EnrichedRecord(
        place_id=hit.place_id,
        name=details.name or hit.name or "Unknown",
        address=details.formatted_address or hit.address,
        website=details.website or None,
        phone=details.formatted_phone_number or None,
        rating=details.rating,
        review_count=details.user_ratings_total,
        operating_status=OperatingStatus.from_value(details.business_status),
    )
