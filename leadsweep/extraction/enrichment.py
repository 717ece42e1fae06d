"""
Business Enrichment

Fetches place details for search hits.
"""

import logging
from typing import Optional

import httpx

from ..config import (
    PLACES_API_KEY,
    PLACE_DETAILS_URL,
    DETAIL_FIELDS,
    DETAILS_TIMEOUT,
)
from ..models import EnrichedRecord, SearchHit
from ..parsers import extract_place_details

logger = logging.getLogger(__name__)


def fetch_place_details(
    hit: SearchHit,
    api_key: Optional[str] = None,
    client: Optional[httpx.Client] = None,
    timeout: float = DETAILS_TIMEOUT,
) -> EnrichedRecord:
    """
    Fetch detailed information about a place.

    Enrichment failures are not fatal: on any error (network, HTTP status,
    malformed payload, error reported by the service) the empty record for
    the hit is returned and qualification rejects it for missing data.

    Args:
        hit: The search hit to enrich
        api_key: Places API key (defaults to GOOGLE_API_KEY)
        client: Optional httpx client to reuse
        timeout: Request timeout in seconds when no client is given

    Returns:
        EnrichedRecord, or EnrichedRecord.empty(hit) on error
    """
    if api_key is None:
        api_key = PLACES_API_KEY

    params = {
        'place_id': hit.place_id,
        'fields': ','.join(DETAIL_FIELDS),
        'key': api_key,
    }

    try:
        if client is None:
            with httpx.Client(timeout=timeout) as own_client:
                response = own_client.get(PLACE_DETAILS_URL, params=params)
        else:
            response = client.get(PLACE_DETAILS_URL, params=params)

        if response.status_code != 200:
            logger.warning("Place details for %s: HTTP %d", hit.place_id, response.status_code)
            return EnrichedRecord.empty(hit)

        record = extract_place_details(response.json(), hit)
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Place details for %s failed: %s", hit.place_id, e)
        return EnrichedRecord.empty(hit)

    if record is None:
        logger.warning("Place details for %s: no usable result", hit.place_id)
        return EnrichedRecord.empty(hit)
    return record
