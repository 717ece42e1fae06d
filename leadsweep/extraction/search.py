"""
Search Execution

Executes paginated Text Search queries against the Google Places API.
"""

import logging
import time
from typing import Callable, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..config import (
    PLACES_API_KEY,
    TEXT_SEARCH_URL,
    DEFAULT_SEARCH_RADIUS,
    DEFAULT_MAX_RESULTS,
    DELAY_BETWEEN_PAGES,
    SEARCH_TIMEOUT,
)
from ..exceptions import SearchServiceError
from ..geo import Coordinate
from ..models import SearchHit
from ..parsers import parse_text_search, extract_hits, response_error

logger = logging.getLogger(__name__)


def build_search_params(
    keyword: str,
    coordinate: Coordinate,
    api_key: str,
    radius: int = DEFAULT_SEARCH_RADIUS,
    rank_by_distance: bool = False,
    page_token: Optional[str] = None,
) -> Dict[str, str]:
    """
    Build query parameters for a Text Search request.

    Args:
        keyword: What to search for (e.g., "med spa")
        coordinate: Center of the search
        api_key: Places API key
        radius: Search radius in meters (ignored when ranking by distance)
        rank_by_distance: Order results by distance instead of prominence
        page_token: Continuation token from the previous page

    Returns:
        Dictionary of query parameters
    """
    params = {
        'query': keyword,
        'location': str(coordinate),
        'key': api_key,
    }
    if rank_by_distance:
        params['rankby'] = 'distance'
    else:
        params['radius'] = str(radius)
    if page_token:
        params['pagetoken'] = page_token
    return params


def fetch_search_page(client: httpx.Client, params: Dict[str, str]):
    """
    Fetch and validate a single page of search results.

    Raises:
        SearchServiceError: On transport failure, HTTP error, malformed
            payload, or an error reported by the service
    """
    try:
        response = client.get(TEXT_SEARCH_URL, params=params)
    except httpx.HTTPError as e:
        raise SearchServiceError(f"Search request failed: {e}")

    if response.status_code != 200:
        raise SearchServiceError(f"API error: {response.status_code} - {response.text[:200]}")

    try:
        page = parse_text_search(response.json())
    except (ValueError, ValidationError) as e:
        raise SearchServiceError(f"Malformed search response: {e}")

    error = response_error(page)
    if error:
        raise SearchServiceError(error, status=page.status)

    return page


def search_places(
    keyword: str,
    coordinate: Coordinate,
    max_results: int = DEFAULT_MAX_RESULTS,
    radius: int = DEFAULT_SEARCH_RADIUS,
    rank_by_distance: bool = False,
    api_key: Optional[str] = None,
    page_delay: float = DELAY_BETWEEN_PAGES,
    client: Optional[httpx.Client] = None,
    sleep: Callable[[float], None] = time.sleep,
    timeout: float = SEARCH_TIMEOUT,
) -> List[SearchHit]:
    """
    Search for places, following continuation tokens.

    Pages are requested until the service stops returning a next_page_token
    or at least max_results hits have been gathered. The service needs a
    moment before a token becomes valid, so every follow-up page waits
    page_delay seconds first. Results are truncated to max_results at the
    end. No retry is performed.

    Args:
        keyword: What to search for
        coordinate: Center of the search
        max_results: Maximum number of hits to return
        radius: Search radius in meters
        rank_by_distance: Order results by distance instead of using a radius
        api_key: Places API key (defaults to GOOGLE_API_KEY)
        page_delay: Seconds to wait before requesting each follow-up page
        client: Optional httpx client to reuse
        sleep: Sleep function used for the page delay
        timeout: Request timeout in seconds when no client is given

    Returns:
        List of SearchHit objects, at most max_results long

    Raises:
        SearchServiceError: If any page fails
    """
    if api_key is None:
        api_key = PLACES_API_KEY

    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=timeout)

    all_hits: List[SearchHit] = []
    page_token = None
    pages = 0

    try:
        while True:
            if page_token:
                sleep(page_delay)

            params = build_search_params(
                keyword, coordinate, api_key, radius, rank_by_distance, page_token
            )
            page = fetch_search_page(client, params)
            pages += 1

            all_hits.extend(extract_hits(page))
            page_token = page.next_page_token

            if not page_token or len(all_hits) >= max_results:
                break
    finally:
        if owns_client:
            client.close()

    logger.debug("Search %r at %s: %d hits over %d pages", keyword, coordinate, len(all_hits), pages)
    return all_hits[:max_results]
