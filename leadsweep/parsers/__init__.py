"""
Parsers module for Google Places API responses.

- places.py: Validate Text Search and Place Details payloads
"""

from .places import parse_text_search, extract_hits, extract_place_details, response_error
