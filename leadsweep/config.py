"""
Default configuration for leadsweep.

Module-level constants used across the package. Secrets are read from the
environment; everything else can be overridden per run through SweepConfig.
"""

import os

# Google Places API
PLACES_API_KEY = os.environ.get("GOOGLE_API_KEY", "")
TEXT_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/textsearch/json"
PLACE_DETAILS_URL = "https://maps.googleapis.com/maps/api/place/details/json"
CONTACT_PROFILE_URL_TEMPLATE = "https://www.google.com/maps/place/?q=place_id:{place_id}"
PLATFORM_NAME = "Google Maps"

DETAIL_FIELDS = [
    "name",
    "formatted_address",
    "website",
    "formatted_phone_number",
    "user_ratings_total",
    "rating",
    "business_status",
]

# Search Parameters
DEFAULT_SEARCH_RADIUS = 5000
DEFAULT_MAX_RESULTS = 60
DEFAULT_GRID_OFFSET = 0.03  # ~3 km

# Rate Limiting (seconds)
# A next_page_token is not valid until a short while after it is issued.
DELAY_BETWEEN_PAGES = 2.0

# Timeouts (seconds)
SEARCH_TIMEOUT = 30.0
DETAILS_TIMEOUT = 30.0
WEBSITE_FETCH_TIMEOUT = 5.0
STORAGE_TIMEOUT = 30.0

# Qualification
DEFAULT_POLICY = os.environ.get("LEADSWEEP_POLICY", "no-website")
NEW_RESULTS_LIMIT = 20
MIN_WEBSITE_BYTES = 2000

FREE_PLATFORM_DOMAINS = [
    "wixsite.com",
    "weebly.com",
    "wordpress.com",
    "squarespace.com",
    "godaddysites.com",
    "business.site",
]

SOCIAL_PROFILE_DOMAINS = [
    "facebook.com",
    "instagram.com",
    "linktr.ee",
    "tiktok.com",
    "yelp.com",
]

# Static input
DEFAULT_CITIES_FILE = os.environ.get("LEADSWEEP_CITIES_FILE", "cities.json")
DEFAULT_KEYWORDS = [
    "med spa",
    "aesthetic clinic",
    "laser hair removal",
]

# Search Log (Google Sheets)
SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
SEARCH_LOG_ID_RANGE = "'Search Log'!D:D"
SEARCH_LOG_APPEND_RANGE = "'Search Log'!A:D"

# Lead Store (Airtable)
AIRTABLE_API_URL = "https://api.airtable.com/v0"

# Lead field -> Airtable column
AIRTABLE_FIELDS = {
    "lead_name": "Lead Name",
    "contact_profile_url": "Contact Profile URL",
    "platform": "Platform",
    "business_name": "Business Name",
    "business_url": "Business URL",
    "city_state": "City/State",
    "business_number": "Business Number",
    "website_quality": "Quality of Website",
}

# Logging
LOG_LEVEL = os.environ.get("LEADSWEEP_LOG_LEVEL", "INFO")
