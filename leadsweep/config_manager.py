"""
Configuration manager for a sweep run.

Collects credentials, limits and static input (cities, keywords) in one
place. Secrets left unset are resolved from environment variables.
"""

import json
import os
from dataclasses import dataclass, field
from typing import List, Optional

from .config import (
    DEFAULT_CITIES_FILE,
    DEFAULT_KEYWORDS,
    DEFAULT_MAX_RESULTS,
    DEFAULT_SEARCH_RADIUS,
    DEFAULT_GRID_OFFSET,
    DEFAULT_POLICY,
    DELAY_BETWEEN_PAGES,
    NEW_RESULTS_LIMIT,
)
from .exceptions import ConfigurationError
from .geo import City, Coordinate
from .qualification import QualificationPolicy, get_policy


@dataclass
class SweepConfig:
    """Configuration for a sweep run.

    Args:
        google_api_key: Places API key. Falls back to GOOGLE_API_KEY.
        sheets_id: Spreadsheet holding the search log. Falls back to GOOGLE_SHEETS_ID.
        google_credentials: Service account key JSON. Falls back to GOOGLE_CREDENTIALS.
        google_credentials_file: Service account key path. Falls back to GOOGLE_CREDENTIALS_FILE.
        airtable_api_key: Falls back to AIRTABLE_API_KEY.
        airtable_base_id: Falls back to AIRTABLE_BASE_ID.
        airtable_table: Falls back to AIRTABLE_TABLE_NAME.
        policy_name: Qualification preset ("strict-content" or "no-website").
        min_reviews: Override the preset's popularity floor.
        min_rating: Override the preset's rating floor.
        new_results_limit: Admitted leads per (city, point, keyword) bucket.
        max_results: Search hits per query.
        radius: Search radius in meters.
        rank_by_distance: Rank by distance instead of searching a radius.
        grid_offset: Sweep point offset in decimal degrees.
        page_delay: Seconds to wait before each follow-up search page.
        keywords: Search keywords.
        cities_file: JSON file listing the cities to sweep.
        fail_fast: Abort the run on a search error instead of skipping the bucket.
        dry_run: Keep the search log and lead store in memory.
        verbose: Whether to print progress output.
    """

    google_api_key: Optional[str] = None
    sheets_id: Optional[str] = None
    google_credentials: Optional[str] = None
    google_credentials_file: Optional[str] = None
    airtable_api_key: Optional[str] = None
    airtable_base_id: Optional[str] = None
    airtable_table: Optional[str] = None
    policy_name: str = DEFAULT_POLICY
    min_reviews: Optional[int] = None
    min_rating: Optional[float] = None
    new_results_limit: int = NEW_RESULTS_LIMIT
    max_results: int = DEFAULT_MAX_RESULTS
    radius: int = DEFAULT_SEARCH_RADIUS
    rank_by_distance: bool = False
    grid_offset: float = DEFAULT_GRID_OFFSET
    page_delay: float = DELAY_BETWEEN_PAGES
    keywords: List[str] = field(default_factory=lambda: list(DEFAULT_KEYWORDS))
    cities_file: str = DEFAULT_CITIES_FILE
    fail_fast: bool = False
    dry_run: bool = False
    verbose: bool = True

    def __post_init__(self):
        """Resolve unset secrets from env vars."""
        env = os.environ.get
        self.google_api_key = self.google_api_key or env("GOOGLE_API_KEY")
        self.sheets_id = self.sheets_id or env("GOOGLE_SHEETS_ID")
        self.google_credentials = self.google_credentials or env("GOOGLE_CREDENTIALS")
        self.google_credentials_file = self.google_credentials_file or env("GOOGLE_CREDENTIALS_FILE")
        self.airtable_api_key = self.airtable_api_key or env("AIRTABLE_API_KEY")
        self.airtable_base_id = self.airtable_base_id or env("AIRTABLE_BASE_ID")
        self.airtable_table = self.airtable_table or env("AIRTABLE_TABLE_NAME")

    @property
    def policy(self) -> QualificationPolicy:
        return get_policy(self.policy_name, min_reviews=self.min_reviews, min_rating=self.min_rating)

    def validate(self, needs_log: bool = True, needs_store: bool = True):
        """
        Check that everything the run needs is present.

        Args:
            needs_log: Require the Google Sheets settings for the search log
            needs_store: Require the Airtable settings for the lead store

        Raises:
            ConfigurationError: Listing every missing setting
        """
        missing = []
        if not self.google_api_key:
            missing.append("GOOGLE_API_KEY")
        if needs_log and not self.dry_run:
            if not self.sheets_id:
                missing.append("GOOGLE_SHEETS_ID")
            if not (self.google_credentials or self.google_credentials_file):
                missing.append("GOOGLE_CREDENTIALS or GOOGLE_CREDENTIALS_FILE")
        if needs_store and not self.dry_run:
            if not self.airtable_api_key:
                missing.append("AIRTABLE_API_KEY")
            if not self.airtable_base_id:
                missing.append("AIRTABLE_BASE_ID")
            if not self.airtable_table:
                missing.append("AIRTABLE_TABLE_NAME")
        if missing:
            raise ConfigurationError(f"Missing configuration: {', '.join(missing)}")

        if not self.keywords:
            raise ConfigurationError("At least one keyword is required")
        if self.new_results_limit < 1 or self.max_results < 1:
            raise ConfigurationError("new_results_limit and max_results must be positive")
        if self.grid_offset <= 0:
            raise ConfigurationError("grid_offset must be positive")
        # Unknown policy names raise here rather than mid-run.
        self.policy


def load_cities(path: str) -> List[City]:
    """
    Load the cities to sweep.

    The file is a JSON list of {"name": ..., "coords": "lat,lng"} objects.

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read cities file {path}: {e}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Cities file {path} is not valid JSON: {e}")

    if not isinstance(data, list) or not data:
        raise ConfigurationError(f"Cities file {path} must contain a non-empty list")

    cities = []
    for i, entry in enumerate(data):
        if not isinstance(entry, dict) or not entry.get('name') or not entry.get('coords'):
            raise ConfigurationError(f"Cities file {path}: entry {i} needs 'name' and 'coords'")
        cities.append(City(name=entry['name'], center=Coordinate.parse(entry['coords'])))
    return cities
