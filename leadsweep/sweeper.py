"""
LeadSweeper - High-level API for a lead sweep.

Wires the search client, enrichment, search log and lead store together
from a SweepConfig and runs the collector.

Usage:
    from leadsweep import LeadSweeper, SweepConfig

    with LeadSweeper(SweepConfig(policy_name="no-website")) as sweeper:
        result = sweeper.run()
        print(f"Admitted {result.total_admitted} leads")
"""

import functools
from typing import List, Optional

import httpx

from .config import SEARCH_TIMEOUT
from .config_manager import SweepConfig, load_cities
from .extraction.collector import collect_leads, SweepResult
from .extraction.enrichment import fetch_place_details
from .extraction.search import search_places
from .geo import City
from .storage import (
    AirtableLeadStore,
    DedupCache,
    MemoryLeadStore,
    MemorySearchLog,
    SearchLog,
    build_sheets_service,
)


class LeadSweeper:
    """Runs a sweep from a SweepConfig.

    With dry_run set, the search log and lead store are kept in memory and
    only the Places API is called.

    Args:
        config: Run configuration. Validated on construction.
        search_log: Override the search log (anything with
                    read_place_ids() and append()).
        lead_store: Override the lead store (anything with add()).
    """

    def __init__(
        self,
        config: Optional[SweepConfig] = None,
        search_log=None,
        lead_store=None,
    ):
        self.config = config or SweepConfig()
        self.config.validate(needs_log=search_log is None, needs_store=lead_store is None)

        self._client = httpx.Client(timeout=SEARCH_TIMEOUT)
        try:
            self.search_log = search_log or self._build_search_log()
            self.lead_store = lead_store or self._build_lead_store()
        except Exception:
            self._client.close()
            raise
        self.cache = DedupCache(self.search_log.read_place_ids)

    def _build_search_log(self):
        if self.config.dry_run:
            return MemorySearchLog()
        service = build_sheets_service(
            credentials_json=self.config.google_credentials,
            credentials_file=self.config.google_credentials_file,
        )
        return SearchLog(service, self.config.sheets_id)

    def _build_lead_store(self):
        if self.config.dry_run:
            return MemoryLeadStore()
        return AirtableLeadStore(
            self.config.airtable_api_key,
            self.config.airtable_base_id,
            self.config.airtable_table,
            client=self._client,
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self):
        self._client.close()

    def run(self, cities: Optional[List[City]] = None) -> SweepResult:
        """Sweep the given cities, or the cities file from the config."""
        cfg = self.config
        if cities is None:
            cities = load_cities(cfg.cities_file)

        search = functools.partial(
            _search,
            client=self._client,
            api_key=cfg.google_api_key,
            radius=cfg.radius,
            rank_by_distance=cfg.rank_by_distance,
            page_delay=cfg.page_delay,
        )
        enrich = functools.partial(
            fetch_place_details,
            api_key=cfg.google_api_key,
            client=self._client,
        )

        return collect_leads(
            cities,
            cfg.keywords,
            self.cache,
            self.search_log,
            self.lead_store,
            policy=cfg.policy,
            search=search,
            enrich=enrich,
            new_results_limit=cfg.new_results_limit,
            max_results=cfg.max_results,
            grid_offset=cfg.grid_offset,
            fail_fast=cfg.fail_fast,
            verbose=cfg.verbose,
        )


def _search(keyword, coordinate, max_results, **kwargs):
    return search_places(keyword, coordinate, max_results=max_results, **kwargs)
