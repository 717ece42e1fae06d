"""
Lead Collector

Main orchestration module for a sweep. Walks every city, sweep point and
keyword, searches for places, and runs each new place through enrichment,
qualification, the lead store and the search log.

Per place:
    seen before?  -> skip (no enrichment, no logging)
    enrich -> qualify -> add to lead store if admitted
    mark as seen, append to the search log (admitted or not)

Each (city, point, keyword) bucket stops once new_results_limit leads have
been admitted in it. Everything runs sequentially with one request in
flight at a time.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..config import DEFAULT_GRID_OFFSET, DEFAULT_MAX_RESULTS, NEW_RESULTS_LIMIT
from ..exceptions import PersistenceError, SearchServiceError
from ..geo import City, Coordinate, generate_sweep_points
from ..models import EnrichedRecord, Lead, SearchHit
from ..qualification import NO_WEBSITE_POLICY, PageFetcher, QualificationPolicy, qualify
from ..storage import DedupCache
from .enrichment import fetch_place_details
from .search import search_places

logger = logging.getLogger(__name__)

SearchFn = Callable[[str, Coordinate, int], List[SearchHit]]
EnrichFn = Callable[[SearchHit], EnrichedRecord]


@dataclass
class BucketStats:
    """Counts for one (city, sweep point, keyword) bucket."""
    city: str
    point: Coordinate
    keyword: str
    found: int = 0
    admitted: int = 0
    rejected: int = 0
    already_seen: int = 0
    stored: int = 0
    store_failed: int = 0
    search_failed: bool = False


@dataclass
class SweepResult:
    """Outcome of a sweep.

    leads holds every admitted lead, whether or not the lead store accepted
    it. BucketStats.stored and store_failed record what the store did.
    """
    buckets: List[BucketStats] = field(default_factory=list)
    leads: List[Lead] = field(default_factory=list)

    @property
    def total_admitted(self) -> int:
        return sum(b.admitted for b in self.buckets)


def _short(name: str) -> str:
    return name[:40] if name else "Unknown"


def process_hit(
    hit: SearchHit,
    stats: BucketStats,
    result: SweepResult,
    cache: DedupCache,
    search_log,
    lead_store,
    policy: QualificationPolicy,
    enrich: EnrichFn,
    fetcher: Optional[PageFetcher],
    verbose: bool,
):
    """Run one search hit through the admission funnel."""
    if cache.has(hit.place_id):
        stats.already_seen += 1
        if verbose:
            print(f"    [SKIP] Already processed: {_short(hit.name)}")
        return

    record = enrich(hit)
    verdict = qualify(record, policy, fetcher)

    if verdict.admit:
        stats.admitted += 1
        lead = Lead.from_record(record, verdict.website_quality)
        result.leads.append(lead)
        try:
            created = lead_store.add(lead)
            if created:
                stats.stored += 1
            if verbose:
                if created:
                    print(f"    [OK] Added lead: {_short(record.name)} ({verdict.website_quality})")
                else:
                    print(f"    [SKIP] Duplicate in lead store: {_short(record.name)}")
        except PersistenceError as e:
            stats.store_failed += 1
            logger.error("Could not store lead %s: %s", record.place_id, e)
    else:
        stats.rejected += 1
        if verbose:
            print(f"    [!] Skipped ({verdict.reason}): {_short(record.name)}")

    # Rejected places are logged too so they are not re-evaluated next run.
    cache.mark(hit.place_id)
    try:
        search_log.append(record.name, record.address, hit.place_id)
    except PersistenceError as e:
        logger.error("Could not log %s: %s", hit.place_id, e)


def collect_leads(
    cities: List[City],
    keywords: List[str],
    cache: DedupCache,
    search_log,
    lead_store,
    policy: QualificationPolicy = NO_WEBSITE_POLICY,
    search: SearchFn = search_places,
    enrich: EnrichFn = fetch_place_details,
    fetcher: Optional[PageFetcher] = None,
    new_results_limit: int = NEW_RESULTS_LIMIT,
    max_results: int = DEFAULT_MAX_RESULTS,
    grid_offset: float = DEFAULT_GRID_OFFSET,
    fail_fast: bool = False,
    verbose: bool = True,
) -> SweepResult:
    """
    Sweep every city for new leads.

    Args:
        cities: Cities to sweep
        keywords: Search keywords
        cache: Seen-place cache; loaded here if not loaded yet
        search_log: Object with append(name, address, place_id)
        lead_store: Object with add(lead) -> bool
        policy: Qualification rules
        search: Search function (keyword, coordinate, max_results) -> hits
        enrich: Enrichment function (hit) -> EnrichedRecord
        fetcher: Page fetcher for the strict website check
        new_results_limit: Admitted leads per bucket before moving on
        max_results: Search hits requested per bucket
        grid_offset: Sweep point offset in decimal degrees
        fail_fast: Abort on a search error instead of skipping the bucket
        verbose: Whether to print progress

    Returns:
        SweepResult with per-bucket statistics and the admitted leads

    Raises:
        SearchServiceError: On a search failure when fail_fast is set
    """
    start_time = time.time()

    if not cache.loaded:
        loaded = cache.load()
        if verbose:
            print(f"Loaded {loaded} existing place IDs from the search log")

    result = SweepResult()

    for city in cities:
        points = generate_sweep_points(city.center, grid_offset)

        for point in points:
            for keyword in keywords:
                stats = BucketStats(city=city.name, point=point, keyword=keyword)
                result.buckets.append(stats)

                if verbose:
                    print(f"\n{'=' * 70}")
                    print(f"City: {city.name} | Point: {point} | Keyword: {keyword}")
                    print("=" * 70)

                try:
                    hits = search(keyword, point, max_results)
                except SearchServiceError as e:
                    if fail_fast:
                        raise
                    stats.search_failed = True
                    logger.error("Search failed for %r at %s in %s: %s", keyword, point, city.name, e)
                    hits = []

                stats.found = len(hits)
                if verbose:
                    print(f"  Found {len(hits)} places")

                for hit in hits:
                    if stats.admitted >= new_results_limit:
                        break
                    process_hit(
                        hit, stats, result, cache, search_log, lead_store,
                        policy, enrich, fetcher, verbose,
                    )

                if verbose:
                    print(f"  Added {stats.admitted} new leads for '{keyword}' in {city.name}")

    if verbose:
        elapsed = time.time() - start_time
        print(f"\nSweep complete: {result.total_admitted} leads in {elapsed:.1f}s")

    return result
