from __future__ import annotations

from dataclasses import replace

import httpx
import pytest

from leadsweep.exceptions import PersistenceError, SearchServiceError
from leadsweep.extraction.collector import collect_leads
from leadsweep.geo import City, Coordinate
from leadsweep.models import EnrichedRecord, OperatingStatus, SearchHit
from leadsweep.qualification import STRICT_CONTENT_POLICY
from leadsweep.storage import AirtableLeadStore, DedupCache, MemoryLeadStore, MemorySearchLog

CITY = City(name="Austin, TX", center=Coordinate(30.0, -97.0))


def _good(place_id: str) -> EnrichedRecord:
    return EnrichedRecord(
        place_id=place_id,
        name=f"Business {place_id}",
        address="Austin, TX",
        review_count=30,
        rating=4.5,
        operating_status=OperatingStatus.OPERATIONAL,
    )


class _Upstream:
    """Returns the same hits for every query and tracks enrichment calls."""

    def __init__(self, hits: list[SearchHit], records: dict[str, EnrichedRecord] | None = None) -> None:
        self.hits = hits
        self.records = records or {}
        self.searches: list[tuple[str, Coordinate, int]] = []
        self.enriched: list[str] = []

    def search(self, keyword: str, point: Coordinate, max_results: int) -> list[SearchHit]:
        self.searches.append((keyword, point, max_results))
        return list(self.hits)

    def enrich(self, hit: SearchHit) -> EnrichedRecord:
        self.enriched.append(hit.place_id)
        return self.records.get(hit.place_id, _good(hit.place_id))


def _hits(*ids: str) -> list[SearchHit]:
    return [SearchHit(place_id=i, name=f"Business {i}") for i in ids]


def _run(upstream: _Upstream, cache: DedupCache, log, store, **kwargs):
    kwargs.setdefault("keywords", ["med spa"])
    kwargs.setdefault("cities", [CITY])
    return collect_leads(
        cache=cache,
        search_log=log,
        lead_store=store,
        policy=STRICT_CONTENT_POLICY,
        search=upstream.search,
        enrich=upstream.enrich,
        verbose=False,
        **kwargs,
    )


def test_sweeps_every_point_and_keyword() -> None:
    upstream = _Upstream([])
    result = _run(
        upstream, DedupCache(), MemorySearchLog(), MemoryLeadStore(),
        keywords=["med spa", "botox"], max_results=40,
    )
    assert len(upstream.searches) == 10
    assert len(result.buckets) == 10
    assert {s[2] for s in upstream.searches} == {40}
    assert upstream.searches[0][1] == CITY.center


def test_each_place_is_logged_once_and_forwarded_once() -> None:
    upstream = _Upstream(_hits("a", "b", "c"))
    log, store = MemorySearchLog(), MemoryLeadStore()

    result = _run(upstream, DedupCache(log.read_place_ids), log, store)

    assert [lead.business_name for lead in store.leads] == ["Business a", "Business b", "Business c"]
    assert log.read_place_ids() == ["a", "b", "c"]
    assert upstream.enriched == ["a", "b", "c"]
    assert result.buckets[0].admitted == 3
    assert all(b.already_seen == 3 for b in result.buckets[1:])
    assert store.leads[0].contact_profile_url == "https://www.google.com/maps/place/?q=place_id:a"
    assert store.leads[0].platform == "Google Maps"


def test_rejected_places_are_logged_but_not_forwarded() -> None:
    closed = replace(_good("b"), operating_status=OperatingStatus.CLOSED_PERMANENTLY)
    upstream = _Upstream(_hits("a", "b"), {"b": closed})
    log, store = MemorySearchLog(), MemoryLeadStore()

    result = _run(upstream, DedupCache(), log, store)

    assert [lead.business_name for lead in store.leads] == ["Business a"]
    assert log.read_place_ids() == ["a", "b"]
    assert result.buckets[0].rejected == 1


def test_bucket_cap_skips_remaining_hits() -> None:
    upstream = _Upstream(_hits("a", "b", "c", "d"))
    log = MemorySearchLog()

    result = _run(upstream, DedupCache(), log, MemoryLeadStore(), new_results_limit=2)

    assert result.buckets[0].admitted == 2
    # The cap is per bucket: the next point picks up where the first stopped.
    assert result.buckets[1].admitted == 2
    assert log.read_place_ids() == ["a", "b", "c", "d"]
    assert upstream.enriched == ["a", "b", "c", "d"]


def test_second_run_admits_nothing() -> None:
    upstream = _Upstream(_hits("a", "b", "c"))
    log, store = MemorySearchLog(), MemoryLeadStore()

    first = _run(upstream, DedupCache(log.read_place_ids), log, store)
    second = _run(upstream, DedupCache(log.read_place_ids), log, store)

    assert first.total_admitted == 3
    assert second.total_admitted == 0
    assert len(store.leads) == 3
    assert len(log.rows) == 3


def test_search_failure_skips_bucket_unless_fail_fast() -> None:
    calls: list[Coordinate] = []

    def flaky_search(keyword: str, point: Coordinate, max_results: int) -> list[SearchHit]:
        calls.append(point)
        if len(calls) == 1:
            raise SearchServiceError("OVER_QUERY_LIMIT")
        return _hits(f"p{len(calls)}")

    upstream = _Upstream([])
    result = collect_leads(
        [CITY], ["med spa"], DedupCache(), MemorySearchLog(), MemoryLeadStore(),
        policy=STRICT_CONTENT_POLICY, search=flaky_search, enrich=upstream.enrich, verbose=False,
    )
    assert result.buckets[0].search_failed
    assert result.total_admitted == 4

    calls.clear()
    with pytest.raises(SearchServiceError):
        collect_leads(
            [CITY], ["med spa"], DedupCache(), MemorySearchLog(), MemoryLeadStore(),
            policy=STRICT_CONTENT_POLICY, search=flaky_search, enrich=upstream.enrich,
            fail_fast=True, verbose=False,
        )


def test_persistence_failures_do_not_stop_the_sweep() -> None:
    class _BrokenStore:
        def add(self, lead):
            raise PersistenceError("airtable down")

    class _BrokenLog(MemorySearchLog):
        def append(self, name, address, place_id, logged_on=None):
            raise PersistenceError("sheets down")

    upstream = _Upstream(_hits("a", "b"))
    cache = DedupCache()
    result = _run(upstream, cache, _BrokenLog(), _BrokenStore())

    assert result.buckets[0].admitted == 2
    assert result.buckets[0].stored == 0
    assert result.buckets[0].store_failed == 2
    assert cache.has("a") and cache.has("b")
    assert upstream.enriched == ["a", "b"]


def test_unexpected_errors_abort_the_run() -> None:
    def broken_enrich(hit: SearchHit) -> EnrichedRecord:
        raise KeyError("boom")

    upstream = _Upstream(_hits("a"))
    with pytest.raises(KeyError):
        collect_leads(
            [CITY], ["med spa"], DedupCache(), MemorySearchLog(), MemoryLeadStore(),
            policy=STRICT_CONTENT_POLICY, search=upstream.search, enrich=broken_enrich, verbose=False,
        )


def test_progress_output(capsys: pytest.CaptureFixture[str]) -> None:
    upstream = _Upstream(_hits("a"))
    collect_leads(
        [CITY], ["med spa"], DedupCache(), MemorySearchLog(), MemoryLeadStore(),
        policy=STRICT_CONTENT_POLICY, search=upstream.search, enrich=upstream.enrich,
    )
    out = capsys.readouterr().out
    assert "City: Austin, TX" in out
    assert "[OK] Added lead: Business a" in out
    assert "[SKIP] Already processed: Business a" in out


def test_store_outcomes_are_counted_per_bucket() -> None:
    store = MemoryLeadStore()
    upstream = _Upstream(
        _hits("a", "b"),
        records={"b": replace(_good("b"), name="Business a")},
    )
    result = _run(upstream, DedupCache(), MemorySearchLog(), store)

    stats = result.buckets[0]
    assert (stats.admitted, stats.stored, stats.store_failed) == (2, 1, 0)
    assert len(result.leads) == 2
    assert [lead.business_name for lead in store.leads] == ["Business a"]


def test_malformed_lead_store_responses_do_not_stop_the_sweep() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    client = httpx.Client(transport=httpx.MockTransport(handler))
    store = AirtableLeadStore("key", "app123", "Leads", client=client)
    log = MemorySearchLog()
    upstream = _Upstream(_hits("a"))

    result = _run(upstream, DedupCache(), log, store)

    assert result.buckets[0].admitted == 1
    assert result.buckets[0].store_failed == 1
    assert log.read_place_ids() == ["a"]
