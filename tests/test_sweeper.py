from __future__ import annotations

import json
from pathlib import Path

import pytest

from leadsweep import cli, sweeper
from leadsweep.config_manager import SweepConfig
from leadsweep.exceptions import ConfigurationError
from leadsweep.geo import City, Coordinate
from leadsweep.models import EnrichedRecord, OperatingStatus, SearchHit
from leadsweep.storage import MemoryLeadStore, MemorySearchLog

ENV_VARS = (
    "GOOGLE_API_KEY", "GOOGLE_SHEETS_ID", "GOOGLE_CREDENTIALS", "GOOGLE_CREDENTIALS_FILE",
    "AIRTABLE_API_KEY", "AIRTABLE_BASE_ID", "AIRTABLE_TABLE_NAME",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_places(monkeypatch: pytest.MonkeyPatch) -> dict[str, list]:
    calls: dict[str, list] = {"search": [], "details": []}

    def fake_search(keyword, coordinate, max_results, **kwargs):
        calls["search"].append((keyword, coordinate, max_results, kwargs))
        return [SearchHit(place_id="abc", name="Glow Spa")]

    def fake_details(hit, **kwargs):
        calls["details"].append((hit.place_id, kwargs))
        return EnrichedRecord(
            place_id=hit.place_id,
            name=hit.name,
            review_count=40,
            rating=4.8,
            operating_status=OperatingStatus.OPERATIONAL,
        )

    monkeypatch.setattr(sweeper, "search_places", fake_search)
    monkeypatch.setattr(sweeper, "fetch_place_details", fake_details)
    return calls


def test_sweeper_wires_config_into_the_run(fake_places: dict[str, list]) -> None:
    config = SweepConfig(
        google_api_key="g-key",
        keywords=["med spa"],
        radius=3000,
        rank_by_distance=True,
        page_delay=0.0,
        max_results=20,
        verbose=False,
    )
    log, store = MemorySearchLog(["old"]), MemoryLeadStore()

    with sweeper.LeadSweeper(config, search_log=log, lead_store=store) as sw:
        result = sw.run([City("Austin, TX", Coordinate(30.0, -97.0))])

    assert result.total_admitted == 1
    assert [lead.business_name for lead in store.leads] == ["Glow Spa"]
    assert log.read_place_ids() == ["old", "abc"]
    assert len(fake_places["search"]) == 5
    keyword, _, max_results, kwargs = fake_places["search"][0]
    assert (keyword, max_results) == ("med spa", 20)
    assert kwargs["api_key"] == "g-key"
    assert kwargs["radius"] == 3000
    assert kwargs["rank_by_distance"] is True
    assert fake_places["details"] == [("abc", fake_places["details"][0][1])]
    assert fake_places["details"][0][1]["api_key"] == "g-key"


def test_cli_dry_run(
    fake_places: dict[str, list], tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
    cities = tmp_path / "cities.json"
    cities.write_text(json.dumps([{"name": "Austin, TX", "coords": "30.0,-97.0"}]))

    code = cli.main(["--cities", str(cities), "-k", "botox", "--dry-run", "--policy", "no-website"])

    assert code == 0
    assert {call[0] for call in fake_places["search"]} == {"botox"}
    assert "Done! Admitted 1 leads." in capsys.readouterr().out


def test_cli_reports_configuration_errors(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
    code = cli.main(["--cities", str(tmp_path / "missing.json"), "--dry-run", "-q"])

    assert code == 1
    assert "Cannot read cities file" in capsys.readouterr().err


def test_injected_backends_skip_their_credential_checks(fake_places: dict[str, list]) -> None:
    config = SweepConfig(google_api_key="g-key", keywords=["botox"], verbose=False)

    with sweeper.LeadSweeper(config, search_log=MemorySearchLog(), lead_store=MemoryLeadStore()) as sw:
        assert sw.config.airtable_api_key is None

    with pytest.raises(ConfigurationError) as excinfo:
        sweeper.LeadSweeper(config, search_log=MemorySearchLog())
    message = str(excinfo.value)
    assert "AIRTABLE_API_KEY" in message
    assert "GOOGLE_SHEETS_ID" not in message


def test_client_is_closed_when_a_backend_fails_to_build(monkeypatch: pytest.MonkeyPatch) -> None:
    clients: list[object] = []
    real_client = sweeper.httpx.Client

    def tracking_client(*args, **kwargs):
        client = real_client(*args, **kwargs)
        clients.append(client)
        return client

    def broken_service(**kwargs):
        raise ConfigurationError("Invalid Google credentials")

    monkeypatch.setattr(sweeper.httpx, "Client", tracking_client)
    monkeypatch.setattr(sweeper, "build_sheets_service", broken_service)
    config = SweepConfig(
        google_api_key="g-key",
        sheets_id="sheet",
        google_credentials="{}",
        airtable_api_key="a-key",
        airtable_base_id="app123",
        airtable_table="Leads",
    )

    with pytest.raises(ConfigurationError):
        sweeper.LeadSweeper(config)
    assert len(clients) == 1
    assert clients[0].is_closed
