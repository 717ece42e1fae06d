"""
Lead Sweep

Discovers local businesses through the Google Places API, keeps the ones
that look like they need a better web presence, and forwards them to an
Airtable lead table exactly once, using a Google Sheets search log to
remember every place already evaluated.

Quick start (library usage):
    from leadsweep import LeadSweeper, SweepConfig

    with LeadSweeper(SweepConfig(policy_name="strict-content")) as sweeper:
        result = sweeper.run()
        for lead in result.leads:
            print(lead.business_name, lead.website_quality)

Or drive the collector directly with your own storage:
    from leadsweep import collect_leads, DedupCache
"""

from .config_manager import SweepConfig, load_cities
from .extraction import collect_leads, search_places, fetch_place_details, SweepResult
from .geo import City, Coordinate, generate_sweep_points
from .models import EnrichedRecord, Lead, OperatingStatus, SearchHit
from .qualification import QualificationPolicy, Verdict, WebsiteRule, get_policy, qualify
from .storage import DedupCache
from .sweeper import LeadSweeper

__version__ = "1.0.0"
__all__ = [
    "LeadSweeper",
    "SweepConfig",
    "SweepResult",
    "collect_leads",
    "search_places",
    "fetch_place_details",
    "load_cities",
    "City",
    "Coordinate",
    "generate_sweep_points",
    "SearchHit",
    "EnrichedRecord",
    "OperatingStatus",
    "Lead",
    "QualificationPolicy",
    "WebsiteRule",
    "Verdict",
    "get_policy",
    "qualify",
    "DedupCache",
]
