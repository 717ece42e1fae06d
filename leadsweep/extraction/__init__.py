"""
Extraction module for discovering and qualifying leads.

- search.py: Paginated place search
- enrichment.py: Place details lookup
- collector.py: Sweep orchestration
"""

from .search import search_places, build_search_params
from .enrichment import fetch_place_details
from .collector import collect_leads, BucketStats, SweepResult
