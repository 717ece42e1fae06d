"""
Storage module for run state and outputs.

- dedup.py: In-memory cache of already handled place IDs
- search_log.py: Google Sheets search log (durable seen-set)
- lead_store.py: Airtable lead store (final sink)
"""

from .dedup import DedupCache
from .search_log import SearchLog, MemorySearchLog, build_sheets_service
from .lead_store import AirtableLeadStore, MemoryLeadStore
