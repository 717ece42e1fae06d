"""
Seen-Place Cache

Process-lifetime set of place IDs that have already been handled. Loaded
once from the search log with a single bulk read, then consulted in memory
for every candidate. The set only grows.
"""

import logging
from typing import Callable, Iterable, Optional, Set

logger = logging.getLogger(__name__)


class DedupCache:
    """In-memory record of handled place IDs.

    Lifecycle: load() once before any has()/mark() call, then has()/mark()
    for the rest of the run. The durable side effect (appending to the
    search log) belongs to the caller; this class never writes back.

    Args:
        reader: Callable returning every place ID recorded so far. If None,
                load() starts from an empty set.
    """

    def __init__(self, reader: Optional[Callable[[], Iterable[str]]] = None):
        self._reader = reader
        self._seen: Set[str] = set()
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self) -> int:
        """Populate the cache from the search log.

        A read failure leaves the cache empty so the run can proceed; the
        previous runs' history is then invisible to this one.

        Returns:
            Number of IDs loaded
        """
        if self._loaded:
            raise RuntimeError("DedupCache.load() called more than once")
        self._loaded = True

        if self._reader is None:
            return 0

        try:
            ids = self._reader()
            self._seen.update(pid for pid in ids if pid)
        except Exception as e:
            logger.error("Could not read search log, starting with an empty cache: %s", e)
            self._seen = set()

        return len(self._seen)

    def has(self, place_id: str) -> bool:
        return place_id in self._seen

    def mark(self, place_id: str):
        self._seen.add(place_id)

    def __contains__(self, place_id: str) -> bool:
        return self.has(place_id)

    def __len__(self) -> int:
        return len(self._seen)
