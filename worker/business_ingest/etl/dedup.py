"""Deduplication layers: within one run, and against stored businesses."""

import logging
import threading
from typing import Callable, Iterable, List, Optional, Set

from business_ingest.core import db
from business_ingest.models import BusinessDraft

logger = logging.getLogger(__name__)

NameLookup = Callable[[Iterable[str]], Set[str]]


class SeenPlaceIds:
    """SerpAPI place identifiers already handled during the current run.

    Shared by the concurrent category searches of a batch; created per run
    and discarded with it.
    """

    def __init__(self) -> None:
        self._ids: Set[str] = set()
        self._lock = threading.Lock()

    def add_if_absent(self, place_id: Optional[str]) -> bool:
        """Mark ``place_id`` as seen. False when it is empty or was already seen."""
        if not place_id:
            return False
        with self._lock:
            if place_id in self._ids:
                return False
            self._ids.add(place_id)
            return True

    def __contains__(self, place_id: object) -> bool:
        with self._lock:
            return place_id in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)


def filter_existing(candidates: List[BusinessDraft], lookup: Optional[NameLookup] = None) -> List[BusinessDraft]:
    """Drop candidates whose name already exists in storage.

    A failed lookup returns the candidates unfiltered; the unique index on
    ``businesses.name`` still rejects true duplicates at insert time.
    """
    if not candidates:
        return []

    names = {candidate.name for candidate in candidates if isinstance(candidate.name, str) and candidate.name}
    if not names:
        return []

    if lookup is None:
        lookup = db.find_existing_names

    try:
        existing = lookup(names)
    except Exception as exc:  # noqa: BLE001
        logger.error("Error checking duplicates, keeping all %d candidates: %s", len(candidates), exc)
        return list(candidates)

    unique = [candidate for candidate in candidates if candidate.name not in existing]
    logger.info("Found %d existing names, %d unique businesses", len(existing), len(unique))
    return unique
