"""Fan SerpAPI searches out over the configured cities and categories."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence

from business_ingest.etl.dedup import SeenPlaceIds
from business_ingest.models import BusinessDraft, SearchTask

logger = logging.getLogger(__name__)

SearchFn = Callable[[SearchTask, SeenPlaceIds], List[BusinessDraft]]


def _batches(items: Sequence[str], size: int) -> List[Sequence[str]]:
    return [items[start:start + size] for start in range(0, len(items), size)]


def discover_city(
    city: str,
    categories: Sequence[str],
    seen_ids: SeenPlaceIds,
    *,
    search: SearchFn,
    batch_size: int = 3,
    cooldown_seconds: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
) -> List[BusinessDraft]:
    """Search every category for ``city`` in concurrent batches.

    Each batch is awaited in full before the next one starts, and
    ``cooldown_seconds`` separates consecutive batches.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    businesses: List[BusinessDraft] = []
    batches = _batches(list(categories), batch_size)

    for index, batch in enumerate(batches):
        with ThreadPoolExecutor(max_workers=len(batch), thread_name_prefix="serp-search") as executor:
            futures = [
                executor.submit(search, SearchTask(category=category, city=city), seen_ids)
                for category in batch
            ]
            for category, future in zip(batch, futures):
                try:
                    businesses.extend(future.result())
                except Exception as exc:  # noqa: BLE001
                    logger.warning("Error with %s in %s: %s", category, city, exc)

        logger.info(
            "Batch %d/%d for %s completed: %d businesses so far",
            index + 1,
            len(batches),
            city,
            len(businesses),
        )
        if index + 1 < len(batches):
            sleep(cooldown_seconds)

    logger.info("Total from %s: %d businesses", city, len(businesses))
    return businesses


def discover_all(
    cities: Sequence[str],
    categories: Sequence[str],
    seen_ids: SeenPlaceIds,
    **kwargs,
) -> List[BusinessDraft]:
    """Run :func:`discover_city` for each city, one city at a time."""
    businesses: List[BusinessDraft] = []
    for city in cities:
        logger.info("Processing %s...", city)
        city_businesses = discover_city(city, categories, seen_ids, **kwargs)
        businesses.extend(city_businesses)
        logger.info("Got %d businesses from %s", len(city_businesses), city)
    return businesses
