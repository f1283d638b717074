"""SerpAPI Google Maps client for the business discovery pipeline."""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

from serpapi import GoogleSearch

from business_ingest.etl.dedup import SeenPlaceIds
from business_ingest.etl.transform import to_business_draft
from business_ingest.models import BusinessDraft, SearchTask

logger = logging.getLogger(__name__)

RETRY_LIMIT = 2
RETRY_DELAY_SECONDS = 1.2
NO_RESULTS_MARKER = "hasn't returned any results"

Fetcher = Callable[[Dict[str, Any]], Any]


class SerpApiError(RuntimeError):
    """Raised when SerpAPI answers with an error payload."""


def build_search_params(
    task: SearchTask,
    api_key: str,
    *,
    country: str,
    language: str = "en",
    page_size: int = 100,
) -> Dict[str, Any]:
    """Construct SerpAPI request parameters for the Google Maps engine."""
    if not api_key:
        raise ValueError("api_key must be provided for SerpAPI lookups.")

    return {
        "engine": "google_maps",
        "q": task.query(country),
        "start": 0,
        "type": "search",
        "api_key": api_key,
        "hl": language,
        "num": page_size,
    }


def _is_no_results(message: Any) -> bool:
    return isinstance(message, str) and NO_RESULTS_MARKER in message.lower()


def fetch_maps_results(params: Dict[str, Any]) -> Any:
    """Call SerpAPI Google Maps and return the decoded JSON with retry logic.

    Every attempt is billed, so only transport failures are retried. An
    error payload is answered the same way on every attempt: "no results"
    becomes an empty list and anything else raises SerpApiError at once.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            logger.debug("Calling SerpAPI (attempt %s) for q=%s", attempt, params.get("q"))
            data = GoogleSearch(params).get_dict()
            break
        except Exception as exc:  # noqa: BLE001
            logger.warning("SerpAPI request failed (attempt %s/%s): %s", attempt, RETRY_LIMIT + 1, exc)
            if attempt > RETRY_LIMIT:
                raise
            time.sleep(RETRY_DELAY_SECONDS + random.uniform(0, 0.8))

    if isinstance(data, dict) and data.get("error"):
        if _is_no_results(data["error"]):
            logger.info("SerpAPI returned no results for q=%s", params.get("q"))
            return []
        raise SerpApiError(f"SerpAPI returned an error response: {data['error']}")
    return data


def _top_level(data: Any) -> Any:
    return data


def _key(name: str) -> Callable[[Any], Any]:
    return lambda data: data.get(name) if isinstance(data, dict) else None


# The upstream schema is not stable; the first non-empty list wins.
_EXTRACTION_STRATEGIES: Sequence[Callable[[Any], Any]] = (
    _top_level,
    _key("local_results"),
    _key("places"),
    _key("results"),
)


def extract_places(data: Any) -> List[Any]:
    for strategy in _EXTRACTION_STRATEGIES:
        items = strategy(data)
        if isinstance(items, list) and items:
            return items

    if isinstance(data, dict):
        logger.warning("SerpAPI response has no place list. keys=%s", list(data.keys())[:10])
    return []


def search_places(
    task: SearchTask,
    seen_ids: SeenPlaceIds,
    *,
    api_key: str,
    country: str,
    language: str = "en",
    page_size: int = 100,
    fetch: Optional[Fetcher] = None,
) -> List[BusinessDraft]:
    """Search one (category, city) pair and normalize the unseen places.

    Failures are logged and reported as an empty result so that sibling
    searches keep running.
    """
    fetch = fetch or fetch_maps_results
    businesses: List[BusinessDraft] = []
    try:
        params = build_search_params(task, api_key, country=country, language=language, page_size=page_size)
        places = extract_places(fetch(params))

        for place in places:
            if not isinstance(place, dict):
                continue
            place_id = place.get("data_id") or place.get("place_id")
            if not seen_ids.add_if_absent(place_id):
                continue

            draft = to_business_draft(place, task.category, task.city, country)
            if draft is not None:
                businesses.append(draft)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Search failed for %s in %s: %s", task.category, task.city, exc)
        return []

    logger.info("Got %d businesses for %s in %s", len(businesses), task.category, task.city)
    return businesses
