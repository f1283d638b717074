"""CLI job that discovers businesses via SerpAPI and saves the new ones."""

import argparse
import json
import logging
import time
from dataclasses import replace
from functools import partial
from typing import Callable, Optional

from business_ingest.core import db
from business_ingest.core.config import ConfigError, Settings, get_settings
from business_ingest.core.db import init_pool
from business_ingest.etl.dedup import SeenPlaceIds
from business_ingest.jobs.discovery import SearchFn, discover_all
from business_ingest.jobs.writer import save_all_businesses
from business_ingest.models import RunResult
from business_ingest.vendors.serpapi_maps import search_places

logger = logging.getLogger(__name__)


def run_save_businesses(
    settings: Optional[Settings] = None,
    *,
    search: Optional[SearchFn] = None,
    storage=db,
    sleep: Callable[[float], None] = time.sleep,
) -> RunResult:
    """Discover businesses for every configured city and category, then persist them.

    Only a missing SerpAPI key (checked before any work) fails the run;
    search and write failures reduce the reported totals instead.
    """
    settings = settings or get_settings()
    if not settings.serpapi_api_key:
        raise ConfigError("SERPAPI_API_KEY is not configured in environment variables")

    init_pool()

    if search is None:
        search = partial(
            search_places,
            api_key=settings.serpapi_api_key,
            country=settings.country,
            language=settings.language,
            page_size=settings.page_size,
        )

    logger.info(
        "Starting business discovery: %d cities x %d categories",
        len(settings.cities),
        len(settings.categories),
    )
    seen_ids = SeenPlaceIds()
    candidates = discover_all(
        settings.cities,
        settings.categories,
        seen_ids,
        search=search,
        batch_size=settings.category_batch_size,
        cooldown_seconds=settings.category_cooldown_seconds,
        sleep=sleep,
    )

    logger.info("Saving %d discovered businesses to database", len(candidates))
    saved = save_all_businesses(
        candidates,
        chunk_size=settings.write_chunk_size,
        delay_seconds=settings.write_chunk_delay_seconds,
        sleep=sleep,
        storage=storage,
    )

    logger.info("Finished: %d businesses saved", len(saved))
    return RunResult.from_saved(
        saved,
        cities_searched=len(settings.cities),
        categories_searched=len(settings.categories),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Discover businesses on Google Maps and save new ones")
    parser.add_argument(
        "--cooldown",
        dest="cooldown",
        type=float,
        default=None,
        help="Seconds to wait between category batches (overrides CATEGORY_COOLDOWN_SECONDS)",
    )
    return parser


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args()

    settings = get_settings()
    if args.cooldown is not None:
        settings = replace(settings, category_cooldown_seconds=args.cooldown)

    try:
        result = run_save_businesses(settings)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc
    except Exception as exc:  # pragma: no cover - CLI fallback
        logger.error("Business discovery failed: %s", exc, exc_info=True)
        raise SystemExit(1) from exc

    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
