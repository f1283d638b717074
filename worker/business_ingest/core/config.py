"""Configuration helpers for the business discovery worker.

`SERPAPI_API_KEY` is a billable credential and is only read from the
environment (or a local `.env`); a missing key is reported here as a warning
and enforced as a fatal precondition when a run starts.
"""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CITIES: Tuple[str, ...] = ("Karachi", "Lahore", "Islamabad")
DEFAULT_CATEGORIES: Tuple[str, ...] = (
    "restaurants",
    "digital marketing companies",
    "software companies",
    "web development companies",
    "mobile app development",
    "IT companies",
    "SEO companies",
    "graphic design companies",
    "hospitals",
    "schools",
    "colleges",
    "universities",
    "coaching centers",
    "supermarkets",
    "shopping malls",
)


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing."""


@dataclass(frozen=True)
class Settings:
    serpapi_api_key: str
    database_url: str
    worker_port: int = 9000
    country: str = "Pakistan"
    language: str = "en"
    page_size: int = 100
    cities: Tuple[str, ...] = field(default=DEFAULT_CITIES)
    categories: Tuple[str, ...] = field(default=DEFAULT_CATEGORIES)
    category_batch_size: int = 3
    category_cooldown_seconds: float = 2.0
    write_chunk_size: int = 10
    write_chunk_delay_seconds: float = 0.3


def _parse_list(raw: Optional[str], default: Tuple[str, ...]) -> Tuple[str, ...]:
    if not raw:
        return default
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    return items or default


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    serpapi_api_key = os.getenv("SERPAPI_API_KEY", "")
    database_url = os.getenv("DATABASE_URL", "")
    worker_port = int(os.getenv("WORKER_PORT", "9000"))
    country = os.getenv("SEARCH_COUNTRY", "").strip() or "Pakistan"
    language = os.getenv("SEARCH_LANGUAGE", "").strip() or "en"
    page_size = int(os.getenv("SEARCH_PAGE_SIZE", "100"))
    cities = _parse_list(os.getenv("SEARCH_CITIES"), DEFAULT_CITIES)
    categories = _parse_list(os.getenv("SEARCH_CATEGORIES"), DEFAULT_CATEGORIES)
    category_batch_size = int(os.getenv("CATEGORY_BATCH_SIZE", "3"))
    category_cooldown_seconds = float(os.getenv("CATEGORY_COOLDOWN_SECONDS", "2.0"))
    write_chunk_size = int(os.getenv("WRITE_CHUNK_SIZE", "10"))
    write_chunk_delay_seconds = float(os.getenv("WRITE_CHUNK_DELAY_SECONDS", "0.3"))

    if not database_url:
        logger.warning("DATABASE_URL is not set; database operations will fail.")
    if not serpapi_api_key:
        logger.warning("SERPAPI_API_KEY is not configured; discovery runs will be refused.")

    return Settings(
        serpapi_api_key=serpapi_api_key,
        database_url=database_url,
        worker_port=worker_port,
        country=country,
        language=language,
        page_size=page_size,
        cities=cities,
        categories=categories,
        category_batch_size=category_batch_size,
        category_cooldown_seconds=category_cooldown_seconds,
        write_chunk_size=write_chunk_size,
        write_chunk_delay_seconds=write_chunk_delay_seconds,
    )
