"""Utilities for transforming SerpAPI Google Maps places into business drafts."""

import logging
from typing import Any, Callable, Dict, Optional, Sequence

from business_ingest.models import BusinessDraft

logger = logging.getLogger(__name__)


def _text_or_none(value: Any) -> Optional[str]:
    """Only non-empty strings are usable column values."""
    if not isinstance(value, str) or not value.strip():
        return None
    return value


def _field(name: str) -> Callable[[Dict[str, Any]], Optional[str]]:
    return lambda place: _text_or_none(place.get(name))


def _first_of(list_name: str, *keys: str) -> Callable[[Dict[str, Any]], Optional[str]]:
    """First entry of a list field; dict entries are read through ``keys`` in order."""

    def getter(place: Dict[str, Any]) -> Optional[str]:
        items = place.get(list_name)
        if not isinstance(items, list) or not items:
            return None
        first = items[0]
        if isinstance(first, dict):
            for key in keys:
                value = _text_or_none(first.get(key))
                if value:
                    return value
            return None
        return _text_or_none(first)

    return getter


# Order matters: the first present value wins.
_PHONE_SOURCES = (_field("phone"), _first_of("contact", "phone"))
_WEBSITE_SOURCES = (_field("website"), _first_of("links", "link"))
_ADDRESS_SOURCES = (_field("address"), _first_of("address_extensions"))
_PROFILE_IMAGE_SOURCES = (
    _field("thumbnail"),
    _field("image"),
    _field("photo"),
    _field("logo"),
    _field("icon"),
    _first_of("images", "thumbnail", "image"),
    _first_of("photos", "thumbnail", "image"),
)


def first_present(place: Dict[str, Any], sources: Sequence[Callable[[Dict[str, Any]], Optional[str]]]) -> Optional[str]:
    for source in sources:
        value = source(place)
        if value:
            return value
    return None


def to_business_draft(place: Any, category: str, city: str, country: str) -> Optional[BusinessDraft]:
    """Build a BusinessDraft from a raw place, or None when it has no title."""
    if not isinstance(place, dict):
        return None

    title = place.get("title")
    if not isinstance(title, str) or not title.strip():
        return None

    return BusinessDraft(
        name=title,
        description=f"{title} - {category} in {city}",
        category=category,
        address=first_present(place, _ADDRESS_SOURCES) or f"{city}, {country}",
        city=city,
        country=country,
        phone=first_present(place, _PHONE_SOURCES),
        website=first_present(place, _WEBSITE_SOURCES),
        profile_url=first_present(place, _PROFILE_IMAGE_SOURCES),
        rating=0,
        reviews_count=0,
    )
