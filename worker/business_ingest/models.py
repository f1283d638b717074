"""Core data models shared by the business discovery pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

SAMPLE_SIZE = 5


@dataclass(frozen=True)
class SearchTask:
    """One (category, city) unit of SerpAPI lookup work."""

    category: str
    city: str

    def query(self, country: str) -> str:
        return " ".join(part for part in (self.category, self.city, country) if part).strip()


@dataclass(slots=True)
class BusinessDraft:
    """Canonical business record built from a SerpAPI place, not yet persisted."""

    name: str
    description: str
    category: str
    address: str
    city: str
    country: str
    phone: Optional[str] = None
    website: Optional[str] = None
    profile_url: Optional[str] = None
    rating: float = 0
    reviews_count: int = 0

    def to_row(self) -> Dict[str, Any]:
        """Column mapping for the ``businesses`` table."""
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "address": self.address,
            "city": self.city,
            "country": self.country,
            "phone": self.phone,
            "website": self.website,
            "profile_url": self.profile_url,
            "is_verified": False,
            "verification_status": "pending",
            "our_rating": self.rating,
            "our_reviews_count": self.reviews_count,
        }


@dataclass(slots=True)
class PersistedBusiness:
    id: int
    draft: BusinessDraft
    is_verified: bool = False
    verification_status: str = "pending"

    @property
    def name(self) -> str:
        return self.draft.name

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.draft.name,
            "category": self.draft.category,
            "city": self.draft.city,
            "profile_url": self.draft.profile_url,
        }


@dataclass
class RunResult:
    """Outcome reported to whoever triggered the run."""

    success: bool
    message: str
    total_saved: int = 0
    cities_searched: int = 0
    categories_searched: int = 0
    sample: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_saved(
        cls,
        saved: List[PersistedBusiness],
        *,
        cities_searched: int,
        categories_searched: int,
    ) -> "RunResult":
        return cls(
            success=True,
            message=f"Successfully saved {len(saved)} businesses from Google Maps",
            total_saved=len(saved),
            cities_searched=cities_searched,
            categories_searched=categories_searched,
            sample=[business.summary() for business in saved[:SAMPLE_SIZE]],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "totalSaved": self.total_saved,
            "citiesSearched": self.cities_searched,
            "categoriesSearched": self.categories_searched,
            "sample": self.sample,
        }
