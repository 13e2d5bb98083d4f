# services/catalogue.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from django.conf import settings
from django.core.cache import cache

from core.money import q, to_decimal
from core.results import Result

from . import panel
from .panel import ApiService

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Tags (case-insensitive substring on the category name, first match wins)
# ---------------------------------------------------------------------------
CATEGORY_TAGS: Tuple[Tuple[str, str], ...] = (
    ("facebook", "facebook"),
    ("tiktok", "tiktok"),
)
DEFAULT_TAG = "default"


def category_tag(name: str) -> str:
    lowered = (name or "").lower()
    for needle, tag in CATEGORY_TAGS:
        if needle in lowered:
            return tag
    return DEFAULT_TAG


def price_per_1000(rate: Decimal | str, fx_rate: Decimal, surcharge: Decimal = Decimal("0")) -> Decimal:
    """Provider USD rate per 1000 -> local taka rate per 1000 (unrounded)."""
    return to_decimal(rate) * to_decimal(fx_rate) + to_decimal(surcharge)


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Service:
    id: str
    name: str
    rate_per_1000: Decimal
    min: int
    max: int
    description: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "rate_per_1000": str(self.rate_per_1000),
            "min": self.min,
            "max": self.max,
            "description": list(self.description),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Service":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            rate_per_1000=Decimal(data["rate_per_1000"]),
            min=int(data["min"]),
            max=int(data["max"]),
            description=tuple(data.get("description") or ()),
        )


@dataclass
class Category:
    id: str
    name: str
    tag: str = DEFAULT_TAG
    services: List[Service] = field(default_factory=list)

    def find_service(self, service_id: str) -> Optional[Service]:
        return next((s for s in self.services if s.id == str(service_id)), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "tag": self.tag,
            "services": [s.to_dict() for s in self.services],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        return cls(
            id=data["id"],
            name=data["name"],
            tag=data.get("tag") or DEFAULT_TAG,
            services=[Service.from_dict(s) for s in data.get("services") or []],
        )


@dataclass
class Catalogue:
    categories: List[Category] = field(default_factory=list)
    load_error: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.categories

    def find_category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self.categories if c.id == category_id), None)

    def find_service(self, category_id: str, service_id: str) -> Optional[Service]:
        cat = self.find_category(category_id)
        return cat.find_service(service_id) if cat else None

    def default_selection(self) -> Tuple[Optional[Category], Optional[Service]]:
        if not self.categories:
            return None, None
        first = self.categories[0]
        return first, (first.services[0] if first.services else None)

    def service_count(self) -> int:
        return sum(len(c.services) for c in self.categories)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categories": [c.to_dict() for c in self.categories],
            "load_error": self.load_error,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Catalogue":
        data = data or {}
        return cls(
            categories=[Category.from_dict(c) for c in data.get("categories") or []],
            load_error=data.get("load_error"),
        )


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------
def describe(svc: ApiService, rate_per_1000: Decimal) -> Tuple[str, ...]:
    return (
        f"Type: {svc.type}",
        f"Refill: {'Yes' if svc.refill else 'No'}",
        f"Cancel: {'Yes' if svc.cancel else 'No'}",
        f"Rate: ৳{q(rate_per_1000)} per 1000",
    )


def build_catalogue(
    api_services: Iterable[Any],
    fx_rate: Decimal,
    surcharge: Decimal = Decimal("0"),
) -> Catalogue:
    """
    Group the flat provider list by raw category string.

    - categories keep first-seen order; services keep input order within them
    - grouping is case-sensitive; the display name is the first raw value seen
    - malformed entries are skipped (logged), never raised
    """
    grouped: Dict[str, Category] = {}
    skipped = 0

    for item in api_services:
        try:
            svc = item if isinstance(item, ApiService) else ApiService.from_payload(item)
        except (KeyError, TypeError, ValueError, AttributeError):
            skipped += 1
            continue

        cat = grouped.get(svc.category)
        if cat is None:
            cat = grouped[svc.category] = Category(
                id=svc.category,
                name=svc.category,
                tag=category_tag(svc.category),
            )

        rate = price_per_1000(svc.rate, fx_rate, surcharge)
        cat.services.append(Service(
            id=str(svc.service),
            name=svc.name,
            rate_per_1000=rate,
            min=svc.min,
            max=svc.max,
            description=describe(svc, rate),
        ))

    if skipped:
        logger.warning("Skipped %d malformed service entries from provider", skipped)

    return Catalogue(categories=list(grouped.values()))


def catalogue_from_result(result: Result, fx_rate: Decimal, surcharge: Decimal = Decimal("0")) -> Catalogue:
    """Turn the `services` action result into a catalogue or a loading-error state."""
    if not result.ok:
        return Catalogue(load_error=result.message)
    payload = result.value
    if not isinstance(payload, list):
        return Catalogue(load_error="Unexpected services payload from provider")
    return build_catalogue(payload, fx_rate, surcharge)


def fetch_catalogue(fetch: Optional[Callable[[], Result]] = None) -> Catalogue:
    """Fetch `services` from the panel and price it with the configured FX + surcharge."""
    result = (fetch or panel.get_services)()
    catalogue = catalogue_from_result(
        result,
        to_decimal(settings.USD_TO_BDT),
        to_decimal(getattr(settings, "CATALOGUE_RATE_SURCHARGE", 0)),
    )
    if catalogue.load_error:
        logger.warning("Catalogue load failed: %s", catalogue.load_error)
    else:
        logger.info(
            "Catalogue loaded: %d categories, %d services",
            len(catalogue.categories), catalogue.service_count(),
        )
    return catalogue


# ---------------------------------------------------------------------------
# Shared cache
# ---------------------------------------------------------------------------
CATALOGUE_CACHE_KEY = "topupbd:catalogue"


def shared_catalogue(force: bool = False) -> Catalogue:
    """
    One catalogue for all visitors, kept in the Django cache.

    A failed load is returned but never cached, so the next caller retries.
    """
    if not force:
        data = cache.get(CATALOGUE_CACHE_KEY)
        if data is not None:
            return Catalogue.from_dict(data)
    catalogue = fetch_catalogue()
    if not catalogue.load_error:
        cache.set(CATALOGUE_CACHE_KEY, catalogue.to_dict(), getattr(settings, "CATALOGUE_CACHE_TIMEOUT", 300))
    return catalogue
