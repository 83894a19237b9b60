"""
skillconnect/discovery/filters.py

Pure filtering over already-fetched listings. Nothing here touches the
database or mutates its input; every function returns a new list.
"""

from collections.abc import Iterable, Sequence
from typing import TypeVar

from skillconnect.discovery.categories import category_matches
from skillconnect.discovery.schemas import (
    JobFilterCriteria,
    JobListing,
    LatLng,
    MapMarker,
    ProviderFilterCriteria,
    ProviderListing,
    SortBy,
)

# Distance is not computed from coordinates yet; every listing reports this value.
DISTANCE_PLACEHOLDER_KM = 0.0

ListingT = TypeVar("ListingT", ProviderListing, JobListing)


def _contains(needle: str, *haystacks: str | None) -> bool:
    needle = needle.strip().lower()
    if not needle:
        return True
    return any(needle in h.lower() for h in haystacks if h)


def _in_range(value: float, low: float | None, high: float | None) -> bool:
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def _within_distance(distance_km: float, max_distance_km: float | None) -> bool:
    return max_distance_km is None or distance_km <= max_distance_km


# ---------------------------------------------------
# Providers
# ---------------------------------------------------
def provider_matches(listing: ProviderListing, criteria: ProviderFilterCriteria) -> bool:
    if criteria.text and not _contains(
        criteria.text, listing.name, listing.profession, listing.bio
    ):
        return False
    if criteria.category and not any(
        category_matches(c, criteria.category) for c in listing.categories
    ):
        return False
    if not _in_range(listing.hourly_rate, criteria.min_rate, criteria.max_rate):
        return False
    if criteria.min_rating is not None and listing.rating < criteria.min_rating:
        return False
    return _within_distance(listing.distance_km, criteria.max_distance_km)


def filter_providers(
    listings: Iterable[ProviderListing], criteria: ProviderFilterCriteria
) -> list[ProviderListing]:
    matched = [listing for listing in listings if provider_matches(listing, criteria)]
    return sort_listings(matched, criteria.sort_by)


# ---------------------------------------------------
# Jobs
# ---------------------------------------------------
def job_matches(listing: JobListing, criteria: JobFilterCriteria) -> bool:
    if criteria.text and not _contains(criteria.text, listing.title, listing.description):
        return False
    if criteria.category and not category_matches(listing.category, criteria.category):
        return False
    if not _in_range(listing.amount, criteria.min_rate, criteria.max_rate):
        return False
    return _within_distance(listing.distance_km, criteria.max_distance_km)


def filter_jobs(listings: Iterable[JobListing], criteria: JobFilterCriteria) -> list[JobListing]:
    return [listing for listing in listings if job_matches(listing, criteria)]


# ---------------------------------------------------
# Ordering / Markers
# ---------------------------------------------------
def sort_listings(listings: Sequence[ListingT], sort_by: SortBy | None) -> list[ListingT]:
    """Stable sort; with no ordering requested the input order is kept."""
    if sort_by is None:
        return list(listings)
    if sort_by == SortBy.RATING:
        return sorted(listings, key=lambda item: getattr(item, "rating", 0.0), reverse=True)
    if sort_by == SortBy.PRICE:
        return sorted(listings, key=_price)
    return sorted(listings, key=lambda item: item.distance_km)


def _price(item: ProviderListing | JobListing) -> float:
    if isinstance(item, ProviderListing):
        return item.hourly_rate
    return item.amount


def map_markers(listings: Iterable[ProviderListing | JobListing]) -> list[MapMarker]:
    """Marker descriptors for listings that carry coordinates; others are skipped."""
    markers = []
    for item in listings:
        if item.latitude is None or item.longitude is None:
            continue
        label = item.name if isinstance(item, ProviderListing) else item.title
        markers.append(
            MapMarker(
                id=item.id,
                position=LatLng(lat=item.latitude, lng=item.longitude),
                label=label,
                category=item.category,
            )
        )
    return markers
