"""Search, category filter and proximity sort over the vendor directory.

All operations are pure: they return new lists and never reorder or modify the
list they were given. The same input and parameters always give the same output.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from marketplace_client.models.vendor_models import Coordinates, Vendor, VendorCategory

ALL_CATEGORIES = "all"
EARTH_RADIUS_KM = 6371.0088


@dataclass(frozen=True)
class DirectoryQuery:
    """Parameters of the last composed query.

    Attributes:
        search: Free-text search, None when not applied
        category: Category filter, None when not applied
        reference: Point used for the proximity sort, None when not applied
    """

    search: str | None = None
    category: str | None = None
    reference: Coordinates | None = None


def distance_km(origin: Coordinates, destination: Coordinates) -> float:
    """Great-circle distance between two points using the haversine formula.

    Args:
        origin: First point
        destination: Second point

    Returns:
        float: Distance in kilometres
    """
    lat1 = math.radians(origin.latitude)
    lat2 = math.radians(destination.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(destination.longitude - origin.longitude)

    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


class DirectoryQueryEngine:
    """Derives directory views from the vendor list held by VendorRepository."""

    def __init__(self) -> None:
        self.last_query = DirectoryQuery()

    def search(self, query: str | None, vendors: Sequence[Vendor]) -> list[Vendor]:
        """Case-insensitive substring search over name, description and category.

        Args:
            query: Search text; blank text matches everything
            vendors: Vendors to search

        Returns:
            list: Matching vendors in input order
        """
        needle = (query or "").strip().casefold()
        if not needle:
            return list(vendors)

        return [
            vendor
            for vendor in vendors
            if needle in vendor.name.casefold()
            or needle in vendor.description.casefold()
            or needle in vendor.category.value.casefold()
        ]

    def filter_by_category(
        self, category: str | VendorCategory | None, vendors: Sequence[Vendor]
    ) -> list[Vendor]:
        """Keep vendors whose category matches exactly.

        Args:
            category: Category to keep; None or "all" keeps everything
            vendors: Vendors to filter

        Returns:
            list: Matching vendors in input order
        """
        if category is None:
            return list(vendors)

        wanted = category.value if isinstance(category, VendorCategory) else category
        if wanted == ALL_CATEGORIES:
            return list(vendors)

        return [vendor for vendor in vendors if vendor.category.value == wanted]

    def sort_by_proximity(
        self, vendors: Sequence[Vendor], reference: Coordinates | None = None
    ) -> list[Vendor]:
        """Order vendors by distance from a reference point, nearest first.

        Vendors without coordinates follow all located vendors, in input order.
        Ties keep input order.

        Args:
            vendors: Vendors to order
            reference: Point to measure from; None leaves the order unchanged

        Returns:
            list: Ordered vendors
        """
        if reference is None:
            return list(vendors)

        located: list[tuple[float, Vendor]] = []
        unlocated: list[Vendor] = []
        for vendor in vendors:
            position = vendor.coordinates
            if position is None:
                unlocated.append(vendor)
            else:
                located.append((distance_km(reference, position), vendor))

        located.sort(key=lambda pair: pair[0])
        return [vendor for _, vendor in located] + unlocated

    def apply(
        self,
        vendors: Sequence[Vendor],
        query: str | None = None,
        category: str | VendorCategory | None = None,
        reference: Coordinates | None = None,
    ) -> list[Vendor]:
        """Search, then filter, then sort, and remember the parameters.

        Args:
            vendors: Directory to derive the view from
            query: Search text
            category: Category filter
            reference: Point for the proximity sort

        Returns:
            list: The derived view
        """
        if isinstance(category, VendorCategory):
            category = category.value
        self.last_query = DirectoryQuery(search=query, category=category, reference=reference)

        result = self.search(query, vendors)
        result = self.filter_by_category(category, result)
        return self.sort_by_proximity(result, reference)
