"""Command-line entry point for browsing the vendor directory.

Loads the directory from the marketplace API and prints the view derived from
the search, category and location options, one vendor per line.
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from client_dependencies import (
    get_query_engine,
    get_vendor_repository,
    initialize_client_environment,
)
from marketplace_client.exceptions import MarketplaceClientError
from marketplace_client.models.vendor_models import Coordinates, Vendor
from marketplace_client.services.directory_query import distance_km

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line options.

    Args:
        argv: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed options
    """
    parser = argparse.ArgumentParser(description="Browse the marketplace vendor directory")
    parser.add_argument("--search", default=None, help="Text to search for")
    parser.add_argument("--category", default=None, help="Category to keep, or 'all'")
    parser.add_argument(
        "--near",
        nargs=2,
        type=float,
        metavar=("LAT", "LON"),
        default=None,
        help="Sort by distance from this point",
    )
    options = parser.parse_args(argv)

    if options.near is not None:
        latitude, longitude = options.near
        if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
            parser.error("--near expects LAT in [-90, 90] and LON in [-180, 180]")
    return options


def format_vendor(vendor: Vendor, reference: Coordinates | None = None) -> str:
    """Render one directory line.

    Args:
        vendor: Vendor to render
        reference: Point to show the distance from, if any

    Returns:
        str: Tab separated line
    """
    columns = [vendor.id, vendor.name, vendor.category.value]
    if vendor.rating is not None:
        columns.append(f"{vendor.rating:.1f}★")
    if vendor.offers:
        columns.append(vendor.offers)
    if reference is not None and vendor.coordinates is not None:
        columns.append(f"{distance_km(reference, vendor.coordinates):.1f} km")
    return "\t".join(columns)


async def browse(options: argparse.Namespace) -> list[str]:
    """Load the directory and derive the requested view.

    Args:
        options: Parsed command-line options

    Returns:
        list: Output lines
    """
    reference = None
    if options.near is not None:
        reference = Coordinates(latitude=options.near[0], longitude=options.near[1])

    vendors = await get_vendor_repository().list_all()
    view = get_query_engine().apply(
        vendors, query=options.search, category=options.category, reference=reference
    )
    return [format_vendor(vendor, reference) for vendor in view]


def main(argv: Sequence[str] | None = None) -> int:
    """Run the directory browser.

    Returns:
        int: Process exit code
    """
    options = parse_args(argv)
    initialize_client_environment()

    try:
        lines = asyncio.run(browse(options))
    except MarketplaceClientError as e:
        logger.error(f"Failed to load vendors: {e}")
        print(f"Failed to load vendors: {e}", file=sys.stderr)
        return 1

    for line in lines:
        print(line)
    if not lines:
        print("No vendors found", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
