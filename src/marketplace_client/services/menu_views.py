"""Read-only orderings of a vendor's menu for the shop details page."""

from collections.abc import Sequence
from decimal import Decimal

from marketplace_client.models.menu_models import MenuItem

SORT_KEYS = ("price", "discount")


def sort_menu_items(items: Sequence[MenuItem], by: str = "price") -> list[MenuItem]:
    """Order menu items for display.

    Sorting is stable, so items with equal keys keep their menu order.

    Args:
        items: Menu items to order (not modified)
        by: "price" for cheapest first, "discount" for biggest discount first

    Returns:
        list: New ordered list

    Raises:
        ValueError: If the sort key is not supported
    """
    if by == "price":
        return sorted(items, key=lambda item: item.price)
    if by == "discount":
        return sorted(items, key=lambda item: item.discount or Decimal("0"), reverse=True)

    raise ValueError(f"Unsupported sort key {by!r}, expected one of {', '.join(SORT_KEYS)}")
