"""Optimistic view over one vendor's menu.

Mutations are applied to the local list before the server answers and reverted
if the call fails. Responses are applied in arrival order, so two concurrent
edits of the same item end with whichever response arrived last. A response
that arrives after the vendor context was closed or switched is discarded.
"""

import itertools
import logging
from typing import Any

from marketplace_client.exceptions import NotFoundError, ValidationError
from marketplace_client.models.menu_models import TEMPORARY_ID_PREFIX, MenuItem, MenuItemInput
from marketplace_client.observability.decorators import traced
from marketplace_client.observability.metrics import record_optimistic_rollback
from marketplace_client.services.transport_client import (
    TransportClient,
    decode_list,
    decode_model,
)

logger = logging.getLogger(__name__)

MENU_PATH = "/api/vendors/menu/"

MenuItemData = MenuItemInput | MenuItem | dict[str, Any]


class MenuRepository:
    """Repository for the menu items of a single vendor.

    The vendor context is set by list(). Every mutation validates its input
    locally first, so invalid input never reaches the network or the list.
    """

    def __init__(self, transport: TransportClient) -> None:
        """Initialize repository.

        Args:
            transport: Client for the marketplace API
        """
        self.transport = transport
        self.vendor_id: str | None = None
        self._items: list[MenuItem] = []
        self._generation = 0
        self._temp_ids = itertools.count(1)

    @property
    def items(self) -> tuple[MenuItem, ...]:
        """Read-only snapshot of the local menu."""
        return tuple(self._items)

    def close(self) -> None:
        """End the vendor context; late responses will be discarded."""
        self._generation += 1
        self.vendor_id = None
        self._items = []

    @traced("menu.list")
    async def list(self, vendor_id: str) -> list[MenuItem]:
        """Fetch a vendor's menu and replace the local list.

        Args:
            vendor_id: Vendor whose menu to load

        Returns:
            list: Menu items in server order

        Raises:
            MarketplaceClientError: On any failure; the previous list is kept
        """
        if vendor_id != self.vendor_id:
            self._generation += 1
            self.vendor_id = vendor_id
            self._items = []
        generation = self._generation

        data = await self.transport.request("GET", MENU_PATH, params={"vendor_id": vendor_id})
        items = decode_list(MenuItem, data)

        if self._is_stale(generation, "list"):
            return items

        self._items = items
        logger.info(f"Loaded {len(items)} menu items for vendor {vendor_id}")
        return list(items)

    @traced("menu.add")
    async def add(self, item: MenuItemData) -> MenuItem:
        """Add an item, showing it immediately under a temporary id.

        On success the temporary entry is replaced by the server's item. If the
        server does not return an id, the temporary id is kept.

        Args:
            item: Form data for the new item

        Returns:
            MenuItem: The confirmed item

        Raises:
            ValidationError: If the input is invalid (nothing is added)
            MarketplaceClientError: If the call fails or the reply is malformed
                (the temporary item is removed)
        """
        values = MenuItemInput.parse(item)
        generation = self._generation

        pending = MenuItem(
            id=f"{TEMPORARY_ID_PREFIX}{next(self._temp_ids)}",
            vendor_id=self.vendor_id,
            **values.model_dump(),
        )
        self._items.append(pending)

        try:
            data = await self.transport.request("POST", MENU_PATH, self._body(values))
            confirmed = self._confirmed_item(data, pending, values)
        except Exception:
            if not self._is_stale(generation, "add"):
                self._items = [i for i in self._items if i.id != pending.id]
                record_optimistic_rollback("menu_item", "add")
                logger.warning(f"Discarded unconfirmed menu item {pending.id}")
            raise

        if not self._is_stale(generation, "add"):
            self._items = [confirmed if i.id == pending.id else i for i in self._items]
            logger.info(f"Menu item {pending.id} confirmed as {confirmed.id}")
        return confirmed

    @traced("menu.update")
    async def update(self, item_id: str, item: MenuItemData) -> MenuItem:
        """Replace the item with this id.

        Args:
            item_id: Id of the item to replace
            item: New values for the item

        Returns:
            MenuItem: The updated item as confirmed by the server

        Raises:
            ValidationError: If the input is invalid or the item is still pending
            NotFoundError: If no local item has this id (no call is made)
            MarketplaceClientError: If the call fails or the reply is malformed
                (the previous values are restored)
        """
        values = MenuItemInput.parse(item)
        index = self._index_of(item_id)
        generation = self._generation

        previous = self._items[index]
        replacement = previous.model_copy(update=values.model_dump())
        self._items[index] = replacement

        try:
            data = await self.transport.request(
                "PUT", f"{MENU_PATH}{item_id}", self._body(values)
            )
            confirmed = self._confirmed_item(data, replacement, values).model_copy(
                update={"id": item_id}
            )
        except Exception:
            if not self._is_stale(generation, "update"):
                self._restore(item_id, previous)
                record_optimistic_rollback("menu_item", "update")
                logger.warning(f"Restored menu item {item_id} after failed update")
            raise

        if not self._is_stale(generation, "update"):
            self._items = [confirmed if i.id == item_id else i for i in self._items]
        return confirmed

    @traced("menu.remove")
    async def remove(self, item_id: str) -> None:
        """Delete the item with this id, removing it locally right away.

        Args:
            item_id: Id of the item to delete

        Raises:
            ValidationError: If the item is still pending
            NotFoundError: If no local item has this id (no call is made)
            MarketplaceClientError: If the call fails (the item is reinserted)
        """
        index = self._index_of(item_id)
        generation = self._generation
        removed = self._items.pop(index)

        try:
            await self.transport.request("DELETE", f"{MENU_PATH}{item_id}")
        except Exception:
            if not self._is_stale(generation, "remove"):
                self._items.insert(min(index, len(self._items)), removed)
                record_optimistic_rollback("menu_item", "remove")
                logger.warning(f"Restored menu item {item_id} after failed delete")
            raise

        logger.info(f"Removed menu item {item_id}")

    def _body(self, values: MenuItemInput) -> dict[str, Any]:
        body = values.to_request_body()
        if self.vendor_id is not None:
            body["vendor_id"] = self.vendor_id
        return body

    def _index_of(self, item_id: str) -> int:
        for index, existing in enumerate(self._items):
            if existing.id == item_id:
                if existing.is_temporary:
                    raise ValidationError(
                        f"Menu item {item_id} is still being saved, try again shortly"
                    )
                return index
        raise NotFoundError("Menu item", item_id)

    def _restore(self, item_id: str, previous: MenuItem) -> None:
        self._items = [previous if i.id == item_id else i for i in self._items]

    def _is_stale(self, generation: int, operation: str) -> bool:
        if generation != self._generation:
            logger.info(f"Discarding {operation} response for a closed menu context")
            return True
        return False

    def _confirmed_item(self, data: Any, fallback: MenuItem, values: MenuItemInput) -> MenuItem:
        if isinstance(data, dict) and isinstance(data.get("item"), dict):
            data = data["item"]

        if not isinstance(data, dict) or data.get("id") is None:
            return fallback

        merged = {**values.model_dump(), "vendor_id": fallback.vendor_id, **data}
        return decode_model(MenuItem, merged)
