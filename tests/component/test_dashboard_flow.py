"""Component tests for the vendor dashboard and directory flows.

Real SessionStore, TransportClient, AuthService and repositories are wired
together; only the HTTP layer is replaced by an in-memory fake API.
"""

from typing import Any
from unittest.mock import patch

import httpx
import pytest

from marketplace_client.auth.auth_service import AuthService
from marketplace_client.auth.session_store import MemoryTokenStorage, SessionStore
from marketplace_client.exceptions import AuthExpiredError, ServerError
from marketplace_client.models.vendor_models import Coordinates
from marketplace_client.repositories.menu_repository import MenuRepository
from marketplace_client.repositories.vendor_repository import VendorRepository
from marketplace_client.services.directory_query import DirectoryQueryEngine
from marketplace_client.services.menu_views import sort_menu_items
from marketplace_client.services.pricing import format_price
from marketplace_client.services.transport_client import AuthExpiredEvent, TransportClient

BASE_URL = "http://marketplace.test"


class FakeMarketplaceAPI:
    """Minimal in-memory stand-in for the marketplace REST API."""

    def __init__(self, vendors: list[dict], menu: list[dict]) -> None:
        self.vendors = vendors
        self.menu = list(menu)
        self.valid_token = "token-abc"
        self.next_id = 100
        self.fail_next: int | None = None
        self.calls: list[tuple[str, str]] = []

    async def __call__(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        path = url.removeprefix(BASE_URL)
        self.calls.append((method, path))
        request = httpx.Request(method, url)

        if self.fail_next is not None:
            status, self.fail_next = self.fail_next, None
            return httpx.Response(status, json={"message": "Try again later"}, request=request)

        if path == "/api/vendors/login":
            return httpx.Response(200, json={"token": self.valid_token}, request=request)
        if path == "/api/vendors/" and method == "GET":
            return httpx.Response(200, json=self.vendors, request=request)

        auth = kwargs["headers"].get("Authorization")
        if auth != f"Bearer {self.valid_token}":
            return httpx.Response(401, json={"message": "Unauthorized"}, request=request)

        if path == "/api/vendors/menu/" and method == "GET":
            return httpx.Response(200, json={"items": self.menu}, request=request)
        if path == "/api/vendors/menu/" and method == "POST":
            self.next_id += 1
            item = {**kwargs["json"], "id": str(self.next_id)}
            self.menu.append(item)
            return httpx.Response(201, json=item, request=request)

        item_id = path.removeprefix("/api/vendors/menu/")
        if method == "PUT":
            item = {**kwargs["json"], "id": item_id}
            self.menu = [item if m["id"] == item_id else m for m in self.menu]
            return httpx.Response(200, json=item, request=request)
        if method == "DELETE":
            self.menu = [m for m in self.menu if m["id"] != item_id]
            return httpx.Response(204, request=request)

        return httpx.Response(404, json={"message": "Not found"}, request=request)


@pytest.mark.component
class TestDashboardFlow:
    """End-to-end flows through the client layers."""

    @pytest.fixture
    def api(self, mock_vendors: list[dict], mock_menu_items: list[dict]) -> FakeMarketplaceAPI:
        """Create the fake API."""
        return FakeMarketplaceAPI(mock_vendors, mock_menu_items)

    @pytest.fixture
    def store(self) -> SessionStore:
        """Create an anonymous session store."""
        return SessionStore(MemoryTokenStorage())

    @pytest.fixture
    def transport(self, store: SessionStore) -> TransportClient:
        """Create a real transport client."""
        return TransportClient(base_url=BASE_URL, session_store=store)

    @pytest.mark.asyncio
    async def test_vendor_manages_menu(
        self, api: FakeMarketplaceAPI, store: SessionStore, transport: TransportClient
    ) -> None:
        """Test login, load, add, edit and delete against the fake API."""
        auth = AuthService(transport, store)
        menu = MenuRepository(transport)

        with patch("httpx.AsyncClient.request", side_effect=api.__call__):
            await auth.login("vendor@example.com", "secret")
            await menu.list("vendor_42")

            tea = await menu.add({"name": "Tea", "price": "4.00", "discount": "25"})
            await menu.update("item_2", {"name": "Pizza Margherita", "price": "14.99"})
            await menu.remove("item_1")

        assert store.is_authenticated() is True
        assert tea.id == "101"
        assert format_price(tea.display_price) == "$3.00"
        assert [item.id for item in menu.items] == ["item_2", "101"]
        assert [m["id"] for m in api.menu] == ["item_2", "101"]
        assert [item.name for item in sort_menu_items(menu.items, "price")] == [
            "Tea",
            "Pizza Margherita",
        ]

    @pytest.mark.asyncio
    async def test_expired_session_tears_down_and_notifies(
        self, api: FakeMarketplaceAPI, store: SessionStore, transport: TransportClient
    ) -> None:
        """Test that a rejected token ends the session and the menu stays consistent."""
        events: list[AuthExpiredEvent] = []
        transport.subscribe_auth_expired(events.append)
        menu = MenuRepository(transport)

        with patch("httpx.AsyncClient.request", side_effect=api.__call__):
            await AuthService(transport, store).login("vendor@example.com", "secret")
            await menu.list("vendor_42")
            before = menu.items

            api.valid_token = "rotated"
            with pytest.raises(AuthExpiredError):
                await menu.add({"name": "Tea", "price": 4})

        assert store.is_authenticated() is False
        assert menu.items == before
        assert [event.login_path for event in events] == ["/login"]

    @pytest.mark.asyncio
    async def test_failed_delete_is_rolled_back(
        self, api: FakeMarketplaceAPI, store: SessionStore, transport: TransportClient
    ) -> None:
        """Test that a server failure restores the deleted item."""
        menu = MenuRepository(transport)

        with patch("httpx.AsyncClient.request", side_effect=api.__call__):
            await AuthService(transport, store).login("vendor@example.com", "secret")
            await menu.list("vendor_42")
            api.fail_next = 503

            with pytest.raises(ServerError) as exc_info:
                await menu.remove("item_1")

        assert exc_info.value.message == "Try again later"
        assert [item.id for item in menu.items] == ["item_1", "item_2"]

    @pytest.mark.asyncio
    async def test_browse_directory(
        self, api: FakeMarketplaceAPI, transport: TransportClient
    ) -> None:
        """Test the anonymous directory flow: load, search, filter, sort."""
        vendors = VendorRepository(transport)
        engine = DirectoryQueryEngine()

        with patch("httpx.AsyncClient.request", side_effect=api.__call__):
            directory = await vendors.list_all()

        assert vendors.categories() == ["Cafe", "Bakery", "Grocery"]
        assert [v.id for v in engine.apply(directory, query="  ")] == ["1", "2", "3"]
        assert [v.id for v in engine.apply(directory, category="Cafe")] == ["1"]

        near_bakery = Coordinates(latitude=40.73, longitude=-73.94)
        assert [v.id for v in engine.apply(directory, reference=near_bakery)] == ["2", "1", "3"]
