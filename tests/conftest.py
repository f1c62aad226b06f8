"""Shared pytest fixtures and configuration for all tests."""

from typing import Any

import httpx
import pytest

from marketplace_client.auth.session_store import MemoryTokenStorage, SessionStore


def json_response(status_code: int, payload: Any = None) -> httpx.Response:
    """Build an httpx response carrying a JSON body (empty body for None)."""
    request = httpx.Request("GET", "http://marketplace.test")
    if payload is None:
        return httpx.Response(status_code, request=request)
    return httpx.Response(status_code, json=payload, request=request)


@pytest.fixture
def mock_vendor_id() -> str:
    """Fixture providing a standard test vendor ID."""
    return "vendor_42"


@pytest.fixture
def mock_vendors() -> list[dict]:
    """Fixture providing a sample vendor directory as returned by the API."""
    return [
        {
            "id": "1",
            "name": "Morning Brew",
            "description": "Specialty coffee and pastries",
            "category": "Cafe",
            "location": "12 Main St",
            "rating": 4.6,
            "offers": "10% off lattes",
            "latitude": 40.7128,
            "longitude": -74.0060,
        },
        {
            "id": "2",
            "name": "Golden Crust",
            "description": "Sourdough loaves baked daily",
            "category": "Bakery",
            "location": "48 Baker Ave",
            "rating": 4.2,
            "latitude": 40.7306,
            "longitude": -73.9352,
        },
        {
            "id": "3",
            "name": "Fresh Mart",
            "description": "Neighbourhood grocery with organic produce",
            "category": "Grocery",
        },
    ]


@pytest.fixture
def mock_menu_items() -> list[dict]:
    """Fixture providing sample menu items as returned by the API."""
    return [
        {
            "id": "item_1",
            "name": "Special Burger",
            "description": "Delicious burger with special sauce",
            "price": 12.99,
            "discount": 20,
            "category": "Main Course",
        },
        {
            "id": "item_2",
            "name": "Pizza Margherita",
            "description": "Classic pizza with tomato sauce and mozzarella",
            "price": 15.99,
            "discount": 15,
            "category": "Pizza",
        },
    ]


@pytest.fixture
def token_storage() -> MemoryTokenStorage:
    """Fixture providing empty in-memory token storage."""
    return MemoryTokenStorage()


@pytest.fixture
def session_store(token_storage: MemoryTokenStorage) -> SessionStore:
    """Fixture providing an authenticated session store."""
    store = SessionStore(token_storage)
    store.set_token("test-token")
    return store


@pytest.fixture
def make_response() -> Any:
    """Fixture providing the json_response builder."""
    return json_response
