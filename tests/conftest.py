"""
Shared fixtures for pizzabox tests.

Provides a temporary cache store, canned vendor payloads and a fake vendor
client that records every call instead of touching the network.
"""

import json
from typing import Any, Callable, Dict, List, Tuple, Union

import pytest

from pizzabox.core.cache import CacheStore
from pizzabox.vendor.address import StreetAddr
from pizzabox.vendor.order import Order, PLACE_ORDER_PATH, PRICE_ORDER_PATH
from pizzabox.vendor.store import STORE_LOCATOR_PATH, STORE_MENU_PATH, STORE_PROFILE_PATH


Response = Union[bytes, Callable[..., bytes]]


class FakeClient:
    """Stand-in for VendorClient that serves canned responses per path."""

    def __init__(self, routes: Dict[str, Response] = None):
        self.routes: Dict[str, Response] = dict(routes or {})
        self.calls: List[Tuple[str, str, Dict[str, Any], Any]] = []
        self.closed = False

    def get(self, path, params=None, **path_params):
        self.calls.append(("GET", path, dict(params or {}), path_params))
        return self._respond(path, params=params, **path_params)

    def post(self, path, params=None, body=None, **path_params):
        self.calls.append(("POST", path, dict(params or {}), body))
        return self._respond(path, params=params, body=body, **path_params)

    def _respond(self, path, **kwargs):
        if path not in self.routes:
            raise AssertionError(f"unexpected vendor call to {path}")
        response = self.routes[path]
        if callable(response):
            return response(**kwargs)
        return response

    def count(self, path: str) -> int:
        return sum(1 for call in self.calls if call[1] == path)

    def close(self):
        self.closed = True


def envelope(status: int = 0, items=None, **extra) -> bytes:
    data = {"Status": status, "StatusItems": [], "Order": {"Status": status, "StatusItems": items or []}}
    data.update(extra)
    return json.dumps(data).encode()


STORE_LOCATOR = {
    "Status": 0,
    "StatusItems": [],
    "Stores": [
        {"StoreID": "4335", "IsDeliveryStore": True, "ServiceIsOpen": {"Carryout": False, "Delivery": True}},
        {"StoreID": "4336", "IsDeliveryStore": True, "ServiceIsOpen": {"Carryout": True, "Delivery": True}},
    ],
}

STORE_PROFILE = {
    "Status": 0,
    "StatusItems": [],
    "StoreID": "4336",
    "Phone": "202-555-0143",
    "AddressDescription": "1300 L St NW\nWashington, DC 20005",
    "IsOpen": True,
    "ServiceIsOpen": {"Carryout": True, "Delivery": True},
    "LanguageCode": "en",
}

STORE_MENU = {
    "Status": 0,
    "StatusItems": [],
    "Categorization": {
        "Food": {
            "Categories": [
                {"Code": "Pizza", "Name": "Pizza", "Products": ["S_PIZZA"], "Categories": []},
            ]
        }
    },
    "Products": {
        "S_PIZZA": {"Code": "S_PIZZA", "Name": "Pizza", "Description": "Build your own", "Variants": ["12SCREEN"]},
    },
    "Variants": {
        "12SCREEN": {"Code": "12SCREEN", "Name": "Medium (12\") Hand Tossed Pizza", "Price": "13.99",
                     "ProductCode": "S_PIZZA"},
    },
    "Toppings": {
        "Pizza": {
            "P": {"Code": "P", "Name": "Pepperoni"},
            "C": {"Code": "C", "Name": "Cheese"},
        }
    },
}


@pytest.fixture
def db(tmp_path):
    """Provide an open cache store that is destroyed after the test."""
    store = CacheStore(tmp_path / "cache" / "test.db")
    yield store
    store.destroy()


@pytest.fixture
def white_house():
    return StreetAddr(
        street_num="1600",
        street_name="Pennsylvania Ave.",
        street="1600 Pennsylvania Ave.",
        city_name="Washington",
        state="DC",
        zipcode="20500",
    )


@pytest.fixture
def vendor_routes():
    """Routes for a happy-path vendor."""
    return {
        STORE_LOCATOR_PATH: json.dumps(STORE_LOCATOR).encode(),
        STORE_PROFILE_PATH: json.dumps(STORE_PROFILE).encode(),
        STORE_MENU_PATH: json.dumps(STORE_MENU).encode(),
        PRICE_ORDER_PATH: envelope(0),
        PLACE_ORDER_PATH: envelope(0, Order={"Status": 0, "StatusItems": [], "OrderID": "ABC123"}),
    }


@pytest.fixture
def fake_client(vendor_routes):
    return FakeClient(vendor_routes)


@pytest.fixture
def sample_order(white_house):
    order = Order(name="dinner", store_id="4336", service_method="Delivery", address=white_house)
    pizza = order.add_product("12SCREEN")
    pizza.add_topping("C", "full", "1")
    pizza.add_topping("P", "full", "1.5")
    return order
