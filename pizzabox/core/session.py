"""
Store and menu access with a local menu cache.
"""

import time
from typing import Callable, Optional

from ..errors import NotFoundError
from ..utils.logging_setup import get_logger
from ..vendor.address import StreetAddr
from ..vendor.menu import MENU_TTL, Menu
from ..vendor.store import Store, fetch_menu, nearest_store
from ..vendor.transport import VendorClient
from .cache import CacheStore


MENU_KEY_PREFIX = "menu_"

logger = get_logger(__name__)


def menu_key(store_id: str) -> str:
    return MENU_KEY_PREFIX + store_id


class OrderSession:
    """
    Entry point for store and menu lookups.

    The vendor client, cache store and clock are passed in explicitly so a
    session can run against test doubles.
    """

    def __init__(self, client: VendorClient, db: CacheStore,
                 clock: Callable[[], float] = time.time,
                 menu_ttl: float = MENU_TTL):
        self.client = client
        self.db = db
        self.clock = clock
        self.menu_ttl = menu_ttl

    def nearest_store(self, address: StreetAddr, service: str) -> Store:
        return nearest_store(self.client, address, service)

    def cached_menu(self, store_id: str) -> Optional[Menu]:
        """The cached menu for a store if present and still fresh."""
        try:
            menu = Menu.from_cache(self.db.get(menu_key(store_id)))
        except NotFoundError:
            return None
        if not menu.is_fresh(self.clock(), self.menu_ttl):
            logger.info(f"cached menu for store {store_id} is stale")
            return None
        return menu

    def menu_for(self, store: Store) -> Menu:
        """
        Menu for ``store``, from cache when fresh, otherwise from the vendor.

        A refetched menu replaces the cached one before it is returned.
        """
        menu = self.cached_menu(store.store_id)
        if menu is not None:
            logger.debug(f"using cached menu for store {store.store_id}")
            return menu

        data = fetch_menu(self.client, store.store_id, lang=store.profile.get("LanguageCode", "en") or "en")
        menu = Menu(store_id=store.store_id, data=data, fetched_at=self.clock())
        self.db.put(menu_key(store.store_id), menu.to_cache())
        logger.info(f"cached menu for store {store.store_id}")
        return menu

    def clear_menu(self, store_id: str) -> bool:
        return self.db.delete(menu_key(store_id))

    def clear_menus(self) -> int:
        """Drop every cached menu; returns how many were removed."""
        removed = 0
        for key in self.db.keys():
            if key.startswith(MENU_KEY_PREFIX) and self.db.delete(key):
                removed += 1
        return removed
