"""
Per-invocation application state.

One ``AppContext`` is built for each command run. It owns the open cache store
and HTTP session and must be closed on every exit path.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .config import Config, ConfigManager
from .core.cache import CacheStore
from .core.orders import get_address
from .core.session import OrderSession
from .errors import NotFoundError
from .utils.logging_setup import get_logger
from .vendor.address import StreetAddr, from_user_address
from .vendor.store import Store
from .vendor.transport import VendorClient


DATABASE_NAME = "pizzabox.db"

logger = get_logger(__name__)


@dataclass
class AppContext:
    """Open resources and settings for one command."""
    manager: ConfigManager
    db: CacheStore
    client: VendorClient
    address_name: str = ""
    service: str = ""
    _store: Optional[Store] = field(default=None, repr=False)

    @classmethod
    def open(cls, manager: ConfigManager, db_path: Optional[Path] = None,
             client: Optional[VendorClient] = None, **kwargs) -> "AppContext":
        config = manager.load()
        db = CacheStore(db_path or manager.folder / "cache" / DATABASE_NAME)
        try:
            client = client or VendorClient(timeout=config.timeout)
        except Exception:
            db.close()
            raise
        logger.debug(f"opened cache store {db.path}")
        return cls(manager=manager, db=db, client=client, **kwargs)

    @property
    def config(self) -> Config:
        return self.manager.load()

    @property
    def session(self) -> OrderSession:
        return OrderSession(self.client, self.db)

    def service_method(self) -> str:
        return self.service or self.config.service

    def address(self) -> StreetAddr:
        """
        The address to order to.

        A name given on the command line wins, then the configured default
        address name, then the address fields of the config file.
        """
        name = self.address_name or self.config.default_address_name
        if name:
            return get_address(self.db, name)
        addr = from_user_address(self.config.address)
        if not addr.street:
            raise NotFoundError("no address configured, use 'pizzabox address --new' or 'pizzabox config set'")
        return addr

    def store(self) -> Store:
        if self._store is None:
            self._store = self.session.nearest_store(self.address(), self.service_method())
        return self._store

    def close(self) -> None:
        try:
            self.client.close()
        finally:
            self.db.close()
