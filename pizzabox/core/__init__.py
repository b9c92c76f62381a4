"""Local storage and the order lifecycle built on the vendor client."""

from .cache import CacheStore, ScopedStore
from .session import OrderSession

__all__ = ["CacheStore", "ScopedStore", "OrderSession"]
