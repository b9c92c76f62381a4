"""
Saved orders and the address book.

Orders are stored as JSON in the default bucket under ``user_order_<name>``.
Named addresses live in the ``addresses`` bucket.
"""

import json
from typing import IO, List, Optional

from ..errors import NotFoundError
from ..utils.logging_setup import get_logger
from ..vendor.address import StreetAddr
from ..vendor.order import Order, validate_order
from ..vendor.status import VendorError
from ..vendor.transport import VendorClient
from .cache import CacheStore


ORDER_PREFIX = "user_order_"
ADDRESS_BUCKET = "addresses"
RESET_COLOR = "\033[0m"

logger = get_logger(__name__)


def order_key(name: str) -> str:
    return ORDER_PREFIX + name


def list_orders(db: CacheStore) -> List[str]:
    """Names of all saved orders."""
    return [key[len(ORDER_PREFIX):] for key in db.keys() if key.startswith(ORDER_PREFIX)]


def get_order(name: str, db: CacheStore) -> Order:
    """
    Load a saved order.

    Raises:
        NotFoundError: no order is saved under ``name``
    """
    try:
        raw = db.get(order_key(name))
    except NotFoundError:
        raise NotFoundError(f"cannot find order {name}", key=name) from None
    return Order.from_json(raw, name=name)


def save_order(order: Order, out: IO[str], db: CacheStore,
               client: Optional[VendorClient] = None) -> Optional[VendorError]:
    """
    Save an order, then price-check it with the vendor.

    The local save is kept even when validation fails.

    Returns:
        A Warning-severity VendorError, or ``None``

    Raises:
        VendorError: the vendor reported a Failure (the order stays saved)
    """
    if not order.name:
        raise ValueError("cannot save an order without a name")
    db.put(order_key(order.name), order.to_json())
    out.write("order successfully updated.\n")
    logger.info(f"saved order {order.name!r}", extra={'order_name': order.name})

    if client is None:
        return None
    return validate_order(order, client)


def delete_order(name: str, db: CacheStore) -> None:
    if not db.delete(order_key(name)):
        raise NotFoundError(f"cannot find order {name}", key=name)


def format_order(order: Order, indent: int = 2) -> str:
    pad = " " * indent
    lines = [f"{order.name}"]
    lines.append(f"{pad}store:    {order.store_id or '-'}")
    lines.append(f"{pad}method:   {order.service_method}")
    if order.order_id:
        lines.append(f"{pad}order id: {order.order_id}")
    if order.address:
        lines.append(f"{pad}address:  {order.address.line_one()}, {order.address.locality()}")
    lines.append(f"{pad}products:")
    for product in order.products:
        lines.append(f"{pad}{pad}{product.code} x{product.qty}")
        for topping, portions in sorted(product.options.items()):
            amounts = ", ".join(f"{side}={amount}" for side, amount in sorted(portions.items()))
            lines.append(f"{pad}{pad}{pad}{topping}: {amounts}")
    return "\n".join(lines)


def print_orders(db: CacheStore, out: IO[str], verbose: bool = False, color: str = "") -> None:
    """Write the saved order names, or full summaries when ``verbose``."""
    names = sorted(list_orders(db))
    if not names:
        out.write("No orders saved.\n")
        return

    end = RESET_COLOR if color else ""
    out.write(f"{color}Your Orders{end}:\n")
    for name in names:
        if verbose:
            order = get_order(name, db)
            out.write(format_order(order) + "\n")
        else:
            out.write(f"  {name}\n")


def save_address(db: CacheStore, name: str, addr: StreetAddr) -> None:
    db.with_bucket(ADDRESS_BUCKET).put(name, addr.to_bytes())


def get_address(db: CacheStore, name: str) -> StreetAddr:
    """
    Load a named address.

    Raises:
        NotFoundError: no address is saved under ``name``
    """
    try:
        raw = db.with_bucket(ADDRESS_BUCKET).get(name)
    except NotFoundError:
        raise NotFoundError(f"no address named {name!r}", key=name) from None
    return StreetAddr.from_bytes(raw)


def list_addresses(db: CacheStore) -> List[str]:
    return db.with_bucket(ADDRESS_BUCKET).keys()


def delete_address(db: CacheStore, name: str) -> None:
    if not db.with_bucket(ADDRESS_BUCKET).delete(name):
        raise NotFoundError(f"no address named {name!r}", key=name)


def dump(db: CacheStore, out: IO[str]) -> None:
    """Write every bucket as JSON; values that are not UTF-8 are shown by size."""
    snapshot = {}
    for bucket in db.buckets():
        entries = {}
        for key, value in db.with_bucket(bucket).map().items():
            try:
                entries[key] = value.decode("utf-8")
            except UnicodeDecodeError:
                entries[key] = f"<{len(value)} bytes>"
        snapshot[bucket] = entries
    out.write(json.dumps(snapshot, indent=2) + "\n")
