"""pizzabox - order from the Domino's API on the command line."""

__version__ = "0.1.0"

from .errors import PizzaboxError, NetworkError, ResponseFormatError, ValidationError, ParseError, NotFoundError
from .vendor.status import VendorError, is_ok, is_warning, is_failure

__all__ = [
    "PizzaboxError", "NetworkError", "ResponseFormatError", "ValidationError",
    "ParseError", "NotFoundError", "VendorError", "is_ok", "is_warning",
    "is_failure", "__version__",
]
