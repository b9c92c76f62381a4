"""
Error types shared across pizzabox.

Transport, cache and input failures each get one class; vendor-reported
failures live in ``pizzabox.vendor.status`` because they carry a decoded
severity.
"""

from typing import Optional, Any, Dict


class PizzaboxError(Exception):
    """
    Base exception for all pizzabox errors.

    Provides a message plus a details mapping for structured reporting.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the error.

        Args:
            message: Error message
            details: Optional detailed error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NetworkError(PizzaboxError):
    """
    Raised when a vendor call never produced an HTTP response.

    Covers DNS failures, refused connections and timeouts.
    """

    def __init__(self, message: str,
                 url: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.url = url
        self.details.update({'url': url})


class ResponseFormatError(PizzaboxError):
    """
    Raised when the vendor answered with something other than a JSON envelope.

    The usual cause is an HTML error page from a misrouted host.
    """

    def __init__(self, message: str,
                 url: Optional[str] = None,
                 status_code: Optional[int] = None,
                 body_preview: str = '',
                 details: Optional[Dict[str, Any]] = None):
        """
        Initialize response format error.

        Args:
            message: Error message
            url: Requested URL
            status_code: HTTP status of the response
            body_preview: First bytes of the offending body
            details: Additional error context
        """
        super().__init__(message, details)
        self.url = url
        self.status_code = status_code
        self.body_preview = body_preview
        self.details.update({
            'url': url,
            'status_code': status_code,
            'body_preview': body_preview
        })


class ValidationError(PizzaboxError):
    """
    Raised when card, order or address input is malformed.
    """

    def __init__(self, message: str,
                 field: Optional[str] = None,
                 value: Any = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.field = field
        self.value = value
        self.details.update({'field': field})


class ParseError(ValidationError):
    """Raised when free-text address input cannot be decomposed."""


class NotFoundError(PizzaboxError):
    """
    Raised when a lookup comes back empty.

    Used for missing cache keys, unknown order names and addresses with no
    nearby store.
    """

    def __init__(self, message: str,
                 key: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.key = key
        self.details.update({'key': key})
