"""
Error Taxonomy.

Every exception raised by the SDK derives from `FrODataError`, so callers can
catch the whole family with a single clause. The concrete classes also derive
from the closest builtin exception (`ValueError`, `LookupError`,
`ConnectionError`) to keep generic handlers working.

| Exception | Raised by | Meaning |
| --- | --- | --- |
| `ValidationError` | builder methods, `query[...]` | invalid local input (unknown property, negative skip, ...) |
| `TransportError` | execution methods | the request never completed (DNS, refused connection, timeout) |
| `ProtocolError` | execution methods | non-success status or malformed response body |
| `NotFoundError` | `find()` | the requested key does not exist in the collection |
"""

from typing import Optional


class FrODataError(Exception):
    """Base class for all the SDK errors."""


class ValidationError(FrODataError, ValueError):
    """Invalid input passed to a builder or schema lookup."""


class UnknownPropertyError(ValidationError, LookupError):
    """The property name is not declared by the entity type."""

    def __init__(self, property_name: str, entity_type: str):
        self.property_name = property_name
        self.entity_type = entity_type
        super().__init__(
            f"Property '{property_name}' is not declared by entity type '{entity_type}'"
        )


class UnknownEntitySetError(ValidationError, LookupError):
    """The entity set name is not registered in the service."""

    def __init__(self, entity_set_name: str, service_name: str):
        self.entity_set_name = entity_set_name
        self.service_name = service_name
        super().__init__(
            f"Entity set '{entity_set_name}' is not registered in service '{service_name}'"
        )


class TransportError(FrODataError, ConnectionError):
    """The request could not be delivered or its response could not be read."""


class ProtocolError(FrODataError):
    """
    The service answered with a non-success status or an unreadable payload.

    Attributes:
        status_code: The HTTP status, if a response was received.
        url: The requested URL, if known.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ):
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class NotFoundError(ProtocolError, LookupError):
    """The requested entity does not exist (HTTP 404)."""
