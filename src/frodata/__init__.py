"""
FrOData SDK - fluent Python client for OData v4 services.

This module provides the main entry points:

- **ODataService**: The gateway to a remote service and factory of entity sets.
- **Query**: The chainable builder of `$filter`, `$search`, `$select`, ... options.
- **Models**: The declared schema (entity types, properties) and the returned entities.

Example:
    >>> from frodata import ODataService
    >>> with ODataService.connect("http://services.odata.org/V4/OData/OData.svc") as service:
    ...     products = service.register_entity_set("Products", product_type)
    ...     query = products.query()
    ...     bread = query.where(query["Name"].eq("Bread")).execute()
"""

# --- Service ---
from .comm import ODataService as ODataService, ServiceConfig as ServiceConfig

# --- Schema & Entities ---
from .models import (
    Property as Property,
    NavigationProperty as NavigationProperty,
    EntityType as EntityType,
    EntitySet as EntitySet,
    Entity as Entity,
)

# --- Query ---
from .models.query import (
    Query as Query,
    BatchCursor as BatchCursor,
    Response as Response,
    Criterion as Criterion,
    FunctionCriterion as FunctionCriterion,
    AndCriterion as AndCriterion,
    OrCriterion as OrCriterion,
    PropertyCriteria as PropertyCriteria,
    QueryParameters as QueryParameters,
)

# --- Enums ---
from .enum import QueryOption as QueryOption, ComparisonOperator as ComparisonOperator

# --- Errors ---
from .errors import (
    FrODataError as FrODataError,
    ValidationError as ValidationError,
    UnknownPropertyError as UnknownPropertyError,
    UnknownEntitySetError as UnknownEntitySetError,
    TransportError as TransportError,
    ProtocolError as ProtocolError,
    NotFoundError as NotFoundError,
)

from .logging_config import (
    get_logger as get_logger,
    setup_sdk_logging as setup_sdk_logging,
)

__all__ = [
    # Service
    "ODataService",
    "ServiceConfig",
    # Logging
    "get_logger",
    "setup_sdk_logging",
    # Schema & Entities
    "Property",
    "NavigationProperty",
    "EntityType",
    "EntitySet",
    "Entity",
    # Query
    "Query",
    "BatchCursor",
    "Response",
    "Criterion",
    "FunctionCriterion",
    "AndCriterion",
    "OrCriterion",
    "PropertyCriteria",
    "QueryParameters",
    # Enums
    "QueryOption",
    "ComparisonOperator",
    # Errors
    "FrODataError",
    "ValidationError",
    "UnknownPropertyError",
    "UnknownEntitySetError",
    "TransportError",
    "ProtocolError",
    "NotFoundError",
]


# --- Set up the top-level logger for the SDK ---

from logging import NullHandler

logging_config = get_logger()
logging_config.addHandler(NullHandler())
