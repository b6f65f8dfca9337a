"""
Schema Module.

This module defines the declared shape of an OData service, as far as the Query
API needs it: entity types, their structural and navigation properties, and
the entity sets that expose them.

The SDK does not parse `$metadata` documents. Schemas are declared in code and
registered on an [`ODataService`][frodata.comm.ODataService]:

Example:
    ```python
    from frodata import ODataService, EntityType, Property, NavigationProperty

    product = EntityType(
        name="Product",
        namespace="ODataDemo",
        key=["ID"],
        properties=[
            Property(name="ID", type="Edm.Int32", nullable=False),
            Property(name="Name", type="Edm.String"),
            Property(name="Price", type="Edm.Double"),
        ],
        navigation_properties=[
            NavigationProperty(name="Categories", type="ODataDemo.Category", collection=True),
        ],
    )

    with ODataService.connect("http://services.odata.org/V4/OData/OData.svc") as service:
        products = service.register_entity_set("Products", product)
    ```
"""

import datetime
import decimal
import uuid
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Union
from urllib.parse import quote

import pydantic

from ..errors import UnknownPropertyError, ValidationError

if TYPE_CHECKING:
    from ..comm.odata_service import ODataService
    from .entity import Entity
    from .query.builders import Query


_TEXTUAL_TYPES = frozenset({"Edm.String"})

_NUMERIC_TYPES = frozenset(
    {
        "Edm.Byte",
        "Edm.SByte",
        "Edm.Int16",
        "Edm.Int32",
        "Edm.Int64",
        "Edm.Single",
        "Edm.Double",
        "Edm.Decimal",
    }
)

_BARE_TYPES = frozenset(
    {
        "Edm.DateTimeOffset",
        "Edm.Date",
        "Edm.TimeOfDay",
        "Edm.Guid",
    }
)


def _path_literal(literal: str) -> str:
    # quotes stay readable, anything else reserved in a path segment is escaped
    return quote(literal, safe="'")


def _render_temporal(value: Any) -> str:
    if isinstance(value, datetime.datetime):
        if value.tzinfo is None:
            # naive datetimes are assumed to be UTC
            return value.isoformat() + "Z"
        return value.isoformat()
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


class Property(pydantic.BaseModel):
    """
    A structural (scalar) property of an entity type.

    The property owns the literal rendering rules used when a value is
    compared against it in a `$filter` expression or used as a key segment.

    | Declared type | Python value | Rendered literal |
    | --- | --- | --- |
    | `Edm.String` | `"Bread"` | `'Bread'` (embedded quotes doubled) |
    | `Edm.Int32`, `Edm.Double`, ... | `2.5` | `2.5` |
    | `Edm.Boolean` | `True` | `true` |
    | `Edm.DateTimeOffset` | `datetime(1992, 1, 1, tzinfo=utc)` | `1992-01-01T00:00:00+00:00` |
    | `Edm.Guid` | `uuid.UUID(...)` | bare guid |
    | `Edm.Duration` | `"P1D"` | `duration'P1D'` |
    | any | `None` | `null` |

    Attributes:
        name: The property name, as written in the query string.
        type: The declared type tag (e.g. `"Edm.String"`).
        nullable: Whether the property accepts `null`.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    name: str
    type: str = "Edm.String"
    nullable: bool = True

    @property
    def is_textual(self) -> bool:
        return self.type in _TEXTUAL_TYPES

    @property
    def is_numeric(self) -> bool:
        return self.type in _NUMERIC_TYPES

    def url_value(self, value: Any) -> str:
        """
        Renders `value` as an OData literal for this property.

        Raises:
            ValidationError: If the value cannot be represented with the
                declared type (e.g. a string compared to an `Edm.Int32`).
        """
        if value is None:
            if not self.nullable:
                raise ValidationError(
                    f"Property '{self.name}' is not nullable, cannot compare to null"
                )
            return "null"

        if self.is_textual:
            return "'{}'".format(str(value).replace("'", "''"))

        if self.is_numeric:
            if isinstance(value, bool) or not isinstance(
                value, (int, float, decimal.Decimal)
            ):
                raise ValidationError(
                    f"Property '{self.name}' of type '{self.type}' expects a number, got '{type(value).__name__}'"
                )
            return str(value)

        if self.type == "Edm.Boolean":
            if not isinstance(value, bool):
                raise ValidationError(
                    f"Property '{self.name}' of type 'Edm.Boolean' expects a bool, got '{type(value).__name__}'"
                )
            return "true" if value else "false"

        if self.type in _BARE_TYPES:
            if isinstance(value, uuid.UUID):
                return str(value)
            return _render_temporal(value)

        if self.type == "Edm.Duration":
            return f"duration'{value}'"

        if not self.type.startswith("Edm."):
            # enumeration member, e.g. Namespace.Color'Red'
            return f"{self.type}'{value}'"

        return str(value)


class NavigationProperty(pydantic.BaseModel):
    """
    A navigation property, i.e. a link to related entities.

    Navigation properties are the names accepted by
    [`Query.expand()`][frodata.models.query.Query.expand].

    Attributes:
        name: The navigation property name.
        type: The fully qualified type of the related entity.
        collection: True if the property links to many entities.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    name: str
    type: str
    collection: bool = False


class EntityType(pydantic.BaseModel):
    """
    The declared type of the entities in an entity set.

    Attributes:
        name: The unqualified type name (e.g. `"Product"`).
        namespace: The schema namespace (e.g. `"ODataDemo"`).
        key: The names of the key properties, in key order.
        properties: The structural properties.
        navigation_properties: The navigation properties.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    name: str
    namespace: str
    key: List[str] = pydantic.Field(default_factory=list)
    properties: List[Property] = pydantic.Field(default_factory=list)
    navigation_properties: List[NavigationProperty] = pydantic.Field(
        default_factory=list
    )

    @pydantic.model_validator(mode="after")
    def check_key_declared(self) -> "EntityType":
        declared = {p.name for p in self.properties}
        missing = [k for k in self.key if k not in declared]
        if missing:
            raise ValueError(
                f"Key properties {missing} are not declared by entity type '{self.name}'"
            )
        return self

    @property
    def full_name(self) -> str:
        """The namespace-qualified name, e.g. `ODataDemo.Product`."""
        return f"{self.namespace}.{self.name}"

    def has_property(self, name: str) -> bool:
        return any(p.name == name for p in self.properties)

    def get_property(self, name: str) -> Property:
        """
        Returns the structural property called `name`.

        Raises:
            UnknownPropertyError: If the entity type does not declare it.
        """
        for prop in self.properties:
            if prop.name == name:
                return prop
        raise UnknownPropertyError(name, self.full_name)

    def key_properties(self) -> List[Property]:
        return [self.get_property(k) for k in self.key]

    def key_segment(self, key: Union[Any, Mapping[str, Any]]) -> str:
        """
        Renders the parenthesized key segment used to address one entity.

        A single-property key accepts the bare value (`0` -> `(0)`); composite
        keys require a mapping (`{"OrderID": 1, "ProductID": 2}` ->
        `(OrderID=1,ProductID=2)`). Key literals are percent-encoded for the
        URL path (`"a/b"` -> `('a%2Fb')`).

        Raises:
            ValidationError: If the entity type has no key, or the supplied
                key does not match the declared key properties.
        """
        key_props = self.key_properties()
        if not key_props:
            raise ValidationError(f"Entity type '{self.full_name}' declares no key")

        if isinstance(key, Mapping):
            if set(key.keys()) != {p.name for p in key_props}:
                raise ValidationError(
                    f"Expected key properties {self.key} for '{self.full_name}', got {list(key.keys())}"
                )
            if len(key_props) == 1:
                return f"({_path_literal(key_props[0].url_value(key[key_props[0].name]))})"
            parts = [
                f"{p.name}={_path_literal(p.url_value(key[p.name]))}" for p in key_props
            ]
            return "({})".format(",".join(parts))

        if len(key_props) > 1:
            raise ValidationError(
                f"Entity type '{self.full_name}' has a composite key {self.key}: pass a mapping"
            )
        return f"({_path_literal(key_props[0].url_value(key))})"


class EntitySet:
    """
    A named, typed collection of entities exposed by a service.

    An `EntitySet` is the bound collection of a
    [`Query`][frodata.models.query.Query]; it is normally obtained via
    [`ODataService.entity_set()`][frodata.comm.ODataService.entity_set].

    Example:
        ```python
        products = service.entity_set("Products")
        query = products.query().where(products.query()["Price"].gt(10))
        print(query.count())
        ```
    """

    def __init__(self, name: str, entity_type: EntityType, service: "ODataService"):
        self._name = name
        self._entity_type = entity_type
        self._service = service

    @property
    def name(self) -> str:
        """The collection name, as written in the URL (e.g. `"Products"`)."""
        return self._name

    @property
    def entity_type(self) -> EntityType:
        return self._entity_type

    @property
    def service(self) -> "ODataService":
        return self._service

    def query(self) -> "Query":
        """Returns a new, empty [`Query`][frodata.models.query.Query] over this set."""
        # Delayed import to avoid circular dependency
        from .query.builders import Query

        return Query(self)

    def find(self, key: Union[Any, Dict[str, Any]]) -> "Entity":
        """Shortcut for `entity_set.query().find(key)`."""
        return self.query().find(key)

    def count(self) -> int:
        """Shortcut for `entity_set.query().count()`."""
        return self.query().count()

    def __repr__(self) -> str:
        return f"EntitySet(name={self._name!r}, type={self._entity_type.full_name!r})"
