"""
Entity Module.

Materializes the JSON rows returned by an OData service into `Entity`
objects exposing field access by name and the declared type tag.
"""

from typing import Any, Dict, Iterator, Optional

import pydantic


def _strip_annotations(payload: Any) -> Any:
    """
    Recursively removes OData control information (`@odata.context`,
    `Name@odata.type`, ...) from a JSON payload, including expanded
    navigation properties.
    """
    if isinstance(payload, dict):
        return {
            key: _strip_annotations(value)
            for key, value in payload.items()
            if "@" not in key
        }
    if isinstance(payload, list):
        return [_strip_annotations(item) for item in payload]
    return payload


class Entity(pydantic.BaseModel):
    """
    A read-only view of one entity returned by the service.

    Instances are factory-generated from server responses via
    [`Entity.from_payload()`][frodata.models.entity.Entity.from_payload];
    users should not instantiate this class directly.

    Field values are exposed exactly as decoded from JSON: expanded navigation
    properties are plain lists or dictionaries.

    Example:
        ```python
        product = service.entity_set("Products").query().expand("Categories").find(0)
        print(product.type)               # 'ODataDemo.Product'
        print(product["Name"])            # 'Bread'
        print(product["Categories"])      # [{'ID': 0, 'Name': 'Food'}]
        ```

    Attributes:
        type: The fully qualified entity type (e.g. `"ODataDemo.Product"`).
        data: The entity fields, without OData annotations.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    type: str
    data: Dict[str, Any] = pydantic.Field(default_factory=dict)

    @classmethod
    def from_payload(cls, row: Dict[str, Any], default_type: str) -> "Entity":
        """
        Builds an entity from a raw JSON row.

        Args:
            row: The decoded JSON object of one entity.
            default_type: The declared type of the entity set, used when the
                row carries no `@odata.type` annotation (derived types do).

        Raises:
            TypeError: If `row` is not a JSON object, or its `@odata.type`
                annotation is not a string.
        """
        if not isinstance(row, dict):
            raise TypeError(
                f"Expected a JSON object for an entity, got '{type(row).__name__}'"
            )
        odata_type = row.get("@odata.type")
        if odata_type is not None and not isinstance(odata_type, str):
            raise TypeError(
                f"Expected a string '@odata.type' annotation, got '{type(odata_type).__name__}'"
            )
        etype = odata_type.lstrip("#") if odata_type else default_type
        return cls(type=etype, data=_strip_annotations(row))

    def __getitem__(self, name: str) -> Any:
        try:
            return self.data[name]
        except KeyError:
            raise KeyError(
                f"Entity of type '{self.type}' has no field '{name}'"
            ) from None

    def __contains__(self, name: object) -> bool:
        return name in self.data

    def get(self, name: str, default: Optional[Any] = None) -> Any:
        return self.data.get(name, default)

    def keys(self) -> Iterator[str]:
        return iter(self.data.keys())

    def to_dict(self) -> Dict[str, Any]:
        """Returns a shallow copy of the entity fields."""
        return dict(self.data)
