from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from ...errors import ProtocolError
from ..entity import Entity


@dataclass
class Response:
    """
    One page of results returned by the execution of a
    [`Query`][frodata.models.query.Query].

    The page is an ordered, finite, iterable collection of
    [`Entity`][frodata.models.entity.Entity] objects. When the query requested
    it via `include_count()`, `total_count` carries the number of entities
    matching the query across all pages.

    Example:
        ```python
        products = service.entity_set("Products")
        page = products.query().include_count().limit(5).execute()

        print(f"{len(page)} of {page.total_count} products")
        for product in page:
            print(product["Name"])
        ```

    Attributes:
        entities (List[Entity]): The entities of this page, in server order.
        total_count (Optional[int]): The `@odata.count` annotation, if requested.
        next_link (Optional[str]): The `@odata.nextLink` annotation, set when
            the service applied server-driven paging.
        context (Optional[str]): The `@odata.context` annotation.
    """

    entities: List[Entity] = field(default_factory=list)
    total_count: Optional[int] = None
    next_link: Optional[str] = None
    context: Optional[str] = None

    @classmethod
    def _from_dict(cls, payload: Dict[str, Any], entity_type: str) -> "Response":
        rows = payload.get("value")
        if not isinstance(rows, list):
            raise ProtocolError(
                "Malformed collection response: missing 'value' array"
            )
        try:
            entities = [Entity.from_payload(row, entity_type) for row in rows]
        except TypeError as e:
            raise ProtocolError(f"Malformed collection response: {e}") from e

        total_count = payload.get("@odata.count")
        if total_count is not None:
            try:
                total_count = int(total_count)
            except (TypeError, ValueError) as e:
                raise ProtocolError(
                    f"Malformed collection response: invalid '@odata.count' {total_count!r}"
                ) from e
        return cls(
            entities=entities,
            total_count=total_count,
            next_link=payload.get("@odata.nextLink"),
            context=payload.get("@odata.context"),
        )

    def __len__(self) -> int:
        """Returns the number of entities in this page."""
        return len(self.entities)

    def __iter__(self) -> Iterator[Entity]:
        """Iterates over the entities of this page."""
        return iter(self.entities)

    def __getitem__(self, index: int) -> Entity:
        """Retrieves a specific entity by its position in the page."""
        return self.entities[index]

    def is_empty(self) -> bool:
        """Returns True if the page contains no entities."""
        return len(self.entities) == 0
