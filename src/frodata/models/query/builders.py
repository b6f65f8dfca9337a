"""
This module provides the "Fluent" API for querying one entity collection of an
OData service.

A [`Query`][frodata.models.query.builders.Query] accumulates the system query
options (`$filter`, `$search`, `$skip`, `$top`, `$count`, `$select`,
`$expand`, `$orderby`) through chainable builder methods. Every builder method
mutates the query and returns **the same instance**, so a chain can be
written in one expression and the query can still be reused afterwards:

```python
products = service.entity_set("Products")
query = products.query()
query.where(query["Price"].gt(10)).order_by("Price desc").limit(5)

print(query)             # Products?$filter=Price gt 10&$orderby=Price desc&$top=5
page = query.execute()   # one page of Entity objects
print(query.count())     # number of products priced above 10
```

Execution never consumes or mutates the query: `execute()`, `count()`,
`is_empty()`, `find()` and `in_batches()` derive their requests from the
current state each time they are called.
"""

from typing import Any, List, Mapping, Union

from ...comm.config import DEFAULT_BATCH_SIZE
from ...enum import QueryOption
from ...errors import ProtocolError, ValidationError
from ...logging_config import get_logger
from ..entity import Entity
from .batches import BatchCursor
from .expressions import AndCriterion, PropertyCriteria, _QueryCriterion
from .parameters import QueryParameters
from .protocols import EntitySetProtocol
from .response import Response

# Set the hierarchical logger
logger = get_logger(__name__)

_BYTE_ORDER_MARK = "\ufeff"


def _validate_criterion_type(criterion: Any):
    """
    Private helper to validate an argument of `where()`.

    Raises a TypeError if it is not a criterion built via `query[...]`.
    """
    if not isinstance(criterion, _QueryCriterion):
        raise TypeError(
            f"Invalid criterion type. Expected a criterion built via 'query[<property>]', but got '{type(criterion).__name__}'."
        )


def _validate_non_negative(value: Any, method: str):
    # bool is an int subclass: reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"'{method}' expects an integer, got '{type(value).__name__}'"
        )
    if value < 0:
        raise ValidationError(f"'{method}' expects a non-negative integer, got {value}")


def _join_names(names) -> str:
    return ",".join(str(n) for n in names)


def _parse_count(text: str, url: str) -> int:
    body = text.lstrip(_BYTE_ORDER_MARK).strip()
    if not (body.isascii() and body.isdigit()):
        raise ProtocolError(
            f"Malformed count response: expected a non-negative integer, got '{body[:50]}'",
            url=url,
        )
    return int(body)


class Query:
    """
    A chainable query over one entity collection.

    The query is bound to its [`EntitySet`][frodata.models.schema.EntitySet]
    for its whole lifetime. It owns a
    [`QueryParameters`][frodata.models.query.parameters.QueryParameters] set,
    whose serialized form is returned by `str(query)`:

    | Call | `str(query)` |
    | --- | --- |
    | *(none)* | `Products` |
    | `query.where(query["Name"].eq("Bread"))` | `Products?$filter=Name eq 'Bread'` |
    | `query.search('"mountain bike"').search("NOT clothing")` | `Products?$search="mountain bike" AND NOT clothing` |
    | `query.skip(5)` | `Products?$skip=5` |
    | `query.limit(5)` | `Products?$top=5` |
    | `query.include_count()` | `Products?$count=true` |
    | `query.select("Name", "Price")` | `Products?$select=Name,Price` |
    | `query.expand("Supplier")` | `Products?$expand=Supplier` |
    | `query.order_by("Name", "Price")` | `Products?$orderby=Name,Price` |

    When several options are set, they are serialized in the order in which
    they were first set.

    Note: Thread Safety
        A query is a single-owner object: builder methods write the same
        parameter set that `str()` and the execution methods read.
    """

    def __init__(self, entity_set: EntitySetProtocol):
        """
        Users normally obtain a query via
        [`EntitySet.query()`][frodata.models.schema.EntitySet.query].

        Args:
            entity_set: The collection this query targets.
        """
        self._entity_set = entity_set
        self._params = QueryParameters()
        self._criteria: List[_QueryCriterion] = []

    # --- Properties ---

    @property
    def entity_set(self) -> EntitySetProtocol:
        """The collection this query is bound to."""
        return self._entity_set

    @property
    def params(self) -> Mapping[str, Any]:
        """
        A read-only view of the query options, e.g. `{'$skip': 5}`.
        """
        return self._params.as_mapping()

    # --- Criteria ---

    def __getitem__(self, name: str) -> PropertyCriteria:
        """
        Returns a criterion builder for the property called `name`.

        Example:
            ```python
            query.where(query["Name"].eq("Bread"))
            ```

        Raises:
            UnknownPropertyError: If the entity type does not declare a
                structural property with this name.
        """
        prop = self._entity_set.entity_type.get_property(str(name))
        return PropertyCriteria(prop)

    # --- Builder methods ---

    def where(self, criterion: _QueryCriterion) -> "Query":
        """
        Adds a filter criterion, combined with a logical AND with the
        criteria already present.

        Args:
            criterion: A criterion built via `query[<property>]`, possibly
                combined with `&` / `|`.

        Returns:
            The `Query` instance for method chaining.

        Raises:
            TypeError: If `criterion` is not a query criterion.
        """
        _validate_criterion_type(criterion)
        self._criteria.append(criterion)

        if len(self._criteria) == 1:
            filter_expr = criterion.to_filter()
        else:
            filter_expr = AndCriterion.combine(*self._criteria).to_filter()
        self._params.set(QueryOption.Filter, filter_expr)
        return self

    def search(self, term: str) -> "Query":
        """
        Appends a free-text search term.

        Terms are passed verbatim (quoting and `AND`/`OR`/`NOT` operators
        included). Successive calls are combined with ` AND `, so
        `search('"mountain bike"').search("NOT clothing")` searches for
        `"mountain bike" AND NOT clothing`.

        Returns:
            The `Query` instance for method chaining.
        """
        current = self._params.get(QueryOption.Search)
        self._params.set(
            QueryOption.Search, f"{current} AND {term}" if current else term
        )
        return self

    def skip(self, n: int) -> "Query":
        """
        Skips the first `n` entities of the result.

        Returns:
            The `Query` instance for method chaining.

        Raises:
            ValidationError: If `n` is not a non-negative integer.
        """
        _validate_non_negative(n, "skip")
        self._params.set(QueryOption.Skip, n)
        return self

    def limit(self, n: int) -> "Query":
        """
        Returns at most `n` entities (`$top`).

        Returns:
            The `Query` instance for method chaining.

        Raises:
            ValidationError: If `n` is not a non-negative integer.
        """
        _validate_non_negative(n, "limit")
        self._params.set(QueryOption.Top, n)
        return self

    def include_count(self) -> "Query":
        """
        Requests the total number of matching entities along with the
        results (available as `Response.total_count`).

        Returns:
            The `Query` instance for method chaining.
        """
        self._params.set(QueryOption.Count, "true")
        return self

    def _set_names(self, option: QueryOption, names) -> "Query":
        if names:
            self._params.set(option, _join_names(names))
        else:
            self._params.remove(option)
        return self

    def select(self, *names: str) -> "Query":
        """
        Restricts the returned fields to `names`, replacing any previous
        selection. Calling it with no names clears the selection.

        Returns:
            The `Query` instance for method chaining.
        """
        return self._set_names(QueryOption.Select, names)

    def expand(self, *names: str) -> "Query":
        """
        Requests the inline expansion of the navigation properties `names`,
        replacing any previous expansion. Calling it with no names clears it.

        Returns:
            The `Query` instance for method chaining.
        """
        return self._set_names(QueryOption.Expand, names)

    def order_by(self, *names: str) -> "Query":
        """
        Orders the results by `names`, in the given order, replacing any
        previous ordering. Entries like `"Price desc"` are passed verbatim.
        Calling it with no names clears the ordering.

        Returns:
            The `Query` instance for method chaining.
        """
        return self._set_names(QueryOption.OrderBy, names)

    # --- Serialization ---

    def _url_for(self, params: QueryParameters) -> str:
        query_string = params.to_query_string()
        if not query_string:
            return self._entity_set.name
        return f"{self._entity_set.name}?{query_string}"

    def __str__(self) -> str:
        return self._url_for(self._params)

    def __repr__(self) -> str:
        return f"Query({str(self)!r})"

    # --- Execution ---

    def _fetch(self, params: QueryParameters) -> Response:
        url = self._url_for(params)
        logger.debug(f"Executing query '{url}'")
        payload = self._entity_set.service.get_json(url)
        return Response._from_dict(payload, self._entity_set.entity_type.full_name)

    def execute(self) -> Response:
        """
        Executes the query and returns one page of results.

        Returns:
            Response: The entities matching the query.

        Raises:
            TransportError: If the request could not be completed.
            ProtocolError: If the service answered with an error status or an
                unreadable payload.
        """
        return self._fetch(self._params)

    def find(self, key: Union[Any, Mapping[str, Any]]) -> Entity:
        """
        Retrieves the single entity identified by `key`.

        The request addresses the key segment of the collection
        (`Products(0)`): filters, search and paging options are ignored,
        while `select()` and `expand()` are honored.

        Example:
            ```python
            product = query.expand("Categories").find(0)
            print(product["Categories"])
            ```

        Args:
            key: The key value, or a `{name: value}` mapping for composite keys.

        Raises:
            NotFoundError: If no entity has this key.
            TransportError: If the request could not be completed.
            ProtocolError: If the service answered with another error status.
            ValidationError: If `key` does not match the declared key.
        """
        entity_type = self._entity_set.entity_type
        url = f"{self._entity_set.name}{entity_type.key_segment(key)}"
        query_string = self._params.subset(
            (QueryOption.Select, QueryOption.Expand)
        ).to_query_string()
        if query_string:
            url = f"{url}?{query_string}"

        logger.debug(f"Finding entity '{url}'")
        payload = self._entity_set.service.get_json(url)
        try:
            return Entity.from_payload(payload, entity_type.full_name)
        except TypeError as e:
            raise ProtocolError(f"Malformed entity response: {e}", url=url) from e

    def count(self) -> int:
        """
        Returns the number of entities matching the current filter and
        search options, via the `$count` path segment.

        Raises:
            TransportError: If the request could not be completed.
            ProtocolError: If the service answered with an error status or
                the body is not a non-negative integer.
        """
        query_string = self._params.subset(
            (QueryOption.Filter, QueryOption.Search)
        ).to_query_string()
        url = f"{self._entity_set.name}/$count"
        if query_string:
            url = f"{url}?{query_string}"

        logger.debug(f"Counting entities '{url}'")
        return _parse_count(self._entity_set.service.get_text(url), url)

    def is_empty(self) -> bool:
        """Returns True if no entity matches the current filter and search options."""
        return self.count() == 0

    def in_batches(self, of: int = DEFAULT_BATCH_SIZE) -> BatchCursor:
        """
        Returns a cursor fetching the results in pages of `of` entities.

        Example:
            ```python
            # page by page
            for page in query.in_batches(of=100).pages():
                print(len(page))

            # entity by entity (pages are fetched lazily)
            for product in query.in_batches(of=100):
                print(product["Name"])
            ```

        Raises:
            ValidationError: If `of` is not a positive integer.
        """
        return BatchCursor(self, of)
