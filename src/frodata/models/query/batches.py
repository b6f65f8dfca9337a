"""
Batch Reading Module.

This module provides the `BatchCursor`, a lazy, page-based iterator over the
results of a [`Query`][frodata.models.query.Query], built on the `$skip` and
`$top` options.
"""

from typing import TYPE_CHECKING, Iterator, Optional

from ...enum import QueryOption
from ...errors import ValidationError
from ...logging_config import get_logger
from ..entity import Entity
from .response import Response

if TYPE_CHECKING:
    from .builders import Query

# Set the hierarchical logger
logger = get_logger(__name__)


class BatchCursor:
    """
    Fetches the results of a query one page at a time.

    The cursor has two states: **active**, while more pages may exist, and
    **exhausted**. Each advance requests `$skip=<offset>&$top=<size>` and then
    moves the offset forward by `size`. A page holding fewer than `size`
    entities is the last one: it is returned and the cursor becomes
    exhausted. An empty page ends the iteration without being returned.

    The cursor works on a snapshot of the query options taken at creation:
    the query's own `$skip` is the starting offset, its `$top` is replaced by
    the page size, and the query itself is never modified.

    Pages can be consumed directly via `pages()` / `next_page()`, or the
    cursor can be iterated to obtain the individual entities, flattened in
    arrival order. Both modes advance the same cursor: iteration cannot be
    restarted; create a new cursor via
    [`Query.in_batches()`][frodata.models.query.Query.in_batches] instead.

    Example:
        ```python
        cursor = query.in_batches(of=5)
        for page in cursor.pages():
            print(f"offset {cursor.offset}: {len(page)} entities")
        ```
    """

    def __init__(self, query: "Query", size: int):
        """
        Internal constructor.
        Users can retrieve an instance by using `in_batches()` from a Query instance instead.
        """
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            raise ValidationError(
                f"Batch size must be a positive integer, got '{size}'"
            )

        self._query = query
        """The query the pages are derived from."""
        self._size: int = size
        """The number of entities requested per page."""
        self._params = query._params.copy()
        """Snapshot of the query options."""
        self._offset: int = self._params.get(QueryOption.Skip) or 0
        """The `$skip` value of the next page request."""
        self._exhausted: bool = False
        """Set once the end of the collection has been reached."""

    @property
    def size(self) -> int:
        return self._size

    @property
    def offset(self) -> int:
        """The offset the next page will be requested from."""
        return self._offset

    @property
    def exhausted(self) -> bool:
        """True once no more pages will be fetched."""
        return self._exhausted

    def next_page(self) -> Optional[Response]:
        """
        Fetches the next page, or returns None if the cursor is exhausted.

        If the request fails, the exception propagates and the offset is left
        unchanged, so a later call requests the same page again.

        Raises:
            TransportError: If the request could not be completed.
            ProtocolError: If the service answered with an error status or an
                unreadable payload.
        """
        if self._exhausted:
            return None

        page_params = self._params.copy()
        page_params.set(QueryOption.Skip, self._offset)
        page_params.set(QueryOption.Top, self._size)
        page = self._query._fetch(page_params)

        self._offset += self._size
        if len(page) < self._size:
            logger.debug(
                f"Batch cursor on '{self._query.entity_set.name}' exhausted at offset {self._offset}"
            )
            self._exhausted = True

        if page.is_empty():
            return None
        return page

    def pages(self) -> Iterator[Response]:
        """Yields the remaining pages, one request per page."""
        while True:
            page = self.next_page()
            if page is None:
                return
            yield page

    def __iter__(self) -> Iterator[Entity]:
        """Yields the entities of the remaining pages, fetching pages lazily."""
        for page in self.pages():
            yield from page

    def __repr__(self) -> str:
        state = "exhausted" if self._exhausted else "active"
        return f"BatchCursor(query={str(self._query)!r}, size={self._size}, offset={self._offset}, {state})"
