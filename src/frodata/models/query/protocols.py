from typing import Any, Dict, Protocol

from ..schema import EntityType


class ExecutorProtocol(Protocol):
    """
    Structural protocol of the service that performs the requests built by a
    [`Query`][frodata.models.query.Query].

    Both methods receive a URL chunk relative to the service root (e.g.
    `"Products?$top=5"` or `"Products/$count"`), perform exactly one request,
    and raise the SDK error taxonomy on failure
    ([`TransportError`][frodata.errors.TransportError],
    [`ProtocolError`][frodata.errors.ProtocolError],
    [`NotFoundError`][frodata.errors.NotFoundError]).

    ### Reference Implementations
    * [`ODataService`][frodata.comm.ODataService]: the `httpx` based service.
    """

    def get_json(self, url_chunk: str) -> Dict[str, Any]:
        """Performs the request and returns the decoded JSON object."""
        ...

    def get_text(self, url_chunk: str) -> str:
        """Performs the request and returns the raw text body."""
        ...


class EntitySetProtocol(Protocol):
    """
    Structural protocol of the collection a [`Query`][frodata.models.query.Query]
    is bound to.

    ### Reference Implementations
    * [`EntitySet`][frodata.models.schema.EntitySet]
    """

    @property
    def name(self) -> str:
        """The collection name written in the URL."""
        ...

    @property
    def entity_type(self) -> EntityType:
        """The declared type of the entities in the collection."""
        ...

    @property
    def service(self) -> ExecutorProtocol:
        """The service executing requests against the collection."""
        ...
