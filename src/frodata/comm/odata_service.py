"""
FrOData Service Entry Point.

This module provides the `ODataService`, the primary interface for users to
interact with a remote OData v4 service. It owns the HTTP connection, keeps
the registry of the declared entity sets, and executes the requests built by
[`Query`][frodata.models.query.Query] objects.
"""

from typing import Any, Dict, List, Optional, Type

import httpx

from ..errors import (
    NotFoundError,
    ProtocolError,
    TransportError,
    UnknownEntitySetError,
    ValidationError,
)
from ..logging_config import get_logger
from ..models.schema import EntitySet, EntityType
from .config import DEFAULT_HEADERS, ServiceConfig

# Set the hierarchical logger
logger = get_logger(__name__)


def _error_message(response: httpx.Response) -> str:
    """
    Extracts the human readable message of an OData error payload, e.g.
    `{"error": {"code": "...", "message": "..."}}`, falling back to the
    HTTP reason phrase.
    """
    try:
        payload = response.json()
    except ValueError:
        return response.reason_phrase or "unknown error"

    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        message = error.get("message")
        # some services wrap the message: {"message": {"lang": "en", "value": "..."}}
        if isinstance(message, dict):
            message = message.get("value")
        if message:
            return str(message)
    return response.reason_phrase or "unknown error"


class ODataService:
    """
    The gateway to a remote OData service.

    This class centralizes the HTTP connection management and serves as a
    factory for [`EntitySet`][frodata.models.schema.EntitySet] objects, from
    which queries are built.

    Tip: Context Manager Usage
        The `ODataService` is best used as a context manager to ensure the
        underlying HTTP connection pool is closed.

        ```python
        from frodata import ODataService

        with ODataService.connect("http://services.odata.org/V4/OData/OData.svc") as service:
            products = service.register_entity_set("Products", product_type)
            print(products.count())
        ```
    """

    # --- Private Sentinel Value ---
    # Used to ensure the constructor is only called via the `connect()` factory.
    _CONNECT_SENTINEL = object()

    def __init__(
        self,
        *,
        url: str,
        name: str,
        config: ServiceConfig,
        http_client: httpx.Client,
        sentinel: object,
    ):
        """
        **Internal Constructor** (do not call this directly): please use the
        [`connect()`][frodata.comm.ODataService.connect] method instead to
        obtain an initialized service.

        Raises:
            RuntimeError: If called without the private sentinel.
        """
        if sentinel is not ODataService._CONNECT_SENTINEL:
            raise RuntimeError(
                "ODataService must be instantiated using the classmethod ODataService.connect()."
            )

        self._url = url
        """The service root URL"""
        self._name = name
        """The service name, used in logs and error messages"""
        self._config = config
        """The transport configuration"""
        self._http: httpx.Client = http_client
        """The HTTP client bound to the service root"""
        self._closed = False
        """Tracks whether close() was called"""
        self._entity_sets: Dict[str, EntitySet] = {}
        """Registered entity sets, keyed by name"""

    @classmethod
    def connect(
        cls,
        url: str,
        name: Optional[str] = None,
        config: Optional[ServiceConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "ODataService":
        """
        The primary entry point to an OData service.

        No request is sent by this method: the connection is opened lazily
        by the first query execution.

        Args:
            url (str): The service root URL
                (e.g. "http://services.odata.org/V4/OData/OData.svc").
            name (Optional[str]): A name for the service (e.g. "ODataDemo").
                Defaults to the URL.
            config (Optional[ServiceConfig]): Transport settings. Defaults to
                `ServiceConfig()`.
            transport (Optional[httpx.BaseTransport]): A custom `httpx`
                transport (e.g. `httpx.MockTransport` in tests).

        Returns:
            ODataService: An initialized service ready for queries.

        Raises:
            ValueError: If the URL is not an absolute http(s) URL.
        """
        config = config or ServiceConfig()
        root = httpx.URL(url)
        if root.scheme not in ("http", "https") or not root.host:
            raise ValueError(f"Invalid service URL '{url}': expected http(s)://host/...")

        http_client = httpx.Client(
            base_url=root,
            headers={**DEFAULT_HEADERS, **config.headers},
            timeout=config.timeout,
            verify=config.verify,
            transport=transport,
        )
        logger.debug(f"Service '{name or url}' bound to '{url}'")

        return cls(
            url=url,
            name=name or url,
            config=config,
            http_client=http_client,
            sentinel=cls._CONNECT_SENTINEL,
        )

    # --- Context Manager Protocol ---

    def __enter__(self) -> "ODataService":
        """Context manager entry point."""
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        """
        Context manager exit point. Ensures resources are closed.

        Exceptions raised within the `with` block are propagated.
        """
        try:
            self.close()
        except Exception as e:
            logger.error(
                f"Error releasing resources allocated from ODataService.\nInner err: '{e}'"
            )

    def __del__(self):
        """Destructor. Failsafe if close() is not explicitly called."""
        if getattr(self, "_closed", True) is False:
            logger.warning(
                f"ODataService '{self._name}' destroyed without calling close(). "
                "Resources may not have been released properly."
            )

    # --- Properties ---

    @property
    def url(self) -> str:
        return self._url

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> ServiceConfig:
        return self._config

    # --- Entity sets ---

    def register_entity_set(self, name: str, entity_type: EntityType) -> EntitySet:
        """
        Declares an entity set exposed by the service.

        Registering the same name again replaces the previous declaration.

        Args:
            name: The collection name as written in URLs (e.g. "Products").
            entity_type: The declared type of the entities.

        Returns:
            EntitySet: The registered entity set.
        """
        entity_set = EntitySet(name=name, entity_type=entity_type, service=self)
        self._entity_sets[name] = entity_set
        logger.debug(
            f"Registered entity set '{name}' ({entity_type.full_name}) on '{self._name}'"
        )
        return entity_set

    def entity_set(self, name: str) -> EntitySet:
        """
        Retrieves a registered entity set.

        Raises:
            UnknownEntitySetError: If no entity set with this name was registered.
        """
        try:
            return self._entity_sets[name]
        except KeyError:
            raise UnknownEntitySetError(name, self._name) from None

    def list_entity_sets(self) -> List[str]:
        """Returns the names of the registered entity sets."""
        return list(self._entity_sets.keys())

    # --- Request execution ---

    def _get(self, url_chunk: str) -> httpx.Response:
        if self._closed:
            raise RuntimeError(f"ODataService '{self._name}' is closed.")

        logger.debug(f"GET '{url_chunk}'")
        try:
            response = self._http.get(url_chunk)
        except httpx.InvalidURL as e:
            logger.error(f"Request {url_chunk!r} to '{self._name}' is not a valid URL: '{e}'")
            raise ValidationError(
                f"Request {url_chunk!r} to service '{self._name}' is not a valid URL.\nInner err: '{e}'"
            ) from e
        except httpx.TransportError as e:
            logger.error(f"Request '{url_chunk}' to '{self._name}' failed: '{e}'")
            raise TransportError(
                f"Request '{url_chunk}' to service '{self._name}' failed.\nInner err: '{e}'"
            ) from e

        if response.is_success:
            return response

        message = _error_message(response)
        logger.error(
            f"Request '{url_chunk}' returned status {response.status_code}: '{message}'"
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            raise NotFoundError(
                f"Resource '{url_chunk}' not found: {message}",
                status_code=response.status_code,
                url=str(response.url),
            )
        raise ProtocolError(
            f"Request '{url_chunk}' failed with status {response.status_code}: {message}",
            status_code=response.status_code,
            url=str(response.url),
        )

    def get_json(self, url_chunk: str) -> Dict[str, Any]:
        """
        Performs a GET request relative to the service root and decodes the
        JSON object in the body.

        Raises:
            TransportError: If the request could not be completed.
            ValidationError: If the request URL cannot be built (e.g. an entity
                set name holding control characters).
            NotFoundError: If the service answered 404.
            ProtocolError: On any other error status, or if the body is not
                a JSON object.
        """
        response = self._get(url_chunk)
        try:
            payload = response.json()
        except ValueError as e:
            raise ProtocolError(
                f"Response to '{url_chunk}' is not valid JSON.\nInner err: '{e}'",
                status_code=response.status_code,
                url=str(response.url),
            ) from e
        if not isinstance(payload, dict):
            raise ProtocolError(
                f"Response to '{url_chunk}' is not a JSON object",
                status_code=response.status_code,
                url=str(response.url),
            )
        return payload

    def get_text(self, url_chunk: str) -> str:
        """
        Performs a GET request relative to the service root and returns the
        text body (used by `$count` requests).

        Raises:
            TransportError: If the request could not be completed.
            ValidationError: If the request URL cannot be built (e.g. an entity
                set name holding control characters).
            NotFoundError: If the service answered 404.
            ProtocolError: On any other error status.
        """
        return self._get(url_chunk).text

    def close(self):
        """Closes the HTTP connection pool. Further requests raise `RuntimeError`."""
        if self._closed:
            return
        self._http.close()
        self._closed = True
        logger.debug(f"Service '{self._name}' closed.")

    def __repr__(self) -> str:
        return f"ODataService(name={self._name!r}, url={self._url!r})"
