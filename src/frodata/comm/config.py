"""
Configuration Module.

This module defines the configuration structures used to control the behavior
of the [`ODataService`][frodata.comm.ODataService] transport, and the defaults
shared by the query layer.
"""

from dataclasses import dataclass, field
from typing import Dict

DEFAULT_TIMEOUT = 30.0
"""Seconds to wait for connect/read/write operations on a request."""

DEFAULT_BATCH_SIZE = 1000
"""Page size used by `Query.in_batches()` when none is given."""

DEFAULT_HEADERS: Dict[str, str] = {
    "Accept": "application/json",
    "OData-Version": "4.0",
    "OData-MaxVersion": "4.0",
}
"""Headers sent with every request; `ServiceConfig.headers` entries override them."""


@dataclass
class ServiceConfig:
    """
    Configuration settings for an [`ODataService`][frodata.comm.ODataService].

    Example:
        ```python
        from frodata import ODataService, ServiceConfig

        config = ServiceConfig(timeout=5.0, headers={"Accept-Language": "it"})
        with ODataService.connect(url, config=config) as service:
            ...
        ```
    """

    timeout: float = DEFAULT_TIMEOUT
    """
    Maximum time in seconds to wait for the service, applied to connection,
    read and write operations of every request.
    """

    headers: Dict[str, str] = field(default_factory=dict)
    """
    Extra HTTP headers added to (or overriding) `DEFAULT_HEADERS`.
    """

    verify: bool = True
    """
    Whether the TLS certificate of the service is verified.
    """
