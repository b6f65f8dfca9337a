"""
Query Parameters Module.

Holds the system query options accumulated by a
[`Query`][frodata.models.query.Query] and owns their serialization into the
query-string part of a request URL.
"""

import re
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Union

from ...enum import QueryOption

# Characters that would change the structure of the query string if left bare.
# '%' must come first, so the escapes produced here are not escaped again.
_STRUCTURAL_ESCAPES = (
    ("%", "%25"),
    ("&", "%26"),
    ("#", "%23"),
    ("+", "%2B"),
)

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def _escape_value(value: Any) -> str:
    """
    Escapes a query option value for the query string.

    Only the characters that would alter the meaning of the query string are
    percent-encoded, along with the ASCII control characters that cannot
    appear in a URL; spaces, quotes, commas and parentheses are kept readable
    (e.g. `Name eq 'Bread'`). The transport completes the URL encoding.
    """
    text = str(value)
    for char, escaped in _STRUCTURAL_ESCAPES:
        text = text.replace(char, escaped)
    return _CONTROL_CHARS.sub(lambda m: "%{:02X}".format(ord(m.group())), text)


def _option_key(option: Union[QueryOption, str]) -> str:
    return option.value if isinstance(option, QueryOption) else option


class QueryParameters:
    """
    An insertion-ordered mapping from a system query option (`$filter`,
    `$top`, ...) to its value.

    Each option appears at most once. Setting an option that is already
    present replaces its value but keeps its original position, so the
    serialized order is the order in which options were first set.
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._params: Dict[str, Any] = dict(initial) if initial else {}

    def set(self, option: Union[QueryOption, str], value: Any) -> None:
        self._params[_option_key(option)] = value

    def get(self, option: Union[QueryOption, str], default: Any = None) -> Any:
        return self._params.get(_option_key(option), default)

    def remove(self, option: Union[QueryOption, str]) -> None:
        self._params.pop(_option_key(option), None)

    def copy(self) -> "QueryParameters":
        return QueryParameters(self._params)

    def subset(self, options: Iterable[QueryOption]) -> "QueryParameters":
        """
        Returns a copy restricted to `options`, preserving the original order.
        """
        keys = {_option_key(o) for o in options}
        return QueryParameters({k: v for k, v in self._params.items() if k in keys})

    def as_mapping(self) -> Mapping[str, Any]:
        """Returns a read-only view of the stored options."""
        return MappingProxyType(self._params)

    def to_query_string(self) -> str:
        """
        Serializes the non-empty options as `key=value` pairs joined by `&`.

        Example:
            `$filter=Name eq 'Bread'&$top=5`
        """
        return "&".join(
            f"{key}={_escape_value(value)}"
            for key, value in self._params.items()
            if value is not None and value != ""
        )

    def __contains__(self, option: object) -> bool:
        if isinstance(option, QueryOption):
            option = option.value
        return option in self._params

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    def __len__(self) -> int:
        return len(self._params)

    def __bool__(self) -> bool:
        return bool(self.to_query_string())

    def __repr__(self) -> str:
        return f"QueryParameters({self._params!r})"
