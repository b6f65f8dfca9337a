from enum import Enum


class QueryOption(Enum):
    """
    System query options understood by an OData v4 service.

    The value is the literal key written in the query string.
    """

    Filter = "$filter"
    Search = "$search"
    Skip = "$skip"
    Top = "$top"
    Count = "$count"
    Select = "$select"
    Expand = "$expand"
    OrderBy = "$orderby"
