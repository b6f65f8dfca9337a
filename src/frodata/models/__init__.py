from .schema import (
    Property as Property,
    NavigationProperty as NavigationProperty,
    EntityType as EntityType,
    EntitySet as EntitySet,
)
from .entity import Entity as Entity
from .query import Query as Query, BatchCursor as BatchCursor, Response as Response
