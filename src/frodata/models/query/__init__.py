from .builders import Query as Query
from .batches import BatchCursor as BatchCursor
from .expressions import (
    Criterion as Criterion,
    FunctionCriterion as FunctionCriterion,
    AndCriterion as AndCriterion,
    OrCriterion as OrCriterion,
    PropertyCriteria as PropertyCriteria,
)
from .parameters import QueryParameters as QueryParameters
from .response import Response as Response
