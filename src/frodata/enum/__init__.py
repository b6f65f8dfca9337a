from .query_option import QueryOption as QueryOption
from .comparison_operator import ComparisonOperator as ComparisonOperator
