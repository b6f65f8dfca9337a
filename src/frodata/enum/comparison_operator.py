from enum import Enum


class ComparisonOperator(Enum):
    """
    Binary comparison operators of the `$filter` grammar.
    """

    Eq = "eq"  # equal
    Ne = "ne"  # not equal
    Gt = "gt"  # greater than
    Ge = "ge"  # greater than or equal
    Lt = "lt"  # less than
    Le = "le"  # less than or equal
