"""
Filter Expressions Module.

This module implements the predicates written into the `$filter` option of a
[`Query`][frodata.models.query.Query].

Criteria are never instantiated directly by the user. They are the result of
a comparison method called on the property-scoped builder returned by
indexing a query:

```python
query = service.entity_set("Products").query()
criterion = query["Name"].eq("Bread")        # Name eq 'Bread'
query.where(criterion)
```

Every criterion is immutable. Combining criteria with `&` (`and_()`) or `|`
(`or_()`) returns a new composite criterion; nested composites of a different
kind are always parenthesized, so the written grouping is preserved verbatim
in the query string:

| User Call | Rendered Filter |
| --- | --- |
| `q["Name"].eq("Bread")` | `Name eq 'Bread'` |
| `q["Price"].gt(2.5) & q["Rating"].le(3)` | `Price gt 2.5 and Rating le 3` |
| `(q["Rating"].eq(4) \\| q["Rating"].eq(5)) & q["Price"].lt(10)` | `(Rating eq 4 or Rating eq 5) and Price lt 10` |
| `q["Name"].contains("Lemon")` | `contains(Name,'Lemon')` |
| `q["ReleaseDate"].year().eq(1992)` | `year(ReleaseDate) eq 1992` |
"""

from dataclasses import dataclass
from typing import Any, Tuple

from ...enum import ComparisonOperator
from ...errors import ValidationError
from ..schema import Property


class _QueryCriterion:
    """
    Base class of every `$filter` predicate.

    Subclasses implement `to_filter()`; the base provides logical composition
    and string conversion.
    """

    def to_filter(self) -> str:
        raise NotImplementedError

    def _grouped(self) -> str:
        """Returns the filter text as it must appear inside a composite."""
        return self.to_filter()

    def and_(self, other: "_QueryCriterion") -> "AndCriterion":
        """Returns a new criterion matching both `self` and `other`."""
        return AndCriterion.combine(self, other)

    def or_(self, other: "_QueryCriterion") -> "OrCriterion":
        """Returns a new criterion matching either `self` or `other`."""
        return OrCriterion.combine(self, other)

    def __and__(self, other: "_QueryCriterion") -> "AndCriterion":
        return self.and_(other)

    def __or__(self, other: "_QueryCriterion") -> "OrCriterion":
        return self.or_(other)

    def __str__(self) -> str:
        return self.to_filter()


@dataclass(frozen=True)
class Criterion(_QueryCriterion):
    """
    A binary comparison between a property (or a function of a property) and
    a literal, e.g. `Name eq 'Bread'`.

    Attributes:
        property: The schema property being compared.
        operator: The comparison operator.
        value: The Python value the caller compared against.
        operand: The left-hand side as written in the filter (the property
            name, or e.g. `year(ReleaseDate)`).
        literal: The right-hand side, already rendered as an OData literal.
    """

    property: Property
    operator: ComparisonOperator
    value: Any
    operand: str
    literal: str

    def to_filter(self) -> str:
        return f"{self.operand} {self.operator.value} {self.literal}"


@dataclass(frozen=True)
class FunctionCriterion(_QueryCriterion):
    """
    A boolean string function applied to a property, e.g. `contains(Name,'Br')`.
    """

    property: Property
    function: str
    value: Any
    literal: str

    def to_filter(self) -> str:
        return f"{self.function}({self.property.name},{self.literal})"


@dataclass(frozen=True)
class _CompositeCriterion(_QueryCriterion):
    children: Tuple[_QueryCriterion, ...]

    __joiner__ = ""

    @classmethod
    def combine(cls, *criteria: _QueryCriterion):
        children = []
        for crit in criteria:
            if not isinstance(crit, _QueryCriterion):
                raise TypeError(
                    f"Invalid criterion type. Expected a query criterion, but got '{type(crit).__name__}'."
                )
            # (a and b) and c == a and b and c
            if type(crit) is cls:
                children.extend(crit.children)
            else:
                children.append(crit)
        return cls(children=tuple(children))

    def to_filter(self) -> str:
        return f" {self.__joiner__} ".join(c._grouped() for c in self.children)

    def _grouped(self) -> str:
        return f"({self.to_filter()})"


@dataclass(frozen=True)
class AndCriterion(_CompositeCriterion):
    """The conjunction of two or more criteria."""

    __joiner__ = "and"


@dataclass(frozen=True)
class OrCriterion(_CompositeCriterion):
    """The disjunction of two or more criteria."""

    __joiner__ = "or"


_DATE_PART_TYPES = frozenset({"Edm.DateTimeOffset", "Edm.Date"})
_TIME_PART_TYPES = frozenset({"Edm.DateTimeOffset", "Edm.TimeOfDay"})

# literal rendering for the result of date/time part functions
_DATE_PART_RESULT = "Edm.Int32"


class PropertyCriteria:
    """
    A criterion builder scoped to one property of the queried entity type.

    Returned by `query["PropertyName"]`. Each terminal method returns a new,
    immutable criterion to be passed to
    [`Query.where()`][frodata.models.query.Query.where].

    Attributes:
        property: The schema [`Property`][frodata.models.schema.Property]
            targeted by this builder.
    """

    def __init__(self, property: Property, operand: str = "", literal_type: str = ""):
        self._property = property
        self._operand = operand or property.name
        # date/time part functions compare against integers, not the property type
        self._literal_property = (
            Property(name=self._operand, type=literal_type, nullable=False)
            if literal_type
            else property
        )

    @property
    def property(self) -> Property:
        return self._property

    def _compare(self, operator: ComparisonOperator, value: Any) -> Criterion:
        return Criterion(
            property=self._property,
            operator=operator,
            value=value,
            operand=self._operand,
            literal=self._literal_property.url_value(value),
        )

    # --- Comparison operators ---

    def eq(self, value: Any) -> Criterion:
        """`<property> eq <value>`"""
        return self._compare(ComparisonOperator.Eq, value)

    def ne(self, value: Any) -> Criterion:
        """`<property> ne <value>`"""
        return self._compare(ComparisonOperator.Ne, value)

    def gt(self, value: Any) -> Criterion:
        """`<property> gt <value>`"""
        return self._compare(ComparisonOperator.Gt, value)

    def ge(self, value: Any) -> Criterion:
        """`<property> ge <value>`"""
        return self._compare(ComparisonOperator.Ge, value)

    def lt(self, value: Any) -> Criterion:
        """`<property> lt <value>`"""
        return self._compare(ComparisonOperator.Lt, value)

    def le(self, value: Any) -> Criterion:
        """`<property> le <value>`"""
        return self._compare(ComparisonOperator.Le, value)

    # --- String functions ---

    def _string_function(self, function: str, value: Any) -> FunctionCriterion:
        if self._operand != self._property.name or not self._property.is_textual:
            raise ValidationError(
                f"'{function}' requires a textual property, '{self._operand}' is '{self._property.type}'"
            )
        return FunctionCriterion(
            property=self._property,
            function=function,
            value=value,
            literal=self._property.url_value(value),
        )

    def contains(self, value: str) -> FunctionCriterion:
        """`contains(<property>,'<value>')`"""
        return self._string_function("contains", value)

    def startswith(self, value: str) -> FunctionCriterion:
        """`startswith(<property>,'<value>')`"""
        return self._string_function("startswith", value)

    def endswith(self, value: str) -> FunctionCriterion:
        """`endswith(<property>,'<value>')`"""
        return self._string_function("endswith", value)

    # --- Date and time parts ---

    def _part(self, function: str, allowed: frozenset) -> "PropertyCriteria":
        if self._operand != self._property.name or self._property.type not in allowed:
            raise ValidationError(
                f"'{function}' is not applicable to '{self._operand}' of type '{self._property.type}'"
            )
        return PropertyCriteria(
            self._property,
            operand=f"{function}({self._property.name})",
            literal_type=_DATE_PART_RESULT,
        )

    def year(self) -> "PropertyCriteria":
        """Builder for `year(<property>)`."""
        return self._part("year", _DATE_PART_TYPES)

    def month(self) -> "PropertyCriteria":
        """Builder for `month(<property>)`."""
        return self._part("month", _DATE_PART_TYPES)

    def day(self) -> "PropertyCriteria":
        """Builder for `day(<property>)`."""
        return self._part("day", _DATE_PART_TYPES)

    def hour(self) -> "PropertyCriteria":
        """Builder for `hour(<property>)`."""
        return self._part("hour", _TIME_PART_TYPES)

    def minute(self) -> "PropertyCriteria":
        """Builder for `minute(<property>)`."""
        return self._part("minute", _TIME_PART_TYPES)

    def second(self) -> "PropertyCriteria":
        """Builder for `second(<property>)`."""
        return self._part("second", _TIME_PART_TYPES)

    def __repr__(self) -> str:
        return f"PropertyCriteria({self._operand!r}, type={self._property.type!r})"
