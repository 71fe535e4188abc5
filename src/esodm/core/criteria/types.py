"""Criteria - Criteria chain types and fluent builder.

A criteria chain is an ordered sequence of nodes. Each node targets one
stored field, carries one or more (operation, value) entries, is joined to
the chain with AND or OR, may be negated and may carry a boost.

    >>> from esodm.core.criteria import where
    >>> chain = where("title").contains("elastic").and_("year").between(2000, 2010).or_("tag").in_(["a", "b"])
    >>> [node.field for node in chain.criteria_chain]
    ['title', 'year', 'tag']
"""

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class OperationKey(StrEnum):
    """Operations a criteria entry can express."""

    EQUALS = "equals"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    EXPRESSION = "expression"
    BETWEEN = "between"
    FUZZY = "fuzzy"
    IN = "in"
    NOT_IN = "not_in"
    LESS = "less"
    LESS_EQUAL = "less_equal"
    GREATER = "greater"
    GREATER_EQUAL = "greater_equal"


class JoinType(StrEnum):
    """How a node is joined to the chain."""

    AND = "and"
    OR = "or"


#: Separator that must not appear in wildcard values
CRITERIA_VALUE_SEPARATOR = " "


@dataclass(frozen=True, slots=True)
class CriteriaEntry:
    """A single (operation, value) pair of a criteria node.

    Attributes:
        key: The operation.
        value: Operand; None compiles to no clause.
    """

    key: OperationKey
    value: Any = None


class Criteria:
    """One node of a criteria chain, with a fluent API to extend the chain.

    Builder methods that add entries return the same node; `and_` and `or_`
    return a new node appended to a copy of the chain, so a chain built
    earlier is never changed by later calls.

    Attributes:
        field: Stored field name targeted by this node.
        join_type: AND or OR.
        negated: Whether the node is negated (must-not).
        boost_value: Boost for this node, None when not configured.
    """

    def __init__(
        self,
        field: str,
        *,
        join_type: JoinType = JoinType.AND,
        chain: Sequence["Criteria"] = (),
    ):
        """Create a criteria node.

        Args:
            field: Stored field name (resolved by the caller).
            join_type: How the node joins the chain.
            chain: Nodes preceding this one.
        """
        self._field = field
        self._join_type = JoinType(join_type)
        self._negated = False
        self._boost: float | None = None
        self._entries: list[CriteriaEntry] = []
        self._chain: list[Criteria] = [*chain, self]

    # =========================================================================
    # CHAIN
    # =========================================================================

    @classmethod
    def where(cls, field: str) -> "Criteria":
        """Start a new chain on the given field."""
        return cls(field)

    def and_(self, other: "str | Criteria") -> "Criteria":
        """Append a node joined with AND.

        Args:
            other: Field name for a new node, or a node whose field, entries,
                negation and boost are copied.

        Returns:
            The appended node.
        """
        return self._append(other, JoinType.AND)

    def or_(self, other: "str | Criteria") -> "Criteria":
        """Append a node joined with OR.

        Args:
            other: Field name for a new node, or a node to copy.

        Returns:
            The appended node.
        """
        return self._append(other, JoinType.OR)

    def _append(self, other: "str | Criteria", join_type: JoinType) -> "Criteria":
        if isinstance(other, Criteria):
            node = Criteria(other.field, join_type=join_type, chain=self._chain)
            node._entries.extend(other._entries)
            node._negated = other._negated
            node._boost = other._boost
            return node
        if isinstance(other, str):
            return Criteria(other, join_type=join_type, chain=self._chain)
        raise TypeError(f"Cannot chain {type(other).__name__}; expected a field name or Criteria")

    # =========================================================================
    # ENTRIES
    # =========================================================================

    def add_entry(self, key: OperationKey, value: Any) -> "Criteria":
        """Add a raw entry without builder-level checks."""
        self._entries.append(CriteriaEntry(OperationKey(key), value))
        return self

    def eq(self, value: Any) -> "Criteria":
        """Exact match: field == value."""
        return self.add_entry(OperationKey.EQUALS, value)

    def contains(self, value: str | None) -> "Criteria":
        """Wildcard match: *value*."""
        self._assert_no_blank_in_wildcard(value, leading=True, trailing=True)
        return self.add_entry(OperationKey.CONTAINS, value)

    def startswith(self, value: str | None) -> "Criteria":
        """Wildcard match: value*."""
        self._assert_no_blank_in_wildcard(value, leading=False, trailing=True)
        return self.add_entry(OperationKey.STARTS_WITH, value)

    def endswith(self, value: str | None) -> "Criteria":
        """Wildcard match: *value."""
        self._assert_no_blank_in_wildcard(value, leading=True, trailing=False)
        return self.add_entry(OperationKey.ENDS_WITH, value)

    def expression(self, value: str | None) -> "Criteria":
        """Raw query-string expression scoped to the field."""
        return self.add_entry(OperationKey.EXPRESSION, value)

    def fuzzy(self, value: str | None) -> "Criteria":
        """Fuzzy match on the field."""
        return self.add_entry(OperationKey.FUZZY, value)

    def between(self, lower: Any, upper: Any) -> "Criteria":
        """Inclusive range [lower, upper]; one side may be None."""
        if lower is None and upper is None:
            raise ValueError("Range [* TO *] is not allowed")
        return self.add_entry(OperationKey.BETWEEN, (lower, upper))

    def lt(self, upper: Any) -> "Criteria":
        """field < upper."""
        if upper is None:
            raise ValueError("Upper bound must not be None")
        return self.add_entry(OperationKey.LESS, upper)

    def lte(self, upper: Any) -> "Criteria":
        """field <= upper."""
        if upper is None:
            raise ValueError("Upper bound must not be None")
        return self.add_entry(OperationKey.LESS_EQUAL, upper)

    def gt(self, lower: Any) -> "Criteria":
        """field > lower."""
        if lower is None:
            raise ValueError("Lower bound must not be None")
        return self.add_entry(OperationKey.GREATER, lower)

    def gte(self, lower: Any) -> "Criteria":
        """field >= lower."""
        if lower is None:
            raise ValueError("Lower bound must not be None")
        return self.add_entry(OperationKey.GREATER_EQUAL, lower)

    def in_(self, values: Iterable[Any]) -> "Criteria":
        """field matches any of the values.

        Args:
            values: Non-empty iterable of values. Always stored as a list.
        """
        return self.add_entry(OperationKey.IN, self._to_list(values, "in_"))

    def not_in(self, values: Iterable[Any]) -> "Criteria":
        """field matches none of the values."""
        return self.add_entry(OperationKey.NOT_IN, self._to_list(values, "not_in"))

    def not_(self) -> "Criteria":
        """Negate this node."""
        self._negated = True
        return self

    def boost(self, boost: float) -> "Criteria":
        """Set the boost of this node.

        Raises:
            ValueError: If boost is negative.
        """
        if boost is not None and math.isnan(boost):
            self._boost = None
            return self
        if boost is None or boost < 0:
            raise ValueError(f"Boost must not be negative, got {boost!r}")
        self._boost = float(boost)
        return self

    @staticmethod
    def _to_list(values: Iterable[Any], op: str) -> list[Any]:
        if values is None:
            raise ValueError(f"Collection of '{op}' values must not be None")
        if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
            raise TypeError(f"'{op}' values must be a non-string iterable, got {type(values).__name__}")
        items = list(values)
        if not items:
            raise ValueError(f"At least one '{op}' value has to be present")
        return items

    @staticmethod
    def _assert_no_blank_in_wildcard(value: str | None, *, leading: bool, trailing: bool) -> None:
        if value is not None and CRITERIA_VALUE_SEPARATOR in value:
            pattern = f"{'*' if leading else ''}\"{value}\"{'*' if trailing else ''}"
            raise ValueError(
                f"Cannot construct query '{pattern}'. Use expression or multiple clauses instead."
            )

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def field(self) -> str:
        return self._field

    @property
    def entries(self) -> tuple[CriteriaEntry, ...]:
        return tuple(self._entries)

    @property
    def join_type(self) -> JoinType:
        return self._join_type

    @property
    def is_or(self) -> bool:
        return self._join_type is JoinType.OR

    @property
    def is_and(self) -> bool:
        return self._join_type is JoinType.AND

    @property
    def negated(self) -> bool:
        return self._negated

    @property
    def boost_value(self) -> float | None:
        return self._boost

    @property
    def criteria_chain(self) -> tuple["Criteria", ...]:
        """Read-only view of the chain ending at this node."""
        return tuple(self._chain)

    def __repr__(self) -> str:
        return (
            f"Criteria(field={self._field!r}, join_type={self._join_type.value}, "
            f"negated={self._negated}, boost={self._boost}, entries={self._entries!r})"
        )


def where(field: str) -> Criteria:
    """Start a new criteria chain on the given field."""
    return Criteria.where(field)


__all__ = [
    "OperationKey",
    "JoinType",
    "CriteriaEntry",
    "Criteria",
    "CRITERIA_VALUE_SEPARATOR",
    "where",
]
