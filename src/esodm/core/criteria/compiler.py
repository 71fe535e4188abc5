"""Criteria - Query Compiler.

Compiles a criteria chain into a boolean query tree in a single pass:

1. Every node's field name is checked before any clause is built.
2. Each node becomes a fragment: its single compiled entry, or a bool
   container whose `must` clauses are its compiled entries.
3. The node's boost, if any, is applied to the fragment.
4. The fragment goes to the root's `should` (OR node), `must_not`
   (negated node) or `must` (any other node) list.

Entries with a None value compile to nothing, as do None elements of IN /
NOT_IN values. Malformed BETWEEN / IN / NOT_IN values (including empty
ones) raise CompilationError.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from enum import Enum
from typing import Any

from esodm.core.criteria.exceptions import CompilationError
from esodm.core.criteria.query import (
    BoolQuery,
    FuzzyQuery,
    Query,
    QueryStringQuery,
    RangeQuery,
)
from esodm.core.criteria.types import Criteria, CriteriaEntry, OperationKey

logger = logging.getLogger(__name__)


# =============================================================================
# VALUE SHAPES
# =============================================================================


class ValueShape(Enum):
    """Shape an entry value must have for its operation."""

    SCALAR = "scalar"
    PAIR = "pair"
    SEQUENCE = "sequence"


_VALUE_SHAPES: dict[OperationKey, ValueShape] = {
    OperationKey.BETWEEN: ValueShape.PAIR,
    OperationKey.IN: ValueShape.SEQUENCE,
    OperationKey.NOT_IN: ValueShape.SEQUENCE,
}


def get_value_shape(key: OperationKey) -> ValueShape:
    """Get the value shape expected by an operation (SCALAR by default)."""
    return _VALUE_SHAPES.get(key, ValueShape.SCALAR)


def to_search_text(value: Any) -> str:
    """Render a scalar criteria value as query-string text."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _to_range_value(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.name
    return value


# =============================================================================
# COMPILER
# =============================================================================


class CriteriaQueryCompiler:
    """Compiles criteria chains into BoolQuery trees.

    The compiler keeps no per-call state; one instance can compile any
    number of chains, concurrently.

    Example:
        >>> compiler = CriteriaQueryCompiler()
        >>> query = compiler.compile(where("title").eq("elastic").or_("tag").eq("search"))
        >>> query.to_dict()["bool"].keys()
        dict_keys(['must', 'should'])
    """

    def __init__(self, *, default_operator: str = "and", analyze_wildcard: bool = True):
        """Initialize the compiler.

        Args:
            default_operator: default_operator of exact-match query strings.
            analyze_wildcard: analyze_wildcard flag of wildcard query strings.
        """
        self.default_operator = default_operator
        self.analyze_wildcard = analyze_wildcard

    def compile(self, criteria: Criteria | Iterable[Criteria]) -> BoolQuery:
        """Compile a criteria chain.

        Args:
            criteria: A Criteria node (its whole chain is compiled) or an
                iterable of nodes in chain order.

        Returns:
            Root BoolQuery; empty when no node produced a clause.

        Raises:
            CompilationError: On an empty field name or a malformed entry value.
        """
        nodes = self._resolve_chain(criteria)

        for node in nodes:
            self._check_field(node)

        must: list[Query] = []
        should: list[Query] = []
        must_not: list[Query] = []

        for node in nodes:
            fragment = self._create_fragment(node)
            if fragment is None:
                continue
            if node.is_or:
                should.append(fragment)
            elif node.negated:
                must_not.append(fragment)
            else:
                must.append(fragment)

        logger.debug(
            "Compiled %d criteria nodes: must=%d should=%d must_not=%d",
            len(nodes),
            len(must),
            len(should),
            len(must_not),
        )
        return BoolQuery(must=tuple(must), should=tuple(should), must_not=tuple(must_not))

    @staticmethod
    def _resolve_chain(criteria: Criteria | Iterable[Criteria]) -> Sequence[Criteria]:
        if criteria is None:
            raise CompilationError("Criteria must not be None")
        if isinstance(criteria, Criteria):
            return criteria.criteria_chain
        nodes = tuple(criteria)
        for node in nodes:
            if not isinstance(node, Criteria):
                raise CompilationError(f"Chain element must be a Criteria, got {type(node).__name__}")
        return nodes

    @staticmethod
    def _check_field(node: Criteria) -> None:
        field = node.field
        if not isinstance(field, str) or not field.strip():
            raise CompilationError("Field name must be a non-empty string", field=field, value=field)

    # =========================================================================
    # FRAGMENTS
    # =========================================================================

    def _create_fragment(self, node: Criteria) -> Query | None:
        entries = node.entries
        if not entries:
            return None

        if len(entries) == 1:
            fragment = self._compile_entry(entries[0], node.field)
        else:
            compiled = [self._compile_entry(entry, node.field) for entry in entries]
            compiled = [query for query in compiled if query is not None]
            fragment = BoolQuery(must=tuple(compiled)) if compiled else None

        if fragment is not None and node.boost_value is not None:
            fragment = fragment.with_boost(node.boost_value)
        return fragment

    def _compile_entry(self, entry: CriteriaEntry, field: str) -> Query | None:
        if entry.value is None:
            return None

        key = entry.key
        value = self._checked_value(entry, field)

        if key is OperationKey.EQUALS:
            return self._exact_match(field, value)
        if key is OperationKey.CONTAINS:
            return self._wildcard_match(field, f"*{to_search_text(value)}*")
        if key is OperationKey.STARTS_WITH:
            return self._wildcard_match(field, f"{to_search_text(value)}*")
        if key is OperationKey.ENDS_WITH:
            return self._wildcard_match(field, f"*{to_search_text(value)}")
        if key is OperationKey.EXPRESSION:
            return QueryStringQuery(to_search_text(value), fields=(field,))
        if key is OperationKey.BETWEEN:
            lower, upper = value
            return RangeQuery(field, gte=_to_range_value(lower), lte=_to_range_value(upper))
        if key is OperationKey.LESS:
            return RangeQuery(field, lt=_to_range_value(value))
        if key is OperationKey.LESS_EQUAL:
            return RangeQuery(field, lte=_to_range_value(value))
        if key is OperationKey.GREATER:
            return RangeQuery(field, gt=_to_range_value(value))
        if key is OperationKey.GREATER_EQUAL:
            return RangeQuery(field, gte=_to_range_value(value))
        if key is OperationKey.FUZZY:
            return FuzzyQuery(field, to_search_text(value))
        if key is OperationKey.IN:
            return BoolQuery(should=tuple(self._exact_match(field, item) for item in value))
        if key is OperationKey.NOT_IN:
            return BoolQuery(must_not=tuple(self._exact_match(field, item) for item in value))

        raise CompilationError("Unsupported operation", field=field, operation=str(key))

    def _checked_value(self, entry: CriteriaEntry, field: str) -> Any:
        """Validate the entry value against its operation's shape.

        Returns:
            The value, normalized to a tuple (PAIR) or list (SEQUENCE). None
            elements of a SEQUENCE are dropped.
        """
        shape = get_value_shape(entry.key)
        value = entry.value

        if shape is ValueShape.PAIR:
            if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or len(value) != 2:
                raise CompilationError(
                    "BETWEEN requires exactly two bounds [from, to]",
                    field=field,
                    operation=entry.key.name,
                    value=value,
                )
            return tuple(value)

        if shape is ValueShape.SEQUENCE:
            if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
                raise CompilationError(
                    f"{entry.key.name} requires an iterable of values, got {type(value).__name__}",
                    field=field,
                    operation=entry.key.name,
                    value=value,
                )
            items = [item for item in value if item is not None]
            if not items:
                raise CompilationError(
                    f"{entry.key.name} requires at least one non-null value",
                    field=field,
                    operation=entry.key.name,
                    value=value,
                )
            return items

        return value

    def _exact_match(self, field: str, value: Any) -> QueryStringQuery:
        return QueryStringQuery(
            to_search_text(value),
            fields=(field,),
            default_operator=self.default_operator,
        )

    def _wildcard_match(self, field: str, pattern: str) -> QueryStringQuery:
        return QueryStringQuery(pattern, fields=(field,), analyze_wildcard=self.analyze_wildcard)


__all__ = [
    "CriteriaQueryCompiler",
    "ValueShape",
    "get_value_shape",
    "to_search_text",
]
