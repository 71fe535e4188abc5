"""Criteria - Logical criteria chains and their compilation.

Builds a chain of field predicates joined by AND / OR / NOT with per-node
boosting, and compiles it into a boolean query tree for the search
engine's query DSL.

Quick Start
-----------
    >>> from esodm.core.criteria import CriteriaQueryCompiler, where
    >>>
    >>> criteria = (
    ...     where("title").contains("elastic")
    ...     .and_("year").between(2010, 2020)
    ...     .and_("status").eq("deleted").not_()
    ...     .or_("tag").in_(["search", "index"])
    ... )
    >>> query = CriteriaQueryCompiler().compile(criteria)
    >>> body = {"query": query.to_dict()}

Exception Hierarchy
-------------------
- **CompilationError**: Structurally invalid chain (empty field, BETWEEN
  arity, non-iterable IN).
"""

from esodm.core.criteria.compiler import (
    CriteriaQueryCompiler,
    ValueShape,
    get_value_shape,
    to_search_text,
)
from esodm.core.criteria.exceptions import CompilationError
from esodm.core.criteria.query import (
    BoolQuery,
    FuzzyQuery,
    Query,
    QueryStringQuery,
    RangeQuery,
)
from esodm.core.criteria.types import (
    CRITERIA_VALUE_SEPARATOR,
    Criteria,
    CriteriaEntry,
    JoinType,
    OperationKey,
    where,
)

__all__ = [
    # Chain
    "Criteria",
    "CriteriaEntry",
    "JoinType",
    "OperationKey",
    "CRITERIA_VALUE_SEPARATOR",
    "where",
    # Query tree
    "Query",
    "BoolQuery",
    "QueryStringQuery",
    "FuzzyQuery",
    "RangeQuery",
    # Compiler
    "CriteriaQueryCompiler",
    "ValueShape",
    "get_value_shape",
    "to_search_text",
    # Exceptions
    "CompilationError",
]
