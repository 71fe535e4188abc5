"""Criteria - Boolean query tree.

Immutable clause types produced by the compiler. Each clause renders to
the search engine's JSON query DSL with `to_dict()`.

    >>> BoolQuery(must=(QueryStringQuery("x", fields=("title",)),)).to_dict()
    {'bool': {'must': [{'query_string': {'query': 'x', 'fields': ['title']}}]}}
"""

from dataclasses import dataclass, replace
from dataclasses import field as dataclass_field
from typing import Any, Self


@dataclass(frozen=True, slots=True)
class Query:
    """Base class of all clauses.

    Attributes:
        boost: Optional relevance boost, None when not configured.
    """

    boost: float | None = dataclass_field(default=None, kw_only=True)

    def with_boost(self, boost: float | None) -> Self:
        """Return a copy of this clause carrying the given boost."""
        return replace(self, boost=boost)

    def to_dict(self) -> dict[str, Any]:
        raise NotImplementedError

    def _body_with_boost(self, body: dict[str, Any]) -> dict[str, Any]:
        if self.boost is not None:
            body["boost"] = self.boost
        return body


@dataclass(frozen=True, slots=True)
class BoolQuery(Query):
    """Boolean container with must / should / must-not clause lists."""

    must: tuple[Query, ...] = ()
    should: tuple[Query, ...] = ()
    must_not: tuple[Query, ...] = ()

    @property
    def clause_count(self) -> int:
        """Total number of direct child clauses."""
        return len(self.must) + len(self.should) + len(self.must_not)

    def is_empty(self) -> bool:
        return self.clause_count == 0

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if self.must:
            body["must"] = [clause.to_dict() for clause in self.must]
        if self.should:
            body["should"] = [clause.to_dict() for clause in self.should]
        if self.must_not:
            body["must_not"] = [clause.to_dict() for clause in self.must_not]
        return {"bool": self._body_with_boost(body)}


@dataclass(frozen=True, slots=True)
class QueryStringQuery(Query):
    """Query-string clause scoped to one or more fields."""

    query: str = ""
    fields: tuple[str, ...] = ()
    default_operator: str | None = None
    analyze_wildcard: bool = False

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"query": self.query, "fields": list(self.fields)}
        if self.default_operator is not None:
            body["default_operator"] = self.default_operator
        if self.analyze_wildcard:
            body["analyze_wildcard"] = True
        return {"query_string": self._body_with_boost(body)}


@dataclass(frozen=True, slots=True)
class FuzzyQuery(Query):
    """Fuzzy term clause."""

    field: str = ""
    value: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"fuzzy": {self.field: self._body_with_boost({"value": self.value})}}


@dataclass(frozen=True, slots=True)
class RangeQuery(Query):
    """Range clause; absent limits are omitted."""

    field: str = ""
    gte: Any = None
    gt: Any = None
    lte: Any = None
    lt: Any = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        for key in ("gte", "gt", "lte", "lt"):
            value = getattr(self, key)
            if value is not None:
                body[key] = value
        return {"range": {self.field: self._body_with_boost(body)}}


__all__ = [
    "Query",
    "BoolQuery",
    "QueryStringQuery",
    "FuzzyQuery",
    "RangeQuery",
]
