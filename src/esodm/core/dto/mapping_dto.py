"""DTOs for mapped search results.

A SearchHit pairs store metadata (id, index, score, sort values) with the
typed content produced by the EntityMapper; SearchHits is one page of them.
"""

from typing import Any

from pydantic import BaseModel, Field


class SearchHit(BaseModel):
    """A single search hit with typed content.

    Attributes:
        id: Document identifier, if the store returned one.
        index: Index the hit came from.
        score: Relevance score of the hit.
        sort_values: Values the hit was sorted by.
        content: The deserialized entity.
    """

    id: str | None = Field(default=None, description="Document identifier")
    index: str | None = Field(default=None, description="Index name")
    score: float | None = Field(default=None, description="Relevance score")
    sort_values: list[Any] = Field(default_factory=list, description="Sort values of the hit")
    content: Any = Field(description="Deserialized entity")

    model_config = {"extra": "forbid", "arbitrary_types_allowed": True}


class SearchHits(BaseModel):
    """A page of search hits.

    Attributes:
        total_hits: Total number of matches reported by the store.
        max_score: Highest score across the hits.
        search_hits: The hits, in store order.
    """

    total_hits: int = Field(default=0, ge=0, description="Total number of matches")
    max_score: float | None = Field(default=None, description="Highest relevance score")
    search_hits: list[SearchHit] = Field(default_factory=list, description="Hits in store order")

    model_config = {"extra": "forbid"}

    def has_search_hits(self) -> bool:
        return bool(self.search_hits)

    @property
    def contents(self) -> list[Any]:
        """Typed contents of every hit."""
        return [hit.content for hit in self.search_hits]

    def __len__(self) -> int:
        return len(self.search_hits)


__all__ = ["SearchHit", "SearchHits"]
