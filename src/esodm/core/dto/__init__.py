"""DTO package for esodm core."""

from .mapping_dto import SearchHit, SearchHits

__all__ = ["SearchHit", "SearchHits"]
