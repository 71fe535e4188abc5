"""Mapping - Document types.

A Document is the schemaless, insertion-ordered mapping stored in the
search engine, plus the metadata the store returns alongside it (id,
index, version, sequence number, primary term). Metadata never appears
among the document's keys.
"""

import json
from collections.abc import Mapping
from typing import Any, Self

from esodm.core.mapping.exceptions import MappingError


class Document(dict[str, Any]):
    """Ordered mapping from stored field name to value, with store metadata.

    Attributes:
        id: Identifier assigned by the store, if known.
        index: Index the document belongs to, if known.
        version: Document version, if returned.
        seq_no: Sequence number, if returned.
        primary_term: Primary term, if returned.
    """

    def __init__(
        self,
        source: Mapping[str, Any] | None = None,
        *,
        id: str | None = None,
        index: str | None = None,
        version: int | None = None,
        seq_no: int | None = None,
        primary_term: int | None = None,
    ):
        super().__init__(source or {})
        self.id = id
        self.index = index
        self.version = version
        self.seq_no = seq_no
        self.primary_term = primary_term

    @classmethod
    def from_mapping(cls, source: Mapping[str, Any], **metadata: Any) -> Self:
        """Create a document holding a copy of the given mapping."""
        if not isinstance(source, Mapping):
            raise MappingError(
                f"Document source must be a mapping, got {type(source).__name__}",
                target_type=cls,
                value=source,
            )
        return cls(source, **metadata)

    @classmethod
    def from_json(cls, text: str, **metadata: Any) -> Self:
        """Parse a JSON object into a document.

        Raises:
            MappingError: If the text is not valid JSON or not a JSON object.
        """
        try:
            parsed = json.loads(text)
        except (TypeError, ValueError) as e:
            raise MappingError("Cannot parse JSON", target_type=cls, value=text, cause=e) from e
        if not isinstance(parsed, dict):
            raise MappingError("JSON document must be an object", target_type=cls, value=text)
        return cls(parsed, **metadata)

    def to_json(self) -> str:
        """Render the document content (without metadata) as JSON."""
        try:
            return json.dumps(self, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise MappingError("Cannot render document as JSON", target_type=type(self), cause=e) from e

    def append(self, key: str, value: Any) -> Self:
        """Set a key and return the document for chaining."""
        if key is None:
            raise ValueError("Key must not be None")
        self[key] = value
        return self

    def has_id(self) -> bool:
        return self.id is not None

    def has_version(self) -> bool:
        return self.version is not None

    def get_typed(self, key: str, expected: type | tuple[type, ...], default: Any = None) -> Any:
        """Get a value checking its type; missing or None values yield default.

        Raises:
            TypeError: If the present value has another type.
        """
        value = self.get(key)
        if value is None:
            return default
        if not isinstance(value, expected):
            raise TypeError(f"Value of '{key}' is {type(value).__name__}, not {expected}")
        return value

    def get_string(self, key: str, default: str | None = None) -> str | None:
        return self.get_typed(key, str, default)

    def get_int(self, key: str, default: int | None = None) -> int | None:
        if isinstance(self.get(key), bool):
            raise TypeError(f"Value of '{key}' is bool, not int")
        return self.get_typed(key, int, default)

    def get_bool(self, key: str, default: bool | None = None) -> bool | None:
        return self.get_typed(key, bool, default)

    def metadata(self) -> dict[str, Any]:
        """Store metadata that is set, as a dict."""
        fields = {
            "id": self.id,
            "index": self.index,
            "version": self.version,
            "seq_no": self.seq_no,
            "primary_term": self.primary_term,
        }
        return {key: value for key, value in fields.items() if value is not None}

    def copy(self) -> Self:
        """Shallow copy preserving metadata."""
        return type(self)(self, **self.metadata())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict.__repr__(self)}, metadata={self.metadata()!r})"


class SearchDocument(Document):
    """Document returned as a search hit, with score and sort values.

    Attributes:
        score: Relevance score of the hit, if any.
        sort_values: Sort values of the hit.
    """

    def __init__(
        self,
        source: Mapping[str, Any] | None = None,
        *,
        score: float | None = None,
        sort_values: tuple[Any, ...] | list[Any] = (),
        **metadata: Any,
    ):
        super().__init__(source, **metadata)
        self.score = score
        self.sort_values = tuple(sort_values)

    def copy(self) -> Self:
        return type(self)(self, score=self.score, sort_values=self.sort_values, **self.metadata())


__all__ = ["Document", "SearchDocument"]
