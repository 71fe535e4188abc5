"""Tests for Document and SearchDocument."""

import pytest

from esodm.core.mapping import Document, MappingError, SearchDocument


class TestDocument:
    """Test document content and metadata."""

    def test_metadata_not_in_content(self):
        document = Document({"title": "Dune"}, id="b1", version=2)
        assert dict(document) == {"title": "Dune"}
        assert document.has_id()
        assert document.has_version()
        assert document.metadata() == {"id": "b1", "version": 2}

    def test_insertion_order(self):
        document = Document().append("b", 1).append("a", 2)
        assert list(document) == ["b", "a"]

    def test_copy_keeps_metadata(self):
        document = Document({"a": 1}, id="x", seq_no=4, primary_term=1)
        copied = document.copy()
        assert copied == document
        assert copied is not document
        assert copied.metadata() == {"id": "x", "seq_no": 4, "primary_term": 1}

    def test_json_round_trip(self):
        document = Document({"title": "Dune", "tags": ["sf"]}, id="b1")
        text = document.to_json()
        assert "b1" not in text
        parsed = Document.from_json(text, id="b1")
        assert parsed == document
        assert parsed.id == "b1"

    def test_from_json_invalid(self):
        with pytest.raises(MappingError, match="Cannot parse JSON"):
            Document.from_json("{nope")

    def test_from_json_not_an_object(self):
        with pytest.raises(MappingError, match="must be an object"):
            Document.from_json("[1, 2]")

    def test_from_mapping(self):
        assert Document.from_mapping({"a": 1}, index="books").index == "books"
        with pytest.raises(MappingError):
            Document.from_mapping([("a", 1)])

    def test_typed_getters(self):
        document = Document({"s": "x", "i": 3, "b": True})
        assert document.get_string("s") == "x"
        assert document.get_int("i") == 3
        assert document.get_bool("b") is True
        assert document.get_string("missing", "default") == "default"

    def test_typed_getter_mismatch(self):
        document = Document({"i": "3", "b": True})
        with pytest.raises(TypeError):
            document.get_int("i")
        with pytest.raises(TypeError):
            document.get_int("b")


class TestSearchDocument:
    """Test search hit documents."""

    def test_score_and_sort_values(self):
        document = SearchDocument({"a": 1}, id="x", score=1.5, sort_values=[3, "z"])
        assert document.score == 1.5
        assert document.sort_values == (3, "z")
        assert document.id == "x"

    def test_copy(self):
        document = SearchDocument({"a": 1}, score=0.5)
        copied = document.copy()
        assert isinstance(copied, SearchDocument)
        assert copied.score == 0.5
