"""Tests for EntityMapper - serialize, deserialize, back-fill and search hits."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

import pytest

from esodm.core.convert import ConversionError, ConverterRegistry, Range
from esodm.core.dto import SearchHit, SearchHits
from esodm.core.mapping import (
    Document,
    EntityMapper,
    MappingError,
    PropertyDescriptor,
    SearchDocument,
    describe_dataclass,
)
from tests.core.mapping.entities import Address, Author, Book, Counter, Genre, Person, Product


@dataclass(frozen=True)
class FrozenNote:
    id: str | None
    text: str


class UpperCaseConverter:
    def read(self, value):
        return value.lower()

    def write(self, value):
        return value.upper()


def make_book(**overrides) -> Book:
    values = {
        "id": "b1",
        "title": "Dune",
        "published": date(1965, 8, 1),
        "genre": Genre.FICTION,
        "author": Author("Frank Herbert", Address("Tacoma")),
        "tags": ["sf", "classic"],
        "pages": Range.closed(1, 412),
        "version": 3,
    }
    values.update(overrides)
    return Book(**values)


class TestSerialize:
    """Test writing objects into documents."""

    def test_document_content(self, mapper):
        document = mapper.serialize(make_book())
        assert document == {
            "id": "b1",
            "title": "Dune",
            "published_on": "1965-08-01",
            "genre": "FICTION",
            "author": {"full_name": "Frank Herbert", "address": {"city": "Tacoma"}},
            "tags": ["sf", "classic"],
            "pages": {"gte": "1", "lte": "412"},
            "version": 3,
        }

    def test_field_order_follows_descriptors(self, mapper):
        document = mapper.serialize(make_book())
        assert list(document)[:3] == ["id", "title", "published_on"]

    def test_metadata_set(self, mapper):
        document = mapper.serialize(make_book())
        assert document.id == "b1"
        assert document.version == 3

    def test_non_string_id(self, mapper):
        assert mapper.serialize(Counter(id=5)).id == "5"

    def test_read_only_properties_excluded(self, mapper):
        """Read-only and score properties never reach the document."""
        document = mapper.serialize(make_book(summary="A desert planet", score=9.5))
        assert "summary" not in document
        assert "score" not in document

    def test_none_skipped(self, mapper):
        document = mapper.serialize(Book(id=None, title="Untitled"))
        assert document == {"title": "Untitled", "tags": []}
        assert document.id is None

    def test_store_null_values(self, context):
        mapper = EntityMapper(context, store_null_values=True)
        document = mapper.serialize(Book(id=None, title="Untitled"))
        assert document["id"] is None
        assert document["published_on"] is None
        assert "summary" not in document
        assert "score" not in document

    def test_store_null_value_per_property(self, context):
        descriptors = [
            PropertyDescriptor(name="name", declared_type=str),
            PropertyDescriptor(name="age", declared_type=int | None, store_null_value=True),
        ]
        document = EntityMapper(context).serialize(Person("Ann"), descriptors)
        assert document == {"name": "Ann", "age": None}

    def test_mapping_source_copied(self, mapper):
        source = {"a": 1}
        document = mapper.serialize(source)
        assert isinstance(document, Document)
        assert document == source
        document["b"] = 2
        assert "b" not in source

    def test_registry_converter_used(self, context):
        converters = ConverterRegistry()
        converters.register_converter("title", UpperCaseConverter())
        mapper = EntityMapper(context, converters)
        assert mapper.serialize(make_book())["title"] == "DUNE"

    def test_unregistered_class(self, mapper):
        with pytest.raises(MappingError, match="No entity descriptor registered"):
            mapper.serialize(FrozenNote("n1", "x"))

    def test_explicit_descriptors(self, mapper):
        document = mapper.serialize(FrozenNote("n1", "x"), describe_dataclass(FrozenNote))
        assert document == {"id": "n1", "text": "x"}

    def test_converter_failure_wrapped(self, mapper):
        with pytest.raises(MappingError) as exc_info:
            mapper.serialize(make_book(pages=Range.closed(1, 2)), [
                PropertyDescriptor(name="pages", converter=_FailingConverter()),
            ])
        assert isinstance(exc_info.value.__cause__, ConversionError)
        assert exc_info.value.target_type is Book

    def test_none_source(self, mapper):
        with pytest.raises(MappingError):
            mapper.serialize(None)


class _FailingConverter:
    def read(self, value):
        raise ConversionError("cannot read", value=value)

    def write(self, value):
        raise ConversionError("cannot write", value=value)


class TestDeserialize:
    """Test reading documents into objects."""

    def test_round_trip(self, mapper):
        book = make_book()
        document = mapper.serialize(book)
        assert mapper.deserialize(document, Book) == book

    def test_typed_values(self, mapper):
        book = mapper.deserialize(
            Document({"title": "Dune", "published_on": "1965-08-01", "genre": "SCIENCE", "pages": {"gt": "0"}}),
            Book,
        )
        assert book.published == date(1965, 8, 1)
        assert book.genre is Genre.SCIENCE
        assert book.pages.lower_bound.value == 0
        assert not book.pages.upper_bound.is_bounded

    def test_unknown_keys_ignored(self, mapper):
        book = mapper.deserialize(Document({"title": "Dune", "unexpected": 1}), Book)
        assert book.title == "Dune"
        assert not hasattr(book, "unexpected")

    def test_absent_properties_keep_defaults(self, mapper):
        book = mapper.deserialize(Document({"title": "Dune"}), Book)
        assert book.id is None
        assert book.tags == []
        assert book.summary is None

    def test_id_from_metadata(self, mapper):
        book = mapper.deserialize(Document({"title": "Dune"}, id="b9"), Book)
        assert book.id == "b9"

    def test_id_in_source_wins(self, mapper):
        book = mapper.deserialize(Document({"id": "b1", "title": "Dune"}, id="b9"), Book)
        assert book.id == "b1"

    def test_non_string_id_not_back_filled(self, mapper):
        counter = mapper.deserialize(Document({"count": 2}, id="7"), Counter)
        assert counter.id is None
        assert counter.count == 2

    def test_version_from_metadata(self, mapper):
        book = mapper.deserialize(Document({"title": "Dune", "version": 1}, version=5), Book)
        assert book.version == 5

    def test_version_minus_one_rejected(self, mapper):
        with pytest.raises(MappingError, match="-1"):
            mapper.deserialize(Document({"title": "Dune"}, version=-1), Book)

    def test_plain_class_constructor_and_setattr(self, mapper):
        person = mapper.deserialize(Document({"name": "Ann", "age": "41"}, id="p1"), Person)
        assert person.name == "Ann"
        assert person.age == 41
        assert person.id == "p1"

    def test_dotted_field_name(self, mapper):
        descriptors = [
            PropertyDescriptor(name="name", declared_type=str),
            PropertyDescriptor(name="age", field_name="stats.age", declared_type=int),
        ]
        person = mapper.deserialize(Document({"name": "Ann", "stats": {"age": 30}}), Person, descriptors)
        assert person.age == 30

    def test_dotted_field_name_direct_key_first(self, mapper):
        descriptors = [
            PropertyDescriptor(name="name", declared_type=str),
            PropertyDescriptor(name="age", field_name="stats.age", declared_type=int),
        ]
        document = Document({"name": "Ann", "stats.age": 1, "stats": {"age": 2}})
        assert mapper.deserialize(document, Person, descriptors).age == 1

    def test_store_id_on_frozen_entity(self, mapper):
        """The store id is passed to the constructor, so immutable entities read fine."""
        note = mapper.deserialize(Document({"text": "x"}, id="g"), FrozenNote, describe_dataclass(FrozenNote))
        assert note == FrozenNote(id="g", text="x")

    def test_dict_target(self, mapper):
        document = Document({"a": 1}, id="x")
        result = mapper.deserialize(document, dict)
        assert result == {"a": 1}
        assert result is not document

    def test_invalid_value_wrapped(self, mapper):
        with pytest.raises(MappingError) as exc_info:
            mapper.deserialize(Document({"title": "Dune", "published_on": "someday"}), Book)
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert exc_info.value.target_type is Book

    def test_converter_failure_wrapped(self, mapper):
        with pytest.raises(MappingError) as exc_info:
            mapper.deserialize(Document({"title": "Dune", "pages": "1-10"}), Book)
        assert isinstance(exc_info.value.__cause__, ConversionError)

    def test_structural_mismatch(self, mapper):
        with pytest.raises(MappingError, match="Expected a sequence"):
            mapper.deserialize(Document({"title": "Dune", "tags": "sf"}), Book)

    def test_none_document(self, mapper):
        assert mapper.deserialize(None, Book) is None

    def test_map_documents(self, mapper):
        books = mapper.map_documents([Document({"title": "A"}), Document({"title": "B"})], Book)
        assert [book.title for book in books] == ["A", "B"]


class TestBackfillIdentifier:
    """Test assigning store-generated identifiers."""

    def test_unset_id_filled(self, mapper):
        book = Book(id=None, title="Dune")
        assert mapper.backfill_identifier(book, "gen-1") is book
        assert book.id == "gen-1"

    def test_empty_string_counts_as_unset(self, mapper):
        book = Book(id="", title="Dune")
        mapper.backfill_identifier(book, "gen-1")
        assert book.id == "gen-1"

    def test_existing_id_kept(self, mapper):
        book = Book(id="mine", title="Dune")
        mapper.backfill_identifier(book, "gen-1")
        assert book.id == "mine"

    def test_non_string_id_untouched(self, mapper):
        counter = Counter(id=None)
        mapper.backfill_identifier(counter, "gen-1")
        assert counter.id is None

    def test_no_id_property(self, mapper):
        address = Address("Tacoma")
        assert mapper.backfill_identifier(address, "gen-1") is address

    def test_assignment_failure(self, mapper):
        note = FrozenNote(None, "x")
        with pytest.raises(MappingError, match="Unable to assign identifier"):
            mapper.backfill_identifier(note, "gen-1", describe_dataclass(FrozenNote))


class TestSearchHits:
    """Test search hit mapping."""

    def test_read_search_hit(self, mapper):
        document = SearchDocument({"title": "Dune"}, id="b1", index="books", score=2.5, sort_values=[10])
        hit = mapper.read_search_hit(document, Book)
        assert isinstance(hit, SearchHit)
        assert hit.id == "b1"
        assert hit.index == "books"
        assert hit.score == 2.5
        assert hit.sort_values == [10]
        assert hit.content.id == "b1"
        assert hit.content.score == 2.5

    def test_read_search_hit_requires_search_document(self, mapper):
        with pytest.raises(MappingError):
            mapper.read_search_hit(Document({"title": "Dune"}), Book)

    def test_read_search_hits(self, mapper):
        documents = [
            SearchDocument({"title": "A"}, id="1", score=1.0),
            SearchDocument({"title": "B"}, id="2", score=3.0),
        ]
        hits = mapper.read_search_hits(documents, Book)
        assert isinstance(hits, SearchHits)
        assert hits.total_hits == 2
        assert hits.max_score == 3.0
        assert [book.title for book in hits.contents] == ["A", "B"]
        assert hits.has_search_hits()
        assert len(hits) == 2

    def test_read_search_hits_explicit_totals(self, mapper):
        hits = mapper.read_search_hits([], Book, total_hits=120, max_score=None)
        assert hits.total_hits == 120
        assert hits.max_score is None
        assert not hits.has_search_hits()


SKU = UUID("12345678-1234-5678-1234-567812345678")


def make_product(**overrides) -> Product:
    values = {
        "id": "p1",
        "price": Decimal("19.90"),
        "sku": SKU,
        "stock": {1: "one", 2: "two"},
        "quantity": 3,
    }
    values.update(overrides)
    return Product(**values)


class TestScalarValues:
    """Test scalar serialization and strict reading of declared types."""

    def test_decimal_uuid_and_int_keys_written(self, mapper):
        document = mapper.serialize(make_product())
        assert document == {
            "id": "p1",
            "price": "19.90",
            "sku": "12345678-1234-5678-1234-567812345678",
            "stock": {"1": "one", "2": "two"},
            "quantity": 3,
        }

    def test_round_trip(self, mapper):
        product = make_product(weight=1.5, label="gift")
        assert mapper.deserialize(mapper.serialize(product), Product) == product

    def test_mapping_keys_read_back_typed(self, mapper):
        product = mapper.deserialize(mapper.serialize(make_product()), Product)
        assert product.stock == {1: "one", 2: "two"}

    def test_lossless_coercions_accepted(self, mapper):
        document = Document({"price": 5, "sku": str(SKU), "quantity": 3.0, "weight": 2})
        product = mapper.deserialize(document, Product)
        assert product.price == Decimal(5)
        assert product.sku == SKU
        assert product.quantity == 3
        assert product.weight == 2.0

    def test_fractional_float_into_int_rejected(self, mapper):
        document = Document({"price": "1", "sku": str(SKU), "quantity": 3.7})
        with pytest.raises(MappingError, match="into int"):
            mapper.deserialize(document, Product)

    def test_bool_into_int_rejected(self, mapper):
        document = Document({"price": "1", "sku": str(SKU), "quantity": True})
        with pytest.raises(MappingError, match="Cannot read bool"):
            mapper.deserialize(document, Product)

    def test_number_into_str_rejected(self, mapper):
        document = Document({"price": "1", "sku": str(SKU), "label": 5})
        with pytest.raises(MappingError, match="into str"):
            mapper.deserialize(document, Product)

    def test_invalid_uuid_rejected(self, mapper):
        document = Document({"price": "1", "sku": "not-a-uuid"})
        with pytest.raises(MappingError) as exc_info:
            mapper.deserialize(document, Product)
        assert exc_info.value.value == "not-a-uuid"

    def test_unserializable_value(self, mapper):
        with pytest.raises(MappingError, match="Cannot serialize value of type object"):
            mapper.serialize(make_product(label=object()))
