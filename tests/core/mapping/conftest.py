"""Shared fixtures for mapping tests."""

import pytest

from esodm.core.convert import ConverterRegistry, NumberRangePropertyValueConverter
from esodm.core.mapping import (
    EntityDescriptor,
    EntityMapper,
    MappingContext,
    PropertyDescriptor,
    describe_dataclass,
)
from tests.core.mapping.entities import Address, Author, Book, Counter, Person, Product


@pytest.fixture
def book_descriptor() -> EntityDescriptor:
    """Book with a range converter, version and score properties and a read-only summary."""
    return describe_dataclass(
        Book,
        version_field="version",
        score_field="score",
        field_names={"published": "published_on"},
        converters={"pages": NumberRangePropertyValueConverter("pages")},
        read_only={"summary"},
    )


@pytest.fixture
def person_descriptor() -> EntityDescriptor:
    return EntityDescriptor(
        entity_type=Person,
        properties=(
            PropertyDescriptor(name="id", declared_type=str | None, is_id=True),
            PropertyDescriptor(name="name", declared_type=str),
            PropertyDescriptor(name="age", declared_type=int | None),
        ),
    )


@pytest.fixture
def context(book_descriptor, person_descriptor) -> MappingContext:
    context = MappingContext()
    context.register_entity(book_descriptor)
    context.register_entity(person_descriptor)
    context.register_entity(describe_dataclass(Author, id_field=None, field_names={"name": "full_name"}))
    context.register_entity(describe_dataclass(Address, id_field=None))
    context.register_entity(describe_dataclass(Counter))
    context.register_entity(describe_dataclass(Product))
    return context


@pytest.fixture
def mapper(context) -> EntityMapper:
    return EntityMapper(context, ConverterRegistry())
