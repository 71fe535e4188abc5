"""Mapping - Object/Document mapping.

Turns typed objects into Documents (field name -> value maps plus store
metadata) and back, driven by property descriptors.

Quick Start:
    >>> from esodm.core.mapping import EntityMapper, MappingContext, describe_dataclass
    >>>
    >>> context = MappingContext()
    >>> context.register_entity(describe_dataclass(Book))
    >>> mapper = EntityMapper(context)
    >>>
    >>> document = mapper.serialize(book)
    >>> mapper.deserialize(document, Book)
"""

from .descriptors import EntityDescriptor, MappingContext, PropertyDescriptor, describe_dataclass
from .document import Document, SearchDocument
from .exceptions import MappingError
from .mapper import Descriptors, EntityMapper

__all__ = [
    "Descriptors",
    "Document",
    "EntityDescriptor",
    "EntityMapper",
    "MappingContext",
    "MappingError",
    "PropertyDescriptor",
    "SearchDocument",
    "describe_dataclass",
]
