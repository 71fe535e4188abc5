"""Mapping - Entity Mapper.

Serializes typed objects into Documents and deserializes Documents back
into typed objects, driven by EntityDescriptors:

- Only writable properties are written; read-only ones never reach the document.
- A property's converter (its own, else the one registered for its name)
  transforms the value; everything else goes through structural
  serialization (nested entities, sequences, mappings, enums, dates).
- Unknown document keys are ignored on read.
- Store-assigned identifiers are back-filled onto string id properties.

Every failure surfaces as a MappingError carrying the cause, the value
and the target type.
"""

import dataclasses
import inspect
import logging
import types
import typing
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from enum import Enum
from functools import lru_cache
from typing import Any, TypeAlias

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from esodm.core.convert.converters import PropertyValueConverter
from esodm.core.convert.registry import ConverterRegistry
from esodm.core.dto.mapping_dto import SearchHit, SearchHits
from esodm.core.mapping.descriptors import EntityDescriptor, MappingContext, PropertyDescriptor
from esodm.core.mapping.document import Document, SearchDocument
from esodm.core.mapping.exceptions import MappingError

logger = logging.getLogger(__name__)

#: Descriptor argument accepted by the mapper operations
Descriptors: TypeAlias = EntityDescriptor | Sequence[PropertyDescriptor] | None

_MISSING = object()

_SIMPLE_TYPES = (str, int, float, bool)


class EntityMapper:
    """Maps objects to and from Documents.

    The mapper holds references to a MappingContext and a ConverterRegistry
    but never mutates them, so a single instance can serve concurrent calls.

    Example:
        >>> mapper = EntityMapper(context, converters)
        >>> document = mapper.serialize(book)
        >>> mapper.deserialize(document, Book) == book
        True
    """

    def __init__(
        self,
        mapping_context: MappingContext | None = None,
        converters: ConverterRegistry | None = None,
        *,
        store_null_values: bool = False,
    ):
        """Initialize the mapper.

        Args:
            mapping_context: Descriptors keyed by class; used when no
                descriptors are passed to an operation and for nested entities.
            converters: Registry consulted for properties without their own converter.
            store_null_values: Write None values for every property.
        """
        self._context = mapping_context if mapping_context is not None else MappingContext()
        self._converters = converters
        self._store_null_values = store_null_values
        logger.debug("EntityMapper instance created (store_null_values=%s).", store_null_values)

    @property
    def mapping_context(self) -> MappingContext:
        return self._context

    # =========================================================================
    # SERIALIZE
    # =========================================================================

    def serialize(self, source: Any, descriptors: Descriptors = None) -> Document:
        """Serialize an object into a new Document.

        Args:
            source: Object to serialize. A mapping is copied as-is.
            descriptors: EntityDescriptor or property descriptors of the
                object's class; looked up in the mapping context when None.

        Returns:
            Fresh Document. `Document.id` is set from the id property, if any.

        Raises:
            MappingError: If any property cannot be read or converted.
        """
        if source is None:
            raise MappingError("Cannot serialize None")

        if isinstance(source, Mapping):
            return Document(source)

        source_type = type(source)
        entity = self._resolve_entity(source_type, descriptors)

        try:
            document = Document()
            self._write_entity(entity, source, document)

            id_property = entity.id_property
            if id_property is not None:
                id_value = getattr(source, id_property.name, None)
                if id_value is not None:
                    document.id = str(id_value)

            version_property = entity.version_property
            if version_property is not None:
                version_value = getattr(source, version_property.name, None)
                if isinstance(version_value, int) and not isinstance(version_value, bool):
                    document.version = version_value
        except MappingError:
            raise
        except Exception as e:
            raise MappingError("Unable to serialize object", target_type=source_type, value=source, cause=e) from e

        logger.debug("Serialized %s into %d fields.", source_type.__qualname__, len(document))
        return document

    def _write_entity(self, entity: EntityDescriptor, source: Any, sink: dict[str, Any]) -> None:
        for prop in entity.properties:
            if not prop.writable or prop.is_score:
                continue

            value = getattr(source, prop.name)
            if value is None:
                if prop.store_null_value or self._store_null_values:
                    sink[prop.field_name] = None
                continue

            sink[prop.field_name] = self._write_property_value(prop, value)

    def _write_property_value(self, prop: PropertyDescriptor, value: Any) -> Any:
        converter = self._converter_for(prop)
        if converter is not None:
            return converter.write(value)
        return self._write_value(value)

    def _write_value(self, value: Any) -> Any:
        if value is None or isinstance(value, _SIMPLE_TYPES):
            return value
        if isinstance(value, Enum):
            return value.name
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, Mapping):
            return {str(key): self._write_value(item) for key, item in value.items()}
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self._write_value(item) for item in value]

        nested = self._context.get_entity(type(value))
        if nested is not None:
            target: dict[str, Any] = {}
            self._write_entity(nested, value, target)
            return target

        if dataclasses.is_dataclass(value):
            return {
                dc_field.name: self._write_value(getattr(value, dc_field.name))
                for dc_field in dataclasses.fields(value)
            }

        try:
            return to_jsonable_python(value)
        except PydanticSerializationError as e:
            if hasattr(value, "__dict__"):
                return {
                    key: self._write_value(item) for key, item in vars(value).items() if not key.startswith("_")
                }
            raise MappingError(
                f"Cannot serialize value of type {type(value).__name__}",
                target_type=type(value),
                value=value,
                cause=e,
            ) from e

    # =========================================================================
    # DESERIALIZE
    # =========================================================================

    def deserialize(self, document: Mapping[str, Any], target_type: type, descriptors: Descriptors = None) -> Any:
        """Deserialize a document into a new instance of target_type.

        Args:
            document: Document (or plain mapping) to read.
            target_type: Class to instantiate. dict / Document return a copy.
            descriptors: EntityDescriptor or property descriptors of
                target_type; looked up in the mapping context when None.

        Returns:
            The new instance, with store metadata (id, version, score) applied.

        Raises:
            MappingError: If the document cannot be mapped onto target_type.
        """
        if document is None:
            return None
        if not isinstance(document, Mapping):
            raise MappingError(
                f"Document must be a mapping, got {type(document).__name__}",
                target_type=target_type,
                value=document,
            )

        if target_type in (dict, Document, object, Any):
            return document.copy() if isinstance(document, Document) else dict(document)

        entity = self._resolve_entity(target_type, descriptors)
        metadata = document if isinstance(document, Document) else None

        try:
            instance = self._read_entity(entity, document, metadata)
        except MappingError:
            raise
        except Exception as e:
            raise MappingError("Unable to deserialize document", target_type=target_type, value=document, cause=e) from e

        if metadata is not None and metadata.has_id():
            self.backfill_identifier(instance, metadata.id, entity)
        return instance

    def map_documents(self, documents: Iterable[Mapping[str, Any]], target_type: type, descriptors: Descriptors = None) -> list[Any]:
        """Deserialize several documents into target_type instances."""
        return [self.deserialize(document, target_type, descriptors) for document in documents]

    def _read_entity(
        self,
        entity: EntityDescriptor,
        source: Mapping[str, Any],
        metadata: Document | None = None,
    ) -> Any:
        values: dict[str, Any] = {}

        for prop in entity.properties:
            raw = self._metadata_value(prop, metadata)
            if raw is _MISSING:
                raw = self._get_source_value(source, prop.field_name)
            if raw is _MISSING and prop.is_id:
                raw = self._store_id(prop, metadata)
            if raw is _MISSING:
                continue
            values[prop.name] = self._read_property_value(prop, raw)

        return self._instantiate(entity, values)

    def _metadata_value(self, prop: PropertyDescriptor, metadata: Document | None) -> Any:
        if metadata is None:
            return _MISSING

        if prop.is_score:
            if isinstance(metadata, SearchDocument) and metadata.score is not None:
                return metadata.score
            return _MISSING

        if prop.is_version and metadata.has_version() and _accepts(prop.declared_type, int):
            if metadata.version == -1:
                raise MappingError(
                    "Version in response is -1",
                    target_type=prop.declared_type,
                    value=metadata.version,
                )
            return metadata.version

        return _MISSING

    @staticmethod
    def _store_id(prop: PropertyDescriptor, metadata: Document | None) -> Any:
        """Store-assigned id for a string id property absent from the source."""
        if metadata is None or not metadata.has_id() or not _accepts(prop.declared_type, str):
            return _MISSING
        return metadata.id

    @staticmethod
    def _get_source_value(source: Mapping[str, Any], field_name: str) -> Any:
        if field_name in source:
            return source[field_name]
        if "." not in field_name:
            return _MISSING

        current: Any = source
        for part in field_name.split("."):
            if not isinstance(current, Mapping) or part not in current:
                return _MISSING
            current = current[part]
        return current

    def _read_property_value(self, prop: PropertyDescriptor, raw: Any) -> Any:
        if raw is None:
            return None
        converter = self._converter_for(prop)
        if converter is not None:
            return converter.read(raw)
        return self._read_value(raw, prop.declared_type)

    def _read_value(self, value: Any, declared_type: Any) -> Any:
        if value is None:
            return None

        declared_type = _unwrap_optional(declared_type)
        if declared_type in (None, Any, object):
            return value

        origin = typing.get_origin(declared_type)
        args = typing.get_args(declared_type)
        container = origin or declared_type

        if isinstance(container, type) and issubclass(container, (list, tuple, set, frozenset)):
            if not isinstance(value, (list, tuple)):
                raise MappingError(
                    f"Expected a sequence, got {type(value).__name__}",
                    target_type=declared_type,
                    value=value,
                )
            if container is tuple and args and not (len(args) == 2 and args[1] is Ellipsis):
                return tuple(self._read_value(item, arg) for item, arg in zip(value, args, strict=False))
            item_type = args[0] if args else Any
            items = [self._read_value(item, item_type) for item in value]
            return items if container is list else container(items)

        if isinstance(container, type) and issubclass(container, Mapping):
            if not isinstance(value, Mapping):
                raise MappingError(
                    f"Expected a mapping, got {type(value).__name__}",
                    target_type=declared_type,
                    value=value,
                )
            key_type, item_type = args if len(args) == 2 else (Any, Any)
            return {
                self._read_value(key, key_type): self._read_value(item, item_type) for key, item in value.items()
            }

        if not isinstance(declared_type, type):
            return value

        if isinstance(value, bool) and declared_type is not bool:
            raise MappingError(
                f"Cannot read bool into {declared_type.__qualname__}",
                target_type=declared_type,
                value=value,
            )

        if isinstance(value, declared_type):
            return value

        if issubclass(declared_type, Enum):
            return declared_type[value] if isinstance(value, str) else declared_type(value)

        if issubclass(declared_type, datetime):
            return declared_type.fromisoformat(value)
        if issubclass(declared_type, date):
            return declared_type.fromisoformat(value)

        nested = self._context.get_entity(declared_type)
        if nested is not None and isinstance(value, Mapping):
            return self._read_entity(nested, value)

        if isinstance(value, (Mapping, list)):
            raise MappingError(
                f"Cannot read {type(value).__name__} into {declared_type.__qualname__}",
                target_type=declared_type,
                value=value,
            )

        # scalars (int, float, str, Decimal, UUID, ...) go through pydantic's lax validation
        try:
            return _type_adapter(declared_type).validate_python(value)
        except (ValidationError, PydanticSchemaGenerationError) as e:
            raise MappingError(
                f"Cannot read {type(value).__name__} into {declared_type.__qualname__}",
                target_type=declared_type,
                value=value,
                cause=e,
            ) from e

    @staticmethod
    def _instantiate(entity: EntityDescriptor, values: dict[str, Any]) -> Any:
        """Create the instance from constructor parameters, then assign the rest."""
        cls = entity.entity_type
        kwargs: dict[str, Any] = {}

        try:
            parameters = inspect.signature(cls).parameters
        except (TypeError, ValueError):
            parameters = {}

        property_names = set(entity.property_names)
        for name, parameter in parameters.items():
            if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD, parameter.POSITIONAL_ONLY):
                continue
            if name in values:
                kwargs[name] = values[name]
            elif parameter.default is parameter.empty and name in property_names:
                kwargs[name] = None

        instance = cls(**kwargs)
        for name, value in values.items():
            if name not in kwargs:
                setattr(instance, name, value)
        return instance

    # =========================================================================
    # IDENTIFIER BACK-FILL
    # =========================================================================

    def backfill_identifier(self, instance: Any, id: str | None, descriptors: Descriptors = None) -> Any:
        """Assign a store-provided identifier onto an instance.

        Only applies when the class has an id property whose declared type
        accepts strings and whose current value is unset (None or "").

        Args:
            instance: Object to update in place.
            id: Identifier returned by the store.
            descriptors: Descriptors of the instance's class, or None to look them up.

        Returns:
            The same instance.

        Raises:
            MappingError: If the identifier cannot be assigned.
        """
        if instance is None or id is None:
            return instance

        entity = self._resolve_entity(type(instance), descriptors)
        id_property = entity.id_property
        if id_property is None or not _accepts(id_property.declared_type, str):
            return instance

        if getattr(instance, id_property.name, None) not in (None, ""):
            return instance

        try:
            setattr(instance, id_property.name, id)
        except Exception as e:
            raise MappingError(
                f"Unable to assign identifier to property '{id_property.name}'",
                target_type=type(instance),
                value=id,
                cause=e,
            ) from e
        logger.debug("Back-filled id %r on %s.", id, type(instance).__qualname__)
        return instance

    # =========================================================================
    # SEARCH HITS
    # =========================================================================

    def read_search_hit(self, document: SearchDocument, target_type: type, descriptors: Descriptors = None) -> SearchHit:
        """Map a search hit document into a SearchHit with typed content."""
        if not isinstance(document, SearchDocument):
            raise MappingError(
                f"Expected SearchDocument, got {type(document).__name__}",
                target_type=target_type,
                value=document,
            )
        content = self.deserialize(document, target_type, descriptors)
        return SearchHit(
            id=document.id,
            index=document.index,
            score=document.score,
            sort_values=list(document.sort_values),
            content=content,
        )

    def read_search_hits(
        self,
        documents: Iterable[SearchDocument],
        target_type: type,
        descriptors: Descriptors = None,
        *,
        total_hits: int | None = None,
        max_score: float | None = None,
    ) -> SearchHits:
        """Map a page of search hit documents into SearchHits."""
        hits = [self.read_search_hit(document, target_type, descriptors) for document in documents]
        if max_score is None:
            scores = [hit.score for hit in hits if hit.score is not None]
            max_score = max(scores) if scores else None
        return SearchHits(
            total_hits=total_hits if total_hits is not None else len(hits),
            max_score=max_score,
            search_hits=hits,
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _resolve_entity(self, target_type: type, descriptors: Descriptors) -> EntityDescriptor:
        if isinstance(descriptors, EntityDescriptor):
            return descriptors
        if descriptors is None:
            return self._context.get_required_entity(target_type)
        try:
            return EntityDescriptor(entity_type=target_type, properties=tuple(descriptors))
        except Exception as e:
            raise MappingError("Invalid property descriptors", target_type=target_type, cause=e) from e

    def _converter_for(self, prop: PropertyDescriptor) -> PropertyValueConverter | None:
        if prop.converter is not None:
            return prop.converter
        if self._converters is not None:
            return self._converters.get(prop.name)
        return None


@lru_cache(maxsize=256)
def _type_adapter(declared_type: type) -> TypeAdapter:
    return TypeAdapter(declared_type)


def _unwrap_optional(declared_type: Any) -> Any:
    """Turn `X | None` / `Optional[X]` into X; other unions are left alone."""
    origin = typing.get_origin(declared_type)
    if origin is typing.Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(declared_type) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return declared_type


def _accepts(declared_type: Any, value_type: type) -> bool:
    """Whether a property of declared_type can hold a value_type value."""
    declared_type = _unwrap_optional(declared_type)
    if declared_type in (None, Any, object):
        return True
    return isinstance(declared_type, type) and issubclass(value_type, declared_type)


__all__ = ["EntityMapper", "Descriptors"]
