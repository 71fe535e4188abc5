"""Mapping - Property and entity descriptors.

Descriptors are the metadata the entity mapper consumes: for every mapped
property its logical name, stored field name, declared type, writability
and optional converter. They are built explicitly, by hand or with
`describe_dataclass`, and registered per class in a MappingContext; the
mapper itself never reflects on classes.
"""

import dataclasses
import logging
import typing
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from esodm.core.convert.converters import PropertyValueConverter
from esodm.core.mapping.exceptions import MappingError

logger = logging.getLogger(__name__)


class PropertyDescriptor(BaseModel):
    """Metadata for one mapped property.

    Attributes:
        name: Logical (attribute) name on the class.
        field_name: Stored field name in the document. Defaults to name.
        declared_type: Declared type, used to read nested and typed values.
        writable: False for read-only or computed properties; they are never written.
        converter: Optional converter for this property.
        is_id: Whether this property holds the document identifier.
        is_version: Whether this property holds the document version.
        is_score: Whether this property receives the search hit score.
        store_null_value: Write None values instead of omitting them.
    """

    name: str = Field(min_length=1, description="Logical property name")
    field_name: str = Field(default="", description="Stored field name")
    declared_type: Any = Field(default=object, description="Declared property type")
    writable: bool = Field(default=True, description="Whether the property is written")
    converter: Any = Field(default=None, description="Optional PropertyValueConverter")
    is_id: bool = Field(default=False, description="Identifier property")
    is_version: bool = Field(default=False, description="Version property")
    is_score: bool = Field(default=False, description="Search score property")
    store_null_value: bool = Field(default=False, description="Write None values")

    model_config = {"frozen": True, "extra": "forbid", "arbitrary_types_allowed": True}

    @model_validator(mode="before")
    @classmethod
    def _default_field_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("field_name"):
            data = {**data, "field_name": data.get("name", "")}
        return data

    @field_validator("converter")
    @classmethod
    def _check_converter(cls, value: Any) -> Any:
        if value is not None and not isinstance(value, PropertyValueConverter):
            raise ValueError(f"{type(value).__name__} does not implement the PropertyValueConverter protocol")
        return value


class EntityDescriptor(BaseModel):
    """Ordered property descriptors of one mapped class.

    Attributes:
        entity_type: The mapped class.
        properties: Property descriptors in mapping order.
    """

    entity_type: type = Field(description="Mapped class")
    properties: tuple[PropertyDescriptor, ...] = Field(default=(), description="Mapped properties")

    model_config = {"frozen": True, "extra": "forbid", "arbitrary_types_allowed": True}

    @model_validator(mode="after")
    def _check_properties(self) -> "EntityDescriptor":
        names: set[str] = set()
        field_names: set[str] = set()
        for prop in self.properties:
            if prop.name in names:
                raise ValueError(f"Duplicate property name {prop.name!r}")
            if prop.field_name in field_names:
                raise ValueError(f"Duplicate stored field name {prop.field_name!r}")
            names.add(prop.name)
            field_names.add(prop.field_name)

        for flag in ("is_id", "is_version", "is_score"):
            flagged = [prop.name for prop in self.properties if getattr(prop, flag)]
            if len(flagged) > 1:
                raise ValueError(f"At most one property may set {flag}, got {flagged}")
        return self

    def get_property(self, name: str) -> PropertyDescriptor | None:
        """Get a property descriptor by logical name."""
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def get_property_by_field_name(self, field_name: str) -> PropertyDescriptor | None:
        """Get a property descriptor by stored field name."""
        for prop in self.properties:
            if prop.field_name == field_name:
                return prop
        return None

    def _flagged(self, flag: str) -> PropertyDescriptor | None:
        return next((prop for prop in self.properties if getattr(prop, flag)), None)

    @property
    def id_property(self) -> PropertyDescriptor | None:
        return self._flagged("is_id")

    @property
    def version_property(self) -> PropertyDescriptor | None:
        return self._flagged("is_version")

    @property
    def score_property(self) -> PropertyDescriptor | None:
        return self._flagged("is_score")

    @property
    def property_names(self) -> list[str]:
        return [prop.name for prop in self.properties]


class MappingContext:
    """Registry of entity descriptors keyed by class.

    Lookups fall back along the class MRO, so a subclass without its own
    registration uses its closest registered base.
    """

    def __init__(self):
        """Initialize an empty mapping context."""
        self._entities: dict[type, EntityDescriptor] = {}
        logger.debug("MappingContext instance created.")

    def register_entity(self, descriptor: EntityDescriptor) -> EntityDescriptor:
        """Register the descriptor of a class.

        Raises:
            TypeError: If descriptor is not an EntityDescriptor.
            ValueError: If a different descriptor is already registered for the class.
        """
        if not isinstance(descriptor, EntityDescriptor):
            raise TypeError(f"Expected EntityDescriptor, got {type(descriptor).__name__}")

        entity_type = descriptor.entity_type
        existing = self._entities.get(entity_type)
        if existing is not None:
            if existing == descriptor:
                logger.warning("Entity '%s' already registered with the same descriptor. Skipping.", entity_type.__qualname__)
                return existing
            raise ValueError(f"Override not allowed for already registered entity: {entity_type.__qualname__}")

        self._entities[entity_type] = descriptor
        logger.debug("Entity '%s' registered with %d properties.", entity_type.__qualname__, len(descriptor.properties))
        return descriptor

    def get_entity(self, entity_type: type) -> EntityDescriptor | None:
        """Get the descriptor for a class (or its closest registered base)."""
        for klass in getattr(entity_type, "__mro__", (entity_type,)):
            descriptor = self._entities.get(klass)
            if descriptor is not None:
                return descriptor
        return None

    def get_required_entity(self, entity_type: type) -> EntityDescriptor:
        """Get the descriptor for a class.

        Raises:
            MappingError: If no descriptor is registered.
        """
        descriptor = self.get_entity(entity_type)
        if descriptor is None:
            raise MappingError("No entity descriptor registered", target_type=entity_type)
        return descriptor

    def has_entity(self, entity_type: type) -> bool:
        return self.get_entity(entity_type) is not None

    def list_entities(self) -> list[type]:
        return list(self._entities.keys())


def describe_dataclass(
    cls: type,
    *,
    id_field: str | None = "id",
    version_field: str | None = None,
    score_field: str | None = None,
    field_names: dict[str, str] | None = None,
    converters: dict[str, PropertyValueConverter] | None = None,
    read_only: set[str] | frozenset[str] = frozenset(),
    store_null_values: set[str] | frozenset[str] = frozenset(),
) -> EntityDescriptor:
    """Build an EntityDescriptor from a dataclass.

    Args:
        cls: Dataclass to describe.
        id_field: Name of the identifier field (ignored if absent).
        version_field: Optional name of the version field.
        score_field: Optional name of the score field (never written).
        field_names: Logical name -> stored field name overrides.
        converters: Logical name -> converter.
        read_only: Logical names that must never be written.
        store_null_values: Logical names whose None values are written.

    Returns:
        EntityDescriptor with one property per dataclass field, in order.

    Raises:
        TypeError: If cls is not a dataclass.
    """
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise TypeError(f"{cls!r} is not a dataclass")

    field_names = field_names or {}
    converters = converters or {}
    hints = typing.get_type_hints(cls)

    properties = []
    for dc_field in dataclasses.fields(cls):
        name = dc_field.name
        properties.append(
            PropertyDescriptor(
                name=name,
                field_name=field_names.get(name, name),
                declared_type=hints.get(name, object),
                writable=name not in read_only and name != score_field,
                converter=converters.get(name),
                is_id=name == id_field,
                is_version=name == version_field,
                is_score=name == score_field,
                store_null_value=name in store_null_values,
            )
        )
    return EntityDescriptor(entity_type=cls, properties=tuple(properties))


__all__ = [
    "PropertyDescriptor",
    "EntityDescriptor",
    "MappingContext",
    "describe_dataclass",
]
