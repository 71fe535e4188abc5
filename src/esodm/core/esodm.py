"""Core ESODM facade.

This module defines the main entry point used by applications and tests:
one object wiring configuration, converters, entity mapping and query
compilation together.
"""

import logging
from typing import Any

from dotenv import load_dotenv

from esodm.core.config.config_manager import ConfigManager
from esodm.core.convert.converters import PropertyValueConverter
from esodm.core.convert.registry import ConverterRegistry
from esodm.core.criteria.compiler import CriteriaQueryCompiler
from esodm.core.criteria.query import BoolQuery
from esodm.core.criteria.types import Criteria
from esodm.core.mapping.descriptors import EntityDescriptor, MappingContext
from esodm.core.mapping.document import Document
from esodm.core.mapping.mapper import Descriptors, EntityMapper

logger = logging.getLogger(__name__)
load_dotenv()


class ESODM:
    """Core facade for the object/document mapping layer."""

    def __init__(self, *args, **kwargs):
        """Prevent direct construction; use `ESODM.create(...)` instead."""
        raise RuntimeError("Use: instance = ESODM.create(...)")

    def _initialize(self, *, config_path: str | None = None):
        """Initialize ESODM internal components.

        Args:
            config_path: Path to JSON configuration file
        """
        self.config_manager = ConfigManager(config_path=config_path)
        self.converters = ConverterRegistry()
        self.mapping_context = MappingContext()
        logger.debug("ESODM instance created.")

    def _wire(self) -> None:
        """Build the mapper and compiler from the loaded configuration."""
        self.mapper = EntityMapper(
            self.mapping_context,
            self.converters,
            store_null_values=bool(self.config_manager.get_section_config("mapping", "store_null_values", False)),
        )
        self.compiler = CriteriaQueryCompiler(
            default_operator=self.config_manager.get_section_config("criteria", "default_operator", "and"),
            analyze_wildcard=bool(self.config_manager.get_section_config("criteria", "analyze_wildcard", True)),
        )

    @classmethod
    def create(
        cls,
        *,
        config_path: str | None = None,
        config: dict[str, Any] | None = None,
    ) -> "ESODM":
        """Factory method to create and initialize ESODM.

        Args:
            config_path: Path to JSON configuration file
            config: Optional configuration dictionary
        """
        instance = cls.__new__(cls)  # bypass __init__
        instance._initialize(config_path=config_path)
        instance.config_manager.load(config=config)
        instance._wire()
        return instance

    def reload_config(self) -> None:
        """Reload configuration and rebuild the mapper and compiler.

        Registered entities and converters are kept.
        """
        self.config_manager.reload()
        self._wire()

    def register_entity(self, descriptor: EntityDescriptor) -> EntityDescriptor:
        return self.mapping_context.register_entity(descriptor)

    def register_converter(self, name: str, converter: PropertyValueConverter) -> None:
        self.converters.register_converter(name, converter)

    def serialize(self, source: Any, descriptors: Descriptors = None) -> Document:
        """Serialize an object into a Document."""
        return self.mapper.serialize(source, descriptors)

    def deserialize(self, document: Document, target_type: type, descriptors: Descriptors = None) -> Any:
        """Deserialize a Document into a target_type instance."""
        return self.mapper.deserialize(document, target_type, descriptors)

    def backfill_identifier(self, instance: Any, id: str | None, descriptors: Descriptors = None) -> Any:
        return self.mapper.backfill_identifier(instance, id, descriptors)

    def compile(self, criteria: Criteria) -> BoolQuery:
        """Compile a criteria chain into a BoolQuery."""
        query = self.compiler.compile(criteria)
        logger.debug("ESODM.compile produced %d clauses", query.clause_count)
        return query


__all__ = ["ESODM"]
