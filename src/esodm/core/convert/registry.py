"""Converter Registry.

Holds the property value converters consulted by the entity mapper, keyed
by the logical property name. One registry instance is owned by the
mapping setup and shared with every mapper call; it is never global.
"""

import logging

from esodm.core.convert.converters import PropertyValueConverter

logger = logging.getLogger(__name__)


class ConverterRegistry:
    """Registry of property value converters keyed by logical property name.

    Example:
        >>> registry = ConverterRegistry()
        >>> registry.register_converter("validity", NumberRangePropertyValueConverter("validity"))
        >>> registry.get("validity")
        NumberRangePropertyValueConverter(property_name='validity')
    """

    def __init__(self):
        """Initialize an empty converter registry."""
        self._converters: dict[str, PropertyValueConverter] = {}
        logger.debug("ConverterRegistry instance created.")

    def register_converter(self, name: str, converter: PropertyValueConverter) -> None:
        """Register a converter for the given logical property name.

        Args:
            name: Logical name of the property.
            converter: Object implementing the PropertyValueConverter protocol.

        Raises:
            ValueError: If name is invalid or a different converter is already registered.
            TypeError: If converter doesn't implement the PropertyValueConverter protocol.
        """
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Invalid property name: {name!r}")

        if not isinstance(converter, PropertyValueConverter):
            raise TypeError(f"Converter for '{name}' does not implement the PropertyValueConverter protocol")

        # Override policy: same instance is idempotent, a different one is rejected.
        if name in self._converters:
            if self._converters[name] is converter:
                logger.warning(
                    "Converter for '%s' already registered with the same instance. Skipping.",
                    name,
                )
                return
            raise ValueError(f"Override not allowed for already registered converter: {name!r}")

        self._converters[name] = converter
        logger.debug("Converter for '%s' registered: %r", name, converter)

    def get(self, name: str) -> PropertyValueConverter | None:
        """Get the converter registered for a property name, or None."""
        return self._converters.get(name)

    def has(self, name: str) -> bool:
        """Check if a converter is registered for the property name."""
        return name in self._converters

    def list_names(self) -> list[str]:
        """Get the property names that have a registered converter."""
        return list(self._converters.keys())

    def unregister(self, name: str) -> bool:
        """Unregister a converter by property name.

        Returns True if the converter was removed, False if it was not found.
        """
        if name in self._converters:
            del self._converters[name]
            logger.debug("Converter for '%s' unregistered.", name)
            return True
        return False

    @property
    def registry(self) -> dict[str, PropertyValueConverter]:
        """Get a shallow copy of the registry dictionary."""
        return dict(self._converters)

    def __len__(self) -> int:
        return len(self._converters)


__all__ = ["ConverterRegistry"]
