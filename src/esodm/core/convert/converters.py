"""Convert - Property Value Converters.

A property value converter transforms a typed property value into its
document representation (`write`) and back (`read`). Converters hold no
mutable state, so one instance can be shared by concurrent mapper calls.

Main Components
---------------
- **PropertyValueConverter**: Structural protocol (read/write).
- **AbstractPropertyValueConverter**: Base class bound to a property name.
- **AbstractRangePropertyValueConverter**: Range <-> `{gte?, gt?, lte?, lt?}`
  for any ordered bound type; subclasses supply `parse` and `format`.
- **NumberRangePropertyValueConverter**, **TemporalRangePropertyValueConverter**:
  Ready-made range converters.
- **TemporalPropertyValueConverter**: Single date/datetime values.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from esodm.core.convert.exceptions import ConversionError
from esodm.core.convert.range import Bound, Range

T = TypeVar("T")


@runtime_checkable
class PropertyValueConverter(Protocol):
    """Structural interface (duck typing) for property value converters."""

    def read(self, value: Any) -> Any:
        """Convert a stored document value into the typed property value."""
        ...

    def write(self, value: Any) -> Any:
        """Convert a typed property value into its document representation."""
        ...


class AbstractPropertyValueConverter(ABC):
    """Base class for converters that belong to a single property.

    Attributes:
        property_name: Logical name of the owning property, used in errors.
    """

    def __init__(self, property_name: str | None = None):
        self.property_name = property_name

    @abstractmethod
    def read(self, value: Any) -> Any: ...

    @abstractmethod
    def write(self, value: Any) -> Any: ...

    def _error(self, details: str, value: Any, cause: BaseException | None = None) -> ConversionError:
        return ConversionError(details, property_name=self.property_name, value=value, cause=cause)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(property_name={self.property_name!r})"


# =============================================================================
# RANGE CONVERTERS
# =============================================================================


class AbstractRangePropertyValueConverter(AbstractPropertyValueConverter, Generic[T]):
    """Converts a Range to and from a `{gte?, gt?, lte?, lt?}` fragment.

    On read `gte` wins over `gt` and `lte` wins over `lt`; a missing side is
    unbounded. On write bounds without a value are omitted.
    """

    LT_FIELD = "lt"
    LTE_FIELD = "lte"
    GT_FIELD = "gt"
    GTE_FIELD = "gte"

    @abstractmethod
    def parse(self, value: str) -> T:
        """Parse the string form of a bound value."""
        ...

    @abstractmethod
    def format(self, value: T) -> str:
        """Format a bound value to its string form."""
        ...

    def read(self, value: Any) -> Range[T]:
        """Read a range fragment into a Range.

        Args:
            value: Mapping with optional gte/gt/lte/lt keys.

        Returns:
            Range built from the resolved bounds.

        Raises:
            ConversionError: If value is not a mapping or a bound cannot be parsed.
        """
        if value is None:
            raise self._error("value must not be None", value)
        if not isinstance(value, Mapping):
            raise self._error(f"value must be a mapping, got {type(value).__name__}", value)

        try:
            if self.GTE_FIELD in value:
                lower_bound = Bound.inclusive(self._parse_bound(value[self.GTE_FIELD]))
            elif self.GT_FIELD in value:
                lower_bound = Bound.exclusive(self._parse_bound(value[self.GT_FIELD]))
            else:
                lower_bound = Bound.unbounded()

            if self.LTE_FIELD in value:
                upper_bound = Bound.inclusive(self._parse_bound(value[self.LTE_FIELD]))
            elif self.LT_FIELD in value:
                upper_bound = Bound.exclusive(self._parse_bound(value[self.LT_FIELD]))
            else:
                upper_bound = Bound.unbounded()

            return Range(lower_bound, upper_bound)
        except ConversionError:
            raise
        except Exception as e:
            raise self._error("Unable to read range", value, e) from e

    def write(self, value: Any) -> Any:
        """Write a Range into a range fragment.

        Values that are not a Range are passed through as their string form,
        so callers handing in a pre-formatted string keep working.

        Args:
            value: Range to write.

        Returns:
            Ordered dict with the present bound keys, or str(value).

        Raises:
            ConversionError: If value is None or a bound cannot be formatted.
        """
        if value is None:
            raise self._error("value must not be None", value)
        if not isinstance(value, Range):
            return str(value)

        try:
            target: dict[str, str] = {}
            lower_bound = value.lower_bound
            upper_bound = value.upper_bound

            if lower_bound.is_bounded:
                key = self.GTE_FIELD if lower_bound.is_inclusive else self.GT_FIELD
                target[key] = self.format(lower_bound.value)

            if upper_bound.is_bounded:
                key = self.LTE_FIELD if upper_bound.is_inclusive else self.LT_FIELD
                target[key] = self.format(upper_bound.value)

            return target
        except ConversionError:
            raise
        except Exception as e:
            raise self._error("Unable to write range", value, e) from e

    def _parse_bound(self, raw: Any) -> T:
        # the store may hand back numbers instead of their string form
        return self.parse(raw if isinstance(raw, str) else str(raw))


class NumberRangePropertyValueConverter(AbstractRangePropertyValueConverter[Any]):
    """Range converter for numeric bounds (int, float, Decimal, ...)."""

    def __init__(self, property_name: str | None = None, number_type: type = int):
        super().__init__(property_name)
        self.number_type = number_type

    def parse(self, value: str) -> Any:
        return self.number_type(value)

    def format(self, value: Any) -> str:
        return str(value)


class TemporalFormatter:
    """Formats and parses date/datetime values.

    Uses ISO-8601 unless a `strftime` pattern is given. Instances are
    immutable and safe to share.
    """

    def __init__(self, temporal_type: type = datetime, date_format: str | None = None):
        if not (isinstance(temporal_type, type) and issubclass(temporal_type, date)):
            raise TypeError(f"temporal_type must be date or datetime, got {temporal_type!r}")
        self.temporal_type = temporal_type
        self.date_format = date_format

    def format(self, value: date) -> str:
        if not isinstance(value, date):
            raise TypeError(f"Expected a date or datetime, got {type(value).__name__}")
        if self.date_format:
            return value.strftime(self.date_format)
        return value.isoformat()

    def parse(self, value: str) -> date:
        if self.date_format:
            parsed = datetime.strptime(value, self.date_format)
            if self.temporal_type is date:
                return parsed.date()
            return parsed
        return self.temporal_type.fromisoformat(value)


class TemporalRangePropertyValueConverter(AbstractRangePropertyValueConverter[date]):
    """Range converter for date or datetime bounds."""

    def __init__(
        self,
        property_name: str | None = None,
        temporal_type: type = datetime,
        date_format: str | None = None,
    ):
        super().__init__(property_name)
        self._formatter = TemporalFormatter(temporal_type, date_format)

    def parse(self, value: str) -> date:
        return self._formatter.parse(value)

    def format(self, value: date) -> str:
        return self._formatter.format(value)


# =============================================================================
# SINGLE VALUE CONVERTERS
# =============================================================================


class TemporalPropertyValueConverter(AbstractPropertyValueConverter):
    """Converts a single date or datetime value to and from its string form."""

    def __init__(
        self,
        property_name: str | None = None,
        temporal_type: type = datetime,
        date_format: str | None = None,
    ):
        super().__init__(property_name)
        self._formatter = TemporalFormatter(temporal_type, date_format)

    def read(self, value: Any) -> date:
        if value is None:
            raise self._error("value must not be None", value)
        if isinstance(value, self._formatter.temporal_type):
            return value
        if not isinstance(value, str):
            raise self._error(f"value must be a string, got {type(value).__name__}", value)
        try:
            return self._formatter.parse(value)
        except Exception as e:
            raise self._error("Unable to parse temporal value", value, e) from e

    def write(self, value: Any) -> str:
        if value is None:
            raise self._error("value must not be None", value)
        try:
            return self._formatter.format(value)
        except Exception as e:
            raise self._error("Unable to format temporal value", value, e) from e


__all__ = [
    "PropertyValueConverter",
    "AbstractPropertyValueConverter",
    "AbstractRangePropertyValueConverter",
    "NumberRangePropertyValueConverter",
    "TemporalFormatter",
    "TemporalRangePropertyValueConverter",
    "TemporalPropertyValueConverter",
]
