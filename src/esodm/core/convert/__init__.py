"""Convert - Property Value Converter Framework.

Converts typed property values to and from their document representation.

Main Components
---------------
- **Range / Bound**: Ordered interval value with inclusive, exclusive or
  unbounded limits.
- **PropertyValueConverter**: read/write protocol implemented by converters.
- **AbstractRangePropertyValueConverter**: Range <-> `{gte?, gt?, lte?, lt?}`.
- **ConverterRegistry**: Converters keyed by logical property name.
- **ConversionError**: Raised on malformed stored or typed values.

Quick Start
-----------
    >>> from esodm.core.convert import NumberRangePropertyValueConverter, Range
    >>> converter = NumberRangePropertyValueConverter("age", number_type=int)
    >>> converter.write(Range.right_open(18, 65))
    {'gte': '18', 'lt': '65'}
    >>> converter.read({"gte": "18", "lt": "65"}) == Range.right_open(18, 65)
    True
"""

from esodm.core.convert.converters import (
    AbstractPropertyValueConverter,
    AbstractRangePropertyValueConverter,
    NumberRangePropertyValueConverter,
    PropertyValueConverter,
    TemporalFormatter,
    TemporalPropertyValueConverter,
    TemporalRangePropertyValueConverter,
)
from esodm.core.convert.exceptions import ConversionError
from esodm.core.convert.range import Bound, Range
from esodm.core.convert.registry import ConverterRegistry

__all__ = [
    # Value types
    "Bound",
    "Range",
    # Converters
    "PropertyValueConverter",
    "AbstractPropertyValueConverter",
    "AbstractRangePropertyValueConverter",
    "NumberRangePropertyValueConverter",
    "TemporalFormatter",
    "TemporalRangePropertyValueConverter",
    "TemporalPropertyValueConverter",
    # Registry
    "ConverterRegistry",
    # Exceptions
    "ConversionError",
]
