"""Convert - Property Value Conversion Exceptions.

Raised by property value converters when a stored fragment or a typed
value cannot be converted.
"""

from typing import Any


class ConversionError(Exception):
    """Raised when a property value cannot be converted.

    Attributes:
        details: Description of what went wrong.
        property_name: Logical name of the property owning the converter.
        value: The offending value.
        cause: Optional original exception.
    """

    def __init__(
        self,
        details: str,
        *,
        property_name: str | None = None,
        value: Any = None,
        cause: BaseException | None = None,
    ):
        """Initialize ConversionError.

        Args:
            details: Human-readable description of the failure.
            property_name: Optional logical name of the owning property.
            value: Optional value that failed to convert.
            cause: Optional original exception.
        """
        self.details = details
        self.property_name = property_name
        self.value = value
        self.cause = cause

        property_info = f" of property '{property_name}'" if property_name else ""
        value_info = f" [value={value!r}]" if value is not None else ""
        cause_info = f" (caused by: {type(cause).__name__}: {cause})" if cause else ""
        super().__init__(f"Conversion error{property_info}: {details}{value_info}{cause_info}")

        if cause:
            self.__cause__ = cause


__all__ = ["ConversionError"]
