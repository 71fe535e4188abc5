"""Mapping - Entity Mapping Exceptions."""

from typing import Any


class MappingError(Exception):
    """Raised when an object cannot be mapped to or from a document.

    Wraps the original cause (conversion failure, structural mismatch,
    attribute access failure) together with the attempted value and the
    target type.

    Attributes:
        details: Description of the failure.
        target_type: The type being mapped (or its name).
        value: Optional value that failed to map.
        cause: Optional original exception.
    """

    def __init__(
        self,
        details: str,
        *,
        target_type: type | str | None = None,
        value: Any = None,
        cause: BaseException | None = None,
    ):
        """Initialize MappingError.

        Args:
            details: Human-readable description of the failure.
            target_type: Optional type (or type name) being mapped.
            value: Optional value that failed to map.
            cause: Optional original exception.
        """
        self.details = details
        self.target_type = target_type
        self.value = value
        self.cause = cause

        type_info = f" (type={self.target_type_name})" if target_type else ""
        cause_info = f" (caused by: {type(cause).__name__}: {cause})" if cause else ""
        super().__init__(f"Mapping error{type_info}: {details}{cause_info}")

        if cause:
            self.__cause__ = cause

    @property
    def target_type_name(self) -> str | None:
        """Name of the target type, if any."""
        if self.target_type is None:
            return None
        if isinstance(self.target_type, str):
            return self.target_type
        return getattr(self.target_type, "__qualname__", repr(self.target_type))


__all__ = ["MappingError"]
