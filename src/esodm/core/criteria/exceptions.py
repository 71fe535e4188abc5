"""Criteria - Compilation Exceptions."""

from typing import Any


class CompilationError(Exception):
    """Raised when a criteria chain cannot be compiled into a query tree.

    This exception should be raised when:
    - A criteria node has an empty or unresolved field name.
    - A BETWEEN entry does not carry exactly two bounds.
    - An IN / NOT_IN entry carries a non-iterable value.

    Attributes:
        details: Description of what failed.
        field: Optional field name of the offending node.
        operation: Optional operation key name of the offending entry.
        value: Optional offending value.
    """

    def __init__(
        self,
        details: str,
        *,
        field: str | None = None,
        operation: str | None = None,
        value: Any = None,
    ):
        """Initialize CompilationError.

        Args:
            details: Human-readable description of the failure.
            field: Optional field name associated with the error.
            operation: Optional operation key name.
            value: Optional invalid value.
        """
        self.details = details
        self.field = field
        self.operation = operation
        self.value = value

        field_info = f" (field={field!r})" if field else ""
        operation_info = f" (operation={operation})" if operation else ""
        value_info = f" [value={value!r}]" if value is not None else ""
        super().__init__(f"Compilation error{field_info}{operation_info}: {details}{value_info}")


__all__ = ["CompilationError"]
