"""Convert - Range and Bound value types.

A Range is an interval over a totally ordered type with independently
inclusive, exclusive or unbounded lower and upper limits. It is the typed
counterpart of the `{gte?, gt?, lte?, lt?}` fragment stored in documents.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Bound(Generic[T]):
    """One limit of a Range.

    Attributes:
        value: The limit value, or None when the bound is unbounded.
        is_inclusive: Whether the value itself belongs to the range.
    """

    value: T | None = None
    is_inclusive: bool = False

    @classmethod
    def inclusive(cls, value: T) -> "Bound[T]":
        """Create an inclusive bound (value is part of the range)."""
        if value is None:
            raise ValueError("Value for an inclusive bound must not be None")
        return cls(value=value, is_inclusive=True)

    @classmethod
    def exclusive(cls, value: T) -> "Bound[T]":
        """Create an exclusive bound (value is not part of the range)."""
        if value is None:
            raise ValueError("Value for an exclusive bound must not be None")
        return cls(value=value, is_inclusive=False)

    @classmethod
    def unbounded(cls) -> "Bound[Any]":
        """Create a bound without a value."""
        return cls()

    @property
    def is_bounded(self) -> bool:
        """Whether this bound carries a value."""
        return self.value is not None

    def __str__(self) -> str:
        if not self.is_bounded:
            return "unbounded"
        return f"{self.value}{'(inclusive)' if self.is_inclusive else '(exclusive)'}"


@dataclass(frozen=True, slots=True)
class Range(Generic[T]):
    """An interval between a lower and an upper Bound.

    Example:
        >>> Range.closed(1, 10).contains(10)
        True
        >>> Range.right_open(1, 10).contains(10)
        False
    """

    lower_bound: Bound[T]
    upper_bound: Bound[T]

    def __post_init__(self) -> None:
        if not isinstance(self.lower_bound, Bound):
            raise TypeError(f"Lower bound must be a Bound, got {type(self.lower_bound).__name__}")
        if not isinstance(self.upper_bound, Bound):
            raise TypeError(f"Upper bound must be a Bound, got {type(self.upper_bound).__name__}")

    @classmethod
    def of(cls, lower_bound: Bound[T], upper_bound: Bound[T]) -> "Range[T]":
        return cls(lower_bound, upper_bound)

    @classmethod
    def closed(cls, lower: T, upper: T) -> "Range[T]":
        """Both bounds inclusive."""
        return cls(Bound.inclusive(lower), Bound.inclusive(upper))

    @classmethod
    def open(cls, lower: T, upper: T) -> "Range[T]":
        """Both bounds exclusive."""
        return cls(Bound.exclusive(lower), Bound.exclusive(upper))

    @classmethod
    def left_open(cls, lower: T, upper: T) -> "Range[T]":
        """Lower bound exclusive, upper bound inclusive."""
        return cls(Bound.exclusive(lower), Bound.inclusive(upper))

    @classmethod
    def right_open(cls, lower: T, upper: T) -> "Range[T]":
        """Lower bound inclusive, upper bound exclusive."""
        return cls(Bound.inclusive(lower), Bound.exclusive(upper))

    @classmethod
    def just(cls, value: T) -> "Range[T]":
        """A range containing exactly one value."""
        return cls.closed(value, value)

    @classmethod
    def left_unbounded(cls, upper_bound: Bound[T]) -> "Range[T]":
        return cls(Bound.unbounded(), upper_bound)

    @classmethod
    def right_unbounded(cls, lower_bound: Bound[T]) -> "Range[T]":
        return cls(lower_bound, Bound.unbounded())

    @classmethod
    def unbounded(cls) -> "Range[Any]":
        """A range without limits on either side."""
        return cls(Bound.unbounded(), Bound.unbounded())

    def contains(self, value: T) -> bool:
        """Check whether the value lies within this range.

        Args:
            value: Value comparable with the bound values.

        Returns:
            True if both bounds accept the value.

        Raises:
            ValueError: If value is None.
        """
        if value is None:
            raise ValueError("Reference value must not be None")

        lower = self.lower_bound
        if lower.is_bounded:
            above_lower = lower.value <= value if lower.is_inclusive else lower.value < value
            if not above_lower:
                return False

        upper = self.upper_bound
        if upper.is_bounded:
            below_upper = value <= upper.value if upper.is_inclusive else value < upper.value
            if not below_upper:
                return False

        return True

    def __str__(self) -> str:
        left = "[" if self.lower_bound.is_inclusive else "("
        right = "]" if self.upper_bound.is_inclusive else ")"
        lower = self.lower_bound.value if self.lower_bound.is_bounded else "-inf"
        upper = self.upper_bound.value if self.upper_bound.is_bounded else "+inf"
        return f"{left}{lower}, {upper}{right}"


__all__ = ["Bound", "Range"]
