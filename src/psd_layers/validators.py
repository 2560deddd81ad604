"""
Validation and conversion functions for attrs.
"""

from enum import Enum
from typing import Any, Callable

from attrs import define, field
from attrs.validators import in_

__all__ = ["in_", "range_", "enum_or_value"]


@define(repr=False, frozen=True)
class _RangeValidator:
    minimum: Any = field()
    maximum: Any = field()

    def __call__(self, inst: Any, attr: Any, value: Any) -> None:
        try:
            in_range = self.minimum <= value and value <= self.maximum
        except TypeError:
            in_range = False

        if not in_range:
            raise ValueError(
                "'{name}' must be in range [{minimum!r}, {maximum!r}]: {value!r}".format(
                    name=attr.name,
                    minimum=self.minimum,
                    maximum=self.maximum,
                    value=value,
                )
            )

    def __repr__(self) -> str:
        return "<range_ validator with [{minimum!r}, {maximum!r}]>".format(
            minimum=self.minimum, maximum=self.maximum
        )


def range_(minimum: Any, maximum: Any) -> _RangeValidator:
    """
    A validator that raises a :exc:`ValueError` if the initializer is called
    with a value that does not belong in the [minimum, maximum] range. The
    check is performed using ``minimum <= value and value <= maximum``
    """
    return _RangeValidator(minimum, maximum)


def enum_or_value(enum: type[Enum]) -> Callable[[Any], Any]:
    """
    A converter that turns a known wire value into the member of ``enum``
    and keeps unknown values as they are.

    Producers write values that no enumeration lists; the decoder keeps them
    instead of rejecting the document.
    """

    def converter(value: Any) -> Any:
        if isinstance(value, enum):
            return value
        try:
            return enum(value)
        except ValueError:
            return value

    return converter
