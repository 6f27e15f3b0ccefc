"""
Exhaustive Match runtime helpers

The pieces user code writes so that match-analyzer can check it:

- closed: declares the permitted direct subtypes of a class
- ExhaustiveMatch.failed / ExhaustiveMatchFailed: fallback for any closed subject
- InvalidEnumArgument: fallback for enum subjects

Usage:
    from exhaustive_match import ExhaustiveMatch, closed

    @closed("Square", "Circle")
    class Shape: ...

    def area(shape: Shape) -> float:
        match shape:
            case Square():
                ...
            case Circle():
                ...
            case _:
                raise ExhaustiveMatch.failed(shape)
"""

import sys
from typing import Any, Callable, Union

__all__ = [
    "ExhaustiveMatch",
    "ExhaustiveMatchFailed",
    "InvalidEnumArgument",
    "closed",
    "permitted_subtypes",
]
__version__ = "0.1.0"


class ExhaustiveMatchFailed(Exception):
    """Raised when a value reaches the fallback arm of an exhaustive match."""

    def __init__(self, value: Any):
        self.value = value
        if value is None:
            message = "An exhaustive match was not matched: None"
        else:
            message = (
                f"An exhaustive match on {type(value).__name__} "
                f"was not matched: {value!r}"
            )
        super().__init__(message)


class ExhaustiveMatch:
    """Namespace for the exhaustive-match failure idiom."""

    @staticmethod
    def failed(value: Any) -> ExhaustiveMatchFailed:
        """Build the exception to raise from an exhaustive match fallback."""
        return ExhaustiveMatchFailed(value)


class InvalidEnumArgument(ValueError):
    """Raised when an enum value reaches the fallback arm of a match."""

    def __init__(self, value: Any, enum_type: type):
        self.value = value
        self.enum_type = enum_type
        super().__init__(
            f"The value {value!r} is invalid for Enum type '{enum_type.__name__}'"
        )


def closed(*subtypes: Union[type, str]) -> Callable[[type], type]:
    """
    Declare the permitted direct subtypes of a class.

    Subtypes may be given as classes or as names (resolved in the module that
    declares the decorated class), which allows forward references to
    subclasses defined further down the file.
    """

    def decorate(cls: type) -> type:
        cls.__closed_subtypes__ = tuple(subtypes)
        return cls

    return decorate


def permitted_subtypes(cls: type) -> tuple[type, ...]:
    """
    Resolve the subtypes recorded by @closed on a class.

    Raises:
        TypeError: If cls was not declared closed
        LookupError: If a forward reference cannot be resolved
    """
    declared = cls.__dict__.get("__closed_subtypes__")
    if declared is None:
        raise TypeError(f"{cls.__qualname__} is not declared closed")

    module = sys.modules.get(cls.__module__)
    resolved = []
    for subtype in declared:
        if isinstance(subtype, type):
            resolved.append(subtype)
            continue

        target: Any = module
        for part in subtype.split("."):
            target = getattr(target, part, None)
            if target is None:
                raise LookupError(
                    f"Cannot resolve permitted subtype {subtype!r} of {cls.__qualname__}"
                )
        resolved.append(target)

    return tuple(resolved)
