"""
Assertion detection: is the fallback arm an exhaustiveness assertion?

A switch is only checked when its fallback arm unconditionally raises one of
the recognized failure idioms. The idioms are data; adding one is a new
FailureIdiom entry, not new control flow.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from .model import ArgKind, ClauseShape, RaiseShape

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FailureIdiom:
    """A recognized `raise <target>(<args>)` form."""

    name: str
    targets: frozenset[str]
    params: tuple[str, ...]
    shape: tuple[ArgKind, ...]
    enum_only: bool = False

    def matches(self, raised: RaiseShape, subject_is_enum: bool) -> bool:
        if raised.target not in self.targets:
            return False
        if self.enum_only and not subject_is_enum:
            return False

        bound = self._bind(raised)
        return bound is not None and tuple(bound) == self.shape

    def _bind(self, raised: RaiseShape) -> Optional[list[ArgKind]]:
        """Bind positional and keyword arguments to the idiom's parameters."""
        if len(raised.args) > len(self.params):
            return None

        bound: list[Optional[ArgKind]] = list(raised.args)
        bound.extend([None] * (len(self.params) - len(raised.args)))
        for name, kind in raised.keywords:
            if name not in self.params:
                return None
            index = self.params.index(name)
            if bound[index] is not None:
                return None
            bound[index] = kind

        if any(kind is None for kind in bound):
            return None
        return bound


FAILURE_IDIOMS: tuple[FailureIdiom, ...] = (
    FailureIdiom(
        name="invalid-enum-argument",
        targets=frozenset({"exhaustive_match.InvalidEnumArgument"}),
        params=("value", "enum_type"),
        shape=(ArgKind.SUBJECT, ArgKind.SUBJECT_TYPE),
        enum_only=True,
    ),
    FailureIdiom(
        name="exhaustive-match-failed",
        targets=frozenset({
            "exhaustive_match.ExhaustiveMatch.failed",
            "exhaustive_match.ExhaustiveMatchFailed",
        }),
        params=("value",),
        shape=(ArgKind.SUBJECT,),
    ),
)


class AssertionDetector:
    """Recognize exhaustiveness assertions in a switch's fallback arm."""

    def __init__(self, idioms: Sequence[FailureIdiom] = FAILURE_IDIOMS):
        self.idioms = tuple(idioms)

    def detect(
        self, fallback: Optional[ClauseShape], subject_is_enum: bool
    ) -> Optional[FailureIdiom]:
        """
        Return the idiom raised by the fallback arm, if any.

        Args:
            fallback: The switch's fallback clause (None when absent)
            subject_is_enum: Whether the subject is an enumeration

        Returns:
            The first matching FailureIdiom, or None when the switch has not
            opted into exhaustiveness checking
        """
        if fallback is None:
            return None

        for raised in fallback.raises:
            for idiom in self.idioms:
                if idiom.matches(raised, subject_is_enum):
                    return idiom

        if fallback.raises:
            logger.debug(
                f"Fallback at {fallback.span} raises {[r.target for r in fallback.raises]}, "
                "none of them an exhaustiveness assertion"
            )
        return None
