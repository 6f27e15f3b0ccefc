"""Analyzer configuration."""

from dataclasses import dataclass, field

from .assertions import FAILURE_IDIOMS, FailureIdiom

DEFAULT_MAX_CLOSURE_DEPTH = 32
CLOSED_DECORATORS = ("exhaustive_match.closed",)


@dataclass(frozen=True)
class AnalyzerConfig:
    """Settings for one analysis run."""

    # Ceiling on nested closed declarations; cyclic declarations hit it
    max_closure_depth: int = DEFAULT_MAX_CLOSURE_DEPTH
    # Diagnostic code values (e.g. "EM-GUARD-UNSUPPORTED") to drop
    ignore: frozenset[str] = frozenset()
    closed_decorators: tuple[str, ...] = CLOSED_DECORATORS
    failure_idioms: tuple[FailureIdiom, ...] = field(default=FAILURE_IDIOMS)

    def __post_init__(self):
        if self.max_closure_depth < 1:
            raise ValueError(
                f"max_closure_depth must be at least 1, got {self.max_closure_depth}"
            )
