"""
Exception types for the redistricting GA.

Fatal errors (configuration, graph integrity, exhausted mutation, failed
objective) propagate to the caller. NoNeighborsError is the only one the
engine recovers from on its own.
"""

from typing import Any, Optional


class GendistError(Exception):
    """Base class for all gendist errors."""
    pass


class ConfigurationError(GendistError):
    """Raised when engine or run configuration is invalid."""
    pass


class GraphIntegrityError(GendistError):
    """Raised when the adjacency graph references unknown or duplicate units."""
    pass


class NoNeighborsError(GendistError):
    """Raised when a mutation target has an empty neighbor set."""

    def __init__(self, unit_id: Any):
        super().__init__(f"Unit {unit_id!r} has no neighbors to join")
        self.unit_id = unit_id


class MutationExhaustedError(GendistError):
    """Raised when every retry of a mutation hit a unit without neighbors."""

    def __init__(self, attempts: int, last_error: Optional[NoNeighborsError] = None):
        message = f"Mutation failed after {attempts} attempts"
        if last_error is not None:
            message += f" (last: {last_error})"
        super().__init__(message)
        self.attempts = attempts


class ObjectiveEvaluationError(GendistError):
    """
    Raised when the objective fails for a genome.

    The generation step that triggered it is abandoned without touching
    the population. The offending genome is attached for diagnosis.
    """

    def __init__(self, genome: Any, cause: BaseException):
        super().__init__(f"Objective failed for genome {genome}: {cause}")
        self.genome = genome
        self.cause = cause
