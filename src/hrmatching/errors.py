"""Exception taxonomy for the scoring engine."""

from __future__ import annotations


class HRMatchingError(Exception):
    """Base class for engine errors."""


class InvalidCriteriaSet(HRMatchingError):
    """Raised when a criteria set cannot be used for evaluation.

    Not a ``ValueError``: pydantic validators re-raise it unchanged rather than
    wrapping it in a ``ValidationError``.
    """

    def __init__(self, message: str, *, job_id: str | None = None, problems: list[str] | None = None):
        super().__init__(message)
        self.job_id = job_id
        self.problems = problems or [message]


class DataIncomplete(HRMatchingError):
    """A predicate could not find the data it needs. Never leaves the evaluator."""

    def __init__(self, field: str, detail: str | None = None):
        super().__init__(detail or f"missing data for '{field}'")
        self.field = field


class UnknownCandidate(KeyError):
    """Candidate id not known to the repository."""


class UnknownJob(KeyError):
    """Job id has no stored criteria set."""


__all__ = [
    "HRMatchingError",
    "InvalidCriteriaSet",
    "DataIncomplete",
    "UnknownCandidate",
    "UnknownJob",
]
