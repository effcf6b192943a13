"\"\"\"Status classification of a weighted score.\"\"\""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .results import Classification, ScoringStatus


@dataclass
class ClassifierConfig:
    """Score bands and the confidence spread that triggers human review."""

    qualified_threshold: int = 80
    partially_qualified_threshold: int = 60
    review_confidence_spread: int = 40

    def __post_init__(self) -> None:
        if self.partially_qualified_threshold > self.qualified_threshold:
            raise ValueError("partially_qualified_threshold must not exceed qualified_threshold")


class Classifier:
    """Map (overall score, gate, confidences) to a status and a review flag.

    Stateless: the same inputs always give the same classification.
    """

    def __init__(self, *, config: ClassifierConfig | None = None) -> None:
        self._config = config or ClassifierConfig()

    def classify(
        self,
        overall_score: int,
        required_satisfied: bool,
        confidences: Iterable[int],
    ) -> Classification:
        confidences = list(confidences)
        spread = max(confidences) - min(confidences) if confidences else 0
        return Classification(
            status=self._status(overall_score, required_satisfied),
            review_required=spread > self._config.review_confidence_spread,
            confidence_spread=spread,
        )

    def _status(self, overall_score: int, required_satisfied: bool) -> ScoringStatus:
        if not required_satisfied:
            return ScoringStatus.NOT_QUALIFIED
        if overall_score >= self._config.qualified_threshold:
            return ScoringStatus.QUALIFIED
        if overall_score >= self._config.partially_qualified_threshold:
            return ScoringStatus.PARTIALLY_QUALIFIED
        return ScoringStatus.NOT_QUALIFIED
