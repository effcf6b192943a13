"\"\"\"Immutable value types produced by the scoring stages.\"\"\""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ScoringStatus(str, Enum):
    QUALIFIED = "qualified"
    PARTIALLY_QUALIFIED = "partially_qualified"
    NOT_QUALIFIED = "not_qualified"
    UNDER_REVIEW = "under_review"


@dataclass(frozen=True, slots=True)
class CriterionResult:
    """Verdict for one criterion against one candidate."""

    criterion_id: str
    met: bool
    score: int
    confidence: int
    reasoning: str


@dataclass(frozen=True, slots=True)
class WeightedScore:
    overall_score: int
    required_satisfied: bool
    failed_required: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Classification:
    status: ScoringStatus
    review_required: bool
    confidence_spread: int


@dataclass(frozen=True, slots=True)
class Explanation:
    strengths: tuple[str, ...] = ()
    concerns: tuple[str, ...] = ()
    red_flags: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ScoringResult:
    """Complete evaluation payload for one (candidate, job) pair."""

    candidate_id: str
    job_id: str
    overall_score: int
    confidence: int
    category_scores: dict[str, int]
    criterion_results: tuple[CriterionResult, ...]
    status: ScoringStatus
    review_required: bool
    required_satisfied: bool
    strengths: tuple[str, ...]
    concerns: tuple[str, ...]
    red_flags: tuple[str, ...]
    recommendations: tuple[str, ...]
    computed_at: str
    criteria_set_version: int
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def explanation(self) -> Explanation:
        return Explanation(
            strengths=self.strengths,
            concerns=self.concerns,
            red_flags=self.red_flags,
            recommendations=self.recommendations,
        )

    def result_for(self, criterion_id: str) -> CriterionResult | None:
        for result in self.criterion_results:
            if result.criterion_id == criterion_id:
                return result
        return None

    def summary(self) -> dict[str, Any]:
        """Compact view used by list screens and audit records."""
        return {
            "candidate_id": self.candidate_id,
            "job_id": self.job_id,
            "overall_score": self.overall_score,
            "confidence": self.confidence,
            "status": self.status.value,
            "review_required": self.review_required,
            "category_scores": dict(self.category_scores),
            "criteria_set_version": self.criteria_set_version,
            "computed_at": self.computed_at,
        }
