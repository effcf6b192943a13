"\"\"\"Core scoring engine components.\"\"\""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..schemas import CandidateProfile, Criterion, JobCriteriaSet

from .aggregation import CategoryAggregator
from .classifier import Classifier, ClassifierConfig
from .evaluators import RuleEvaluator, RuleEvaluatorConfig
from .explanation import ExplanationBuilder, ExplanationConfig, RecommendationTable
from .results import (
    Classification,
    CriterionResult,
    Explanation,
    ScoringResult,
    ScoringStatus,
    WeightedScore,
)
from .scoring import ScoringEngine
from .weighting import WeightingEngine


@runtime_checkable
class CriterionEvaluator(Protocol):
    """Evaluator contract for producing one criterion verdict."""

    def evaluate(
        self,
        criterion: Criterion,
        candidate: CandidateProfile,
        job: JobCriteriaSet,
    ) -> CriterionResult:
        """Return the verdict for ``criterion``; must not raise on missing data."""


__all__ = [
    "CriterionEvaluator",
    "CategoryAggregator",
    "Classifier",
    "ClassifierConfig",
    "RuleEvaluator",
    "RuleEvaluatorConfig",
    "ExplanationBuilder",
    "ExplanationConfig",
    "RecommendationTable",
    "Classification",
    "CriterionResult",
    "Explanation",
    "ScoringResult",
    "ScoringStatus",
    "WeightedScore",
    "ScoringEngine",
    "WeightingEngine",
]
