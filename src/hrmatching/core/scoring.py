"\"\"\"Scoring orchestration.\"\"\""

from __future__ import annotations

from typing import Any, Callable

import pendulum
import structlog

from ..schemas import CandidateProfile, JobCriteriaSet
from .aggregation import CategoryAggregator
from .classifier import Classifier
from .evaluators import RuleEvaluator
from .explanation import ExplanationBuilder
from .numeric import round_half_up
from .results import CriterionResult, ScoringResult
from .weighting import WeightingEngine


class ScoringEngine:
    """Runs evaluator, aggregator, weighting, classifier and explainer for one pair.

    The engine holds no mutable state; the same inputs and clock give the
    same ``ScoringResult``.
    """

    def __init__(
        self,
        *,
        evaluator: Any | None = None,
        aggregator: CategoryAggregator | None = None,
        weighting: WeightingEngine | None = None,
        classifier: Classifier | None = None,
        explainer: ExplanationBuilder | None = None,
        now_provider: Callable[[], pendulum.DateTime] | None = None,
    ) -> None:
        self._evaluator = evaluator or RuleEvaluator()
        self._aggregator = aggregator or CategoryAggregator()
        self._weighting = weighting or WeightingEngine()
        self._classifier = classifier or Classifier()
        self._explainer = explainer or ExplanationBuilder()
        self._now_provider = now_provider or (lambda: pendulum.now("UTC"))
        self._logger = structlog.get_logger(__name__)

    def evaluate(self, *, candidate: CandidateProfile, job: JobCriteriaSet) -> ScoringResult:
        criteria = list(job.criteria)
        results: list[CriterionResult] = [
            self._evaluator.evaluate(criterion, candidate, job) for criterion in criteria
        ]

        category_scores = self._aggregator.aggregate_all(criteria, results)
        weighted = self._weighting.score(category_scores, job.category_weights, results, criteria)
        classification = self._classifier.classify(
            weighted.overall_score,
            weighted.required_satisfied,
            [result.confidence for result in results],
        )
        explanation = self._explainer.explain(
            criteria,
            results,
            classification,
            category_scores,
            job.category_weights,
        )

        confidence = (
            round_half_up(sum(result.confidence for result in results) / len(results))
            if results
            else 0
        )

        self._logger.debug(
            "scoring.computed",
            candidate_id=candidate.candidate_id,
            job_id=job.job_id,
            overall_score=weighted.overall_score,
            status=classification.status.value,
        )

        return ScoringResult(
            candidate_id=candidate.candidate_id,
            job_id=job.job_id,
            overall_score=weighted.overall_score,
            confidence=confidence,
            category_scores={category.value: score for category, score in category_scores.items()},
            criterion_results=tuple(results),
            status=classification.status,
            review_required=classification.review_required,
            required_satisfied=weighted.required_satisfied,
            strengths=explanation.strengths,
            concerns=explanation.concerns,
            red_flags=explanation.red_flags,
            recommendations=explanation.recommendations,
            computed_at=self._now_provider().to_iso8601_string(),
            criteria_set_version=job.version,
            metadata={
                "confidence_spread": classification.confidence_spread,
                "failed_required": list(weighted.failed_required),
                "evaluator": getattr(self._evaluator, "method", type(self._evaluator).__name__),
            },
        )
