"\"\"\"Overall weighting and required-criteria gating.\"\"\""

from __future__ import annotations

from typing import Iterable, Mapping

from ..schemas import Category, Criterion
from .numeric import to_percent
from .results import CriterionResult, WeightedScore


class WeightingEngine:
    """Fold category scores into one overall score.

    A failed ``required`` criterion clears ``required_satisfied`` whatever the
    numeric result; the classifier must never report such a candidate as
    qualified.
    """

    def score(
        self,
        category_scores: Mapping[Category, int],
        category_weights: Mapping[str, float],
        criterion_results: Iterable[CriterionResult],
        criteria: Iterable[Criterion],
    ) -> WeightedScore:
        weighted = 0.0
        for category, category_score in category_scores.items():
            weight = float(category_weights.get(category.value, 0.0))
            if weight <= 0:
                continue
            weighted += category_score * weight
        overall = to_percent(weighted / 100.0)

        required_ids = {criterion.id for criterion in criteria if criterion.is_required}
        failed = tuple(
            result.criterion_id
            for result in criterion_results
            if result.criterion_id in required_ids and not result.met
        )
        return WeightedScore(
            overall_score=overall,
            required_satisfied=not failed,
            failed_required=failed,
        )
