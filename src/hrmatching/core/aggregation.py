"\"\"\"Per-category aggregation of criterion results.\"\"\""

from __future__ import annotations

from typing import Iterable

from ..schemas import Category, Criterion
from .numeric import to_percent
from .results import CriterionResult

NEUTRAL_SCORE = 100


class CategoryAggregator:
    """Combine the criterion results of one category into a single score."""

    def aggregate(
        self,
        category_criteria: Iterable[Criterion],
        results: Iterable[CriterionResult],
    ) -> int:
        by_id = {result.criterion_id: result for result in results}
        pairs = [
            (criterion, by_id[criterion.id])
            for criterion in category_criteria
            if criterion.id in by_id
        ]
        if not pairs:
            return NEUTRAL_SCORE

        total_weight = sum(criterion.weight for criterion, _ in pairs)
        if total_weight <= 0:
            return to_percent(sum(result.score for _, result in pairs) / len(pairs))

        weighted = sum(criterion.weight * result.score for criterion, result in pairs)
        return to_percent(weighted / total_weight)

    def aggregate_all(
        self,
        criteria: Iterable[Criterion],
        results: Iterable[CriterionResult],
    ) -> dict[Category, int]:
        criteria = list(criteria)
        results = list(results)
        return {
            category: self.aggregate(
                [criterion for criterion in criteria if criterion.category is category],
                results,
            )
            for category in Category
        }
