"\"\"\"Dependency injection container for the scoring engine.\"\"\""

from __future__ import annotations

from typing import Any

from dependency_injector import containers, providers

from .cache import ResultCache
from .core import (
    CategoryAggregator,
    Classifier,
    ClassifierConfig,
    ExplanationBuilder,
    ExplanationConfig,
    RuleEvaluator,
    RuleEvaluatorConfig,
    ScoringEngine,
    WeightingEngine,
)
from .pipeline import CriteriaLoader, ScoringPipeline
from .registry import CriteriaSetStore, CriterionRegistry
from .service import InMemoryCandidateRepository, MatchingService


class ScoringContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    rule_evaluator = providers.Singleton(RuleEvaluator)
    aggregator = providers.Singleton(CategoryAggregator)
    weighting = providers.Singleton(WeightingEngine)
    classifier = providers.Singleton(Classifier)
    explainer = providers.Singleton(ExplanationBuilder)

    engine = providers.Singleton(
        ScoringEngine,
        evaluator=rule_evaluator,
        aggregator=aggregator,
        weighting=weighting,
        classifier=classifier,
        explainer=explainer,
    )

    result_cache = providers.Singleton(ResultCache)
    registry = providers.Singleton(CriterionRegistry.builtin)
    criteria_store = providers.Singleton(CriteriaSetStore)
    candidate_repository = providers.Singleton(InMemoryCandidateRepository)

    matching_service = providers.Singleton(
        MatchingService,
        engine=engine,
        cache=result_cache,
        candidates=candidate_repository,
        criteria=criteria_store,
        max_workers=config.batch.max_workers,
    )

    pipeline = providers.Factory(
        ScoringPipeline,
        engine=engine,
        cache=result_cache,
        criteria_loader=providers.Factory(CriteriaLoader, registry=registry),
        max_workers=config.batch.max_workers,
    )


def create_container(*, settings: dict[str, Any] | None = None) -> ScoringContainer:
    """Instantiate container with optional overrides."""

    container = ScoringContainer()

    if not settings or not isinstance(settings, dict):
        return container

    batch_settings = settings.get("batch", {})
    if batch_settings:
        container.config.from_dict({"batch": batch_settings})

    evaluator_settings = settings.get("evaluator", {})
    if evaluator_settings:
        container.rule_evaluator.override(
            providers.Singleton(RuleEvaluator, config=RuleEvaluatorConfig(**evaluator_settings))
        )

    engine_settings = settings.get("engine", {})
    if engine_settings:
        container.classifier.override(
            providers.Singleton(Classifier, config=ClassifierConfig(**engine_settings))
        )

    explanation_settings = dict(settings.get("explanation", {}))
    if explanation_settings:
        if "risk_tags" in explanation_settings:
            explanation_settings["risk_tags"] = tuple(explanation_settings["risk_tags"])
        container.explainer.override(
            providers.Singleton(ExplanationBuilder, config=ExplanationConfig(**explanation_settings))
        )

    return container
