"\"\"\"Pydantic configuration schema for CLI YAML input.\"\"\""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError


class EngineConfig(BaseModel):
    qualified_threshold: int | None = None
    partially_qualified_threshold: int | None = None
    review_confidence_spread: int | None = None


class EvaluatorSettings(BaseModel):
    direct_confidence: int | None = None
    inferred_confidence: int | None = None
    missing_confidence: int | None = None
    min_similarity: float | None = None
    min_fuzzy_term_length: int | None = Field(default=None, ge=1)


class ExplanationSettings(BaseModel):
    strengths_top_n: int | None = None
    risk_tags: list[str] | None = None
    recommendations_path: str | None = None


class BatchSettings(BaseModel):
    max_workers: int | None = Field(default=None, ge=1)


class AppConfig(BaseModel):
    engine: EngineConfig = Field(default_factory=EngineConfig)
    evaluator: EvaluatorSettings = Field(default_factory=EvaluatorSettings)
    explanation: ExplanationSettings = Field(default_factory=ExplanationSettings)
    batch: BatchSettings = Field(default_factory=BatchSettings)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        for section in ("engine", "evaluator", "explanation", "batch"):
            values = getattr(self, section).model_dump(exclude_none=True)
            if values:
                settings[section] = values
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
