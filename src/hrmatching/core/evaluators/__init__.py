"\"\"\"Evaluator implementations for the scoring core.\"\"\""

from .rules import KNOWN_FIELDS, RuleEvaluator, RuleEvaluatorConfig

__all__ = [
    "KNOWN_FIELDS",
    "RuleEvaluator",
    "RuleEvaluatorConfig",
]
