"""Evaluation metrics and cross-validation utilities."""

from .cross_validation import assign_folds, compare_models, cross_validate, summarize_reports
from .exceptions import (
    ConfigurationError,
    EvaluationError,
    FoldTrainingError,
    UnknownMetricError,
)
from .holdout import evaluate_holdout
from .metrics import (
    DEFAULT_METRICS,
    MetricEngine,
    RegressionMetricEngine,
    calculate_metrics,
    resolve_metric_names,
)
from .report import MetricReport

__all__ = [
    "assign_folds",
    "compare_models",
    "cross_validate",
    "summarize_reports",
    "evaluate_holdout",
    "calculate_metrics",
    "MetricEngine",
    "RegressionMetricEngine",
    "resolve_metric_names",
    "DEFAULT_METRICS",
    "MetricReport",
    "ConfigurationError",
    "EvaluationError",
    "FoldTrainingError",
    "UnknownMetricError",
]
