"""Regression error metrics for cross-validated model evaluation.

This module provides the metric engine used by the cross-validation
harness. Percentage-based metrics (MAPE, RMSPE, RAE, RRSE) are expressed
in percent. Degenerate inputs (zero actual values, constant targets)
produce NaN or infinity, which is returned unchanged so that unstable
folds remain visible in the report.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import numpy as np
from loguru import logger
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from .exceptions import ConfigurationError, UnknownMetricError


def _mae(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    return float(mean_absolute_error(y_true, y_pred))


def _rmse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    return float(np.sqrt(mean_squared_error(y_true, y_pred)))


def _mape(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.mean(np.abs((y_true - y_pred) / y_true)) * 100)


def _rmspe(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.sqrt(np.mean(((y_true - y_pred) / y_true) ** 2)) * 100)


def _rae(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    numerator = np.sum(np.abs(y_true - y_pred))
    denominator = np.sum(np.abs(y_true - np.mean(y_true)))
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(numerator) / denominator * 100)


def _rrse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    numerator = np.sum((y_true - y_pred) ** 2)
    denominator = np.sum((y_true - np.mean(y_true)) ** 2)
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.sqrt(np.float64(numerator) / denominator) * 100)


def _r2(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    if len(y_true) < 2:
        return float("nan")
    return float(r2_score(y_true, y_pred, force_finite=False))


# Canonical metric name -> implementation
METRICS: Dict[str, Callable[[np.ndarray, np.ndarray], float]] = {
    "MAE": _mae,
    "RMSE": _rmse,
    "MAPE": _mape,
    "RMSPE": _rmspe,
    "RAE": _rae,
    "RRSE": _rrse,
    "R2": _r2,
}

DEFAULT_METRICS: List[str] = list(METRICS)


class MetricEngine(ABC):
    """Base class for metric engines used by the harness.

    Subclasses implement ``compute``. ``validate`` is called once before
    any fold is trained; the default accepts every name unchanged.
    """

    @abstractmethod
    def compute(
        self,
        actual: Sequence[float],
        predicted: Sequence[float],
        metric_names: Iterable[str],
    ) -> Dict[str, float]:
        """Return one value per requested metric name."""

    def validate(self, metric_names: Iterable[str]) -> List[str]:
        return [str(name) for name in metric_names]


class RegressionMetricEngine(MetricEngine):
    """Compute named regression metrics for actual vs. predicted values.

    Metric names are matched case-insensitively and reported in their
    canonical upper-case form.

    Example:
        >>> engine = RegressionMetricEngine()
        >>> values = engine.compute([1.0, 2.0, 3.0], [1.1, 2.1, 2.9], ["rmse", "R2"])
        >>> list(values)
        ['RMSE', 'R2']
    """

    def __init__(self, metrics: Optional[Dict[str, Callable]] = None) -> None:
        self._metrics = dict(METRICS if metrics is None else metrics)

    @property
    def names(self) -> List[str]:
        """Supported canonical metric names."""
        return list(self._metrics)

    def supports(self, name: str) -> bool:
        return str(name).upper() in self._metrics

    def validate(self, metric_names: Iterable[str]) -> List[str]:
        """Return canonical names in request order.

        Args:
            metric_names: Requested metric names.

        Returns:
            Canonical metric names.

        Raises:
            UnknownMetricError: If any name is not supported.
        """
        canonical: List[str] = []
        unknown: List[str] = []

        for name in metric_names:
            key = str(name).upper()
            if key not in self._metrics:
                unknown.append(str(name))
            else:
                canonical.append(key)

        if unknown:
            raise UnknownMetricError(unknown)

        return canonical

    def compute(
        self,
        actual: Sequence[float],
        predicted: Sequence[float],
        metric_names: Iterable[str],
    ) -> Dict[str, float]:
        """Compute the requested metrics.

        Args:
            actual: True target values.
            predicted: Predicted values aligned with ``actual``.
            metric_names: Names of metrics to compute.

        Returns:
            Mapping from canonical metric name to value. Values may be
            NaN or infinite for degenerate inputs.
        """
        names = self.validate(metric_names)

        y_true = np.asarray(actual, dtype=float)
        y_pred = np.asarray(predicted, dtype=float)

        if y_true.shape != y_pred.shape:
            raise ValueError(
                f"Length mismatch: {len(y_true)} actual vs {len(y_pred)} predicted values"
            )
        if y_true.size == 0:
            raise ValueError("Cannot compute metrics on empty vectors")

        results = {name: self._metrics[name](y_true, y_pred) for name in names}

        non_finite = [name for name, value in results.items() if not np.isfinite(value)]
        if non_finite:
            logger.warning(f"Non-finite metric values for {non_finite}")

        return results


def calculate_metrics(
    y_true: Sequence[float],
    y_pred: Sequence[float],
    metric_names: Optional[Iterable[str]] = None,
) -> Dict[str, float]:
    """Calculate regression metrics with the default engine.

    Args:
        y_true: True target values.
        y_pred: Predicted values.
        metric_names: Metrics to compute (default: all supported).

    Returns:
        Dictionary with regression metrics.

    Example:
        >>> metrics = calculate_metrics(np.array([1.0, 2.0, 3.0]), np.array([1.1, 2.1, 2.9]))
        >>> print(f"R² = {metrics['R2']:.3f}")
    """
    if metric_names is None:
        metric_names = DEFAULT_METRICS
    return RegressionMetricEngine().compute(y_true, y_pred, metric_names)


def resolve_metric_names(metric_engine: Any, metric_names: Sequence[str]) -> List[str]:
    """Check a metric request against an engine before any training.

    Engines without a ``validate`` method get the names as given.

    Raises:
        ConfigurationError: If the list is empty or names a metric twice.
        UnknownMetricError: If the engine rejects a name.
    """
    if isinstance(metric_names, str):
        metric_names = [metric_names]
    if not metric_names:
        raise ConfigurationError("At least one metric name is required")

    validate = getattr(metric_engine, "validate", None)
    if validate is None:
        names = [str(name) for name in metric_names]
    else:
        names = list(validate(metric_names))

    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigurationError(f"Metric names requested more than once: {duplicates}")
    return names
