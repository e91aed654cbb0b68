"""Cross-validation harness for regression model families.

This module partitions a dataset into stratified folds, trains a
caller-supplied model family on each fold's complement, scores the
held-out rows, and aggregates the per-fold metrics into a
``MetricReport``.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from loguru import logger
from sklearn.model_selection import StratifiedKFold

from .exceptions import ConfigurationError, FoldTrainingError
from .metrics import MetricEngine, RegressionMetricEngine, resolve_metric_names
from .report import MEAN_COLUMN, MetricReport

# Bounds on the number of quantile groups used to stratify a continuous target
MIN_STRATA = 2
MAX_STRATA = 5


def validate_inputs(
    dataset: pd.DataFrame,
    target_column: str,
    n_folds: int,
) -> None:
    """Fail fast on an unusable dataset, target, or fold count.

    Raises:
        ConfigurationError: On any invalid argument.
    """
    if not isinstance(dataset, pd.DataFrame):
        raise ConfigurationError(
            f"Dataset must be a pandas DataFrame, got {type(dataset).__name__}"
        )
    if dataset.empty:
        raise ConfigurationError("Dataset is empty")
    if target_column not in dataset.columns:
        raise ConfigurationError(f"Unknown target column: '{target_column}'")

    target = dataset[target_column]
    if pd.api.types.is_bool_dtype(target) or not pd.api.types.is_numeric_dtype(target):
        raise ConfigurationError(
            f"Target column '{target_column}' must be numeric, got {target.dtype}"
        )
    if target.isna().any():
        raise ConfigurationError(f"Target column '{target_column}' contains missing values")

    if isinstance(n_folds, bool) or not isinstance(n_folds, (int, np.integer)):
        raise ConfigurationError(f"n_folds must be an integer, got {n_folds!r}")
    if n_folds < 2:
        raise ConfigurationError(f"n_folds must be at least 2, got {n_folds}")
    if n_folds > len(dataset):
        raise ConfigurationError(
            f"n_folds={n_folds} exceeds the number of rows ({len(dataset)})"
        )


def validate_seed(seed: int) -> None:
    """Require an integer seed so fold assignment is reproducible.

    Raises:
        ConfigurationError: If ``seed`` is not an integer.
    """
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
        raise ConfigurationError(f"seed must be an integer, got {seed!r}")


def stratify_labels(y: np.ndarray, n_folds: int) -> np.ndarray:
    """Bin a continuous target into quantile groups for stratification.

    The number of groups is ``n_rows // n_folds`` clamped to
    [MIN_STRATA, MAX_STRATA]; duplicate quantile edges collapse groups.

    Args:
        y: Target values.
        n_folds: Number of folds the labels will be split into.

    Returns:
        Integer group label per row.
    """
    n_groups = int(np.clip(len(y) // n_folds, MIN_STRATA, MAX_STRATA))
    edges = np.unique(np.quantile(y, np.linspace(0, 1, n_groups + 1)))

    if len(edges) < 2:
        return np.zeros(len(y), dtype=int)

    # Interior edges only; a value equal to an edge joins the lower group
    labels = np.digitize(y, edges[1:-1], right=True)

    counts = np.bincount(labels)
    if counts[counts > 0].max() < n_folds:
        return np.zeros(len(y), dtype=int)

    return labels


def assign_folds(
    dataset: pd.DataFrame,
    target_column: str,
    n_folds: int,
    seed: int,
) -> List[np.ndarray]:
    """Assign every row position to exactly one of ``n_folds`` folds.

    Folds are stratified on quantile groups of the target so each fold's
    target distribution resembles the whole dataset's. The assignment is
    fully determined by the data, ``n_folds`` and ``seed``.

    Args:
        dataset: Rows to partition.
        target_column: Continuous target used for stratification.
        n_folds: Number of folds.
        seed: Seed for the shuffling random generator.

    Returns:
        List of sorted row-position arrays, one per fold, in fold order.
    """
    validate_inputs(dataset, target_column, n_folds)
    validate_seed(seed)

    y = dataset[target_column].to_numpy(dtype=float)
    labels = stratify_labels(y, n_folds)

    kfold = StratifiedKFold(n_splits=n_folds, shuffle=True, random_state=seed)
    return [
        np.sort(test_idx)
        for _, test_idx in kfold.split(np.zeros((len(y), 1)), labels)
    ]


def _run_fold(
    fold: int,
    dataset: pd.DataFrame,
    target_column: str,
    held_out_idx: np.ndarray,
    trainer: Any,
    metric_engine: Any,
    metric_names: Sequence[str],
) -> Dict[str, float]:
    """Train on the complement of one fold and score its held-out rows."""
    mask = np.zeros(len(dataset), dtype=bool)
    mask[held_out_idx] = True
    training_rows = dataset.iloc[~mask]
    held_out_rows = dataset.iloc[mask]

    try:
        predictor = trainer.fit(training_rows, target_column)
    except Exception as exc:
        logger.error(f"Fold {fold}: training failed ({type(exc).__name__}: {exc})")
        raise FoldTrainingError(fold, exc) from exc

    predicted = np.asarray(predictor.predict(held_out_rows), dtype=float)
    actual = held_out_rows[target_column].to_numpy(dtype=float)

    if predicted.shape != actual.shape:
        raise FoldTrainingError(
            fold,
            ValueError(
                f"predictor returned {predicted.size} values for {actual.size} rows"
            ),
        )

    metrics = metric_engine.compute(actual, predicted, metric_names)
    logger.debug(f"Fold {fold}: {metrics}")
    return metrics


def cross_validate(
    dataset: pd.DataFrame,
    target_column: str,
    n_folds: int,
    seed: int,
    trainer: Any,
    metric_names: Sequence[str],
    metric_engine: Optional[MetricEngine] = None,
    n_jobs: int = 1,
) -> MetricReport:
    """Perform stratified k-fold cross-validation of one model family.

    Args:
        dataset: Rows with feature columns and the target column.
        target_column: Name of the continuous target.
        n_folds: Number of folds (2 <= n_folds <= number of rows).
        seed: Seed for reproducible fold assignment.
        trainer: Object with ``fit(rows, target_column)`` returning a
            predictor with ``predict(rows)``.
        metric_names: Metrics to report, in row order. Each name may
            appear only once.
        metric_engine: ``MetricEngine``, or any object with
            ``compute(actual, predicted, names)`` (default:
            ``RegressionMetricEngine``).
        n_jobs: Folds evaluated concurrently (1 = sequential, -1 = all CPUs).

    Returns:
        MetricReport with one row per metric and columns
        ``Fold1..FoldK``, ``Mean``, ``StandardDeviation``.

    Raises:
        ConfigurationError: Invalid dataset, target, fold count, seed or
            metric list.
        UnknownMetricError: A metric name is not supported.
        FoldTrainingError: The trainer failed on a fold; no report is returned.

    Example:
        >>> from models.trainers import LinearRegressionTrainer
        >>> report = cross_validate(df, "sales", 5, 500, LinearRegressionTrainer(), ["RMSE", "R2"])
        >>> print(f"R² = {report.mean('R2'):.3f} ± {report.std('R2'):.3f}")
    """
    if metric_engine is None:
        metric_engine = RegressionMetricEngine()

    validate_inputs(dataset, target_column, n_folds)
    validate_seed(seed)
    names = resolve_metric_names(metric_engine, metric_names)

    family = getattr(trainer, "name", type(trainer).__name__)
    logger.info(
        f"Running {n_folds}-fold cross-validation for {family} "
        f"on {len(dataset)} rows (seed={seed})..."
    )

    folds = assign_folds(dataset, target_column, n_folds, seed)

    tasks = [
        delayed(_run_fold)(
            fold_idx + 1, dataset, target_column, held_out_idx,
            trainer, metric_engine, names,
        )
        for fold_idx, held_out_idx in enumerate(folds)
    ]

    if n_jobs == 1:
        fold_metrics = [func(*args, **kwargs) for func, args, kwargs in tasks]
    else:
        # Parallel returns results in submission order
        fold_metrics = Parallel(n_jobs=n_jobs, prefer="threads")(tasks)

    report = MetricReport.from_fold_values(names, fold_metrics)

    summary = ", ".join(
        f"{name} = {report.mean(name):.3f} ± {report.std(name):.3f}" for name in names
    )
    logger.info(f"CV Results ({family}): {summary}")

    return report


def compare_models(
    dataset: pd.DataFrame,
    target_column: str,
    trainers: Mapping[str, Any],
    n_folds: int,
    seed: int,
    metric_names: Sequence[str],
    metric_engine: Optional[MetricEngine] = None,
    n_jobs: int = 1,
) -> Dict[str, MetricReport]:
    """Cross-validate several model families on the same partition.

    Every family is evaluated with the same ``seed``, so all of them see
    identical folds.

    Args:
        dataset: Rows with feature columns and the target column.
        target_column: Name of the continuous target.
        trainers: Mapping of label -> trainer.
        n_folds: Number of folds.
        seed: Seed shared by all families.
        metric_names: Metrics to report.
        metric_engine: Optional metric engine.
        n_jobs: Folds evaluated concurrently per family.

    Returns:
        Mapping of label -> MetricReport, in the order of ``trainers``.
    """
    if not trainers:
        raise ConfigurationError("At least one trainer is required")

    reports: Dict[str, MetricReport] = {}
    for label, trainer in trainers.items():
        reports[label] = cross_validate(
            dataset,
            target_column,
            n_folds,
            seed,
            trainer,
            metric_names,
            metric_engine=metric_engine,
            n_jobs=n_jobs,
        )

    return reports


def summarize_reports(
    reports: Mapping[str, MetricReport],
    statistic: str = MEAN_COLUMN,
) -> pd.DataFrame:
    """Collect one summary column from several reports.

    Args:
        reports: Mapping of label -> MetricReport.
        statistic: Report column to extract (``Mean`` or ``StandardDeviation``).

    Returns:
        DataFrame with one row per label and one column per metric.
    """
    rows: List[Tuple[str, pd.Series]] = []
    for label, report in reports.items():
        table = report.to_frame()
        if statistic not in table.columns:
            raise KeyError(f"Report has no column '{statistic}'")
        rows.append((label, table[statistic]))

    summary = pd.DataFrame({label: series for label, series in rows}).T
    summary.index.name = "model"
    summary.columns.name = None
    return summary
