"""Single train/test split evaluation.

Complements k-fold cross-validation with the quick holdout estimate the
report starts from: fit once on a random training share, then score both
the training rows and the held-out rows.
"""

from typing import Any, Dict, Optional, Sequence

import pandas as pd
from loguru import logger
from sklearn.model_selection import train_test_split

from .cross_validation import validate_inputs, validate_seed
from .exceptions import ConfigurationError, FoldTrainingError
from .metrics import MetricEngine, RegressionMetricEngine, resolve_metric_names


def evaluate_holdout(
    dataset: pd.DataFrame,
    target_column: str,
    trainer: Any,
    metric_names: Sequence[str],
    test_size: float = 0.2,
    seed: int = 500,
    metric_engine: Optional[MetricEngine] = None,
) -> Dict[str, Dict[str, float]]:
    """Fit on a random training split and score train and test rows.

    Args:
        dataset: Rows with feature columns and the target column.
        target_column: Name of the continuous target.
        trainer: Model family to fit.
        metric_names: Metrics to compute.
        test_size: Fraction of rows held out.
        seed: Seed for the split.
        metric_engine: Optional metric engine.

    Returns:
        ``{"train": metrics, "test": metrics}``.
    """
    if metric_engine is None:
        metric_engine = RegressionMetricEngine()

    # Two rows minimum so both sides of the split are non-empty
    validate_inputs(dataset, target_column, 2)
    if not 0 < test_size < 1:
        raise ConfigurationError(f"test_size must be in (0, 1), got {test_size}")
    validate_seed(seed)
    names = resolve_metric_names(metric_engine, metric_names)

    train_rows, test_rows = train_test_split(
        dataset, test_size=test_size, random_state=seed
    )
    logger.info(f"Holdout split: train={len(train_rows)}, test={len(test_rows)}")

    try:
        predictor = trainer.fit(train_rows, target_column)
    except Exception as exc:
        raise FoldTrainingError(1, exc) from exc

    results = {}
    for split, rows in (("train", train_rows), ("test", test_rows)):
        results[split] = metric_engine.compute(
            rows[target_column].to_numpy(dtype=float),
            predictor.predict(rows),
            names,
        )

    logger.info(f"Holdout metrics: {results}")
    return results
