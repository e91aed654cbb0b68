"""Per-fold metric report for cross-validation results."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

import numpy as np
import pandas as pd

MEAN_COLUMN = "Mean"
STD_COLUMN = "StandardDeviation"


def fold_column(fold: int) -> str:
    """Column label for a 1-based fold index."""
    return f"Fold{fold}"


@dataclass(frozen=True, eq=False)
class MetricReport:
    """Table of metric values, one row per metric, one column per fold.

    The last two columns hold the arithmetic mean and the sample standard
    deviation (ddof=1) of each row. Values are stored unrounded; use
    ``format`` for display.

    Attributes:
        table: Metrics x (folds + Mean + StandardDeviation) frame.

    Example:
        >>> report = MetricReport.from_fold_values(
        ...     ["RMSE"], [{"RMSE": 1.0}, {"RMSE": 3.0}]
        ... )
        >>> report.mean("RMSE")
        2.0
    """

    table: pd.DataFrame = field(repr=False)

    @classmethod
    def from_fold_values(
        cls,
        metric_names: Sequence[str],
        fold_values: Sequence[Mapping[str, float]],
    ) -> "MetricReport":
        """Assemble a report from per-fold metric dictionaries.

        Args:
            metric_names: Row order of the report.
            fold_values: One metric dictionary per fold, in fold order.

        Returns:
            New MetricReport.
        """
        columns = {
            fold_column(i + 1): [float(values[name]) for name in metric_names]
            for i, values in enumerate(fold_values)
        }
        table = pd.DataFrame(columns, index=pd.Index(list(metric_names), name="metric"))

        folds = table.copy()
        # NaN in any fold must surface in the summary columns
        table[MEAN_COLUMN] = folds.mean(axis=1, skipna=False)
        table[STD_COLUMN] = folds.std(axis=1, ddof=1, skipna=False)

        return cls(table=table)

    @property
    def metric_names(self) -> List[str]:
        return list(self.table.index)

    @property
    def fold_columns(self) -> List[str]:
        return [c for c in self.table.columns if c not in (MEAN_COLUMN, STD_COLUMN)]

    @property
    def n_folds(self) -> int:
        return len(self.fold_columns)

    def fold_values(self, metric: str) -> np.ndarray:
        """Per-fold values of one metric, in fold order."""
        return self.table.loc[metric, self.fold_columns].to_numpy(dtype=float)

    def mean(self, metric: str) -> float:
        return float(self.table.loc[metric, MEAN_COLUMN])

    def std(self, metric: str) -> float:
        return float(self.table.loc[metric, STD_COLUMN])

    def to_frame(self) -> pd.DataFrame:
        """Return a copy of the underlying table."""
        return self.table.copy()

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Nested ``{metric: {column: value}}`` mapping for JSON export."""
        return {
            metric: {column: float(value) for column, value in row.items()}
            for metric, row in self.table.iterrows()
        }

    def format(self, precision: int = 3) -> str:
        """Render the table rounded to ``precision`` decimals."""
        return self.table.round(precision).to_string()

    def __repr__(self) -> str:
        return f"MetricReport(metrics={self.metric_names}, n_folds={self.n_folds})"
