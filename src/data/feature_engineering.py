"""Feature transforms and exploratory correlation analysis.

Supports the report's feature-engineering iterations: appending quadratic
and logarithmic versions of selected predictors and ranking numeric
predictors by their correlation with the target.
"""

from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd
from loguru import logger
from scipy.stats import pearsonr, spearmanr


class FeatureEngineer:
    """Build transformed copies of a dataset.

    All methods return new frames; inputs are never modified.

    Example:
        >>> fe = FeatureEngineer()
        >>> df_sq = fe.add_quadratic(df, ["price"])
        >>> variants = fe.build_variants(df, "sales", quadratic=["price"], log=["advertising"])
    """

    CORRELATION_METHODS = ("pearson", "spearman")

    @staticmethod
    def quadratic_name(column: str) -> str:
        return f"{column}_sq"

    @staticmethod
    def log_name(column: str) -> str:
        return f"log_{column}"

    def _check_numeric(self, df: pd.DataFrame, columns: Sequence[str]) -> None:
        for column in columns:
            if column not in df.columns:
                raise ValueError(f"Column '{column}' not found")
            if not pd.api.types.is_numeric_dtype(df[column]) or pd.api.types.is_bool_dtype(df[column]):
                raise ValueError(f"Column '{column}' is not numeric")

    def add_quadratic(self, df: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
        """Append ``<col>_sq`` for each column."""
        self._check_numeric(df, columns)
        df = df.copy()
        for column in columns:
            df[self.quadratic_name(column)] = df[column].astype(float) ** 2
        logger.debug(f"Added quadratic terms for {list(columns)}")
        return df

    def add_log(self, df: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
        """Append ``log_<col>`` (natural log) for each column.

        Raises:
            ValueError: If a column holds zero or negative values.
        """
        self._check_numeric(df, columns)
        df = df.copy()
        for column in columns:
            values = df[column].astype(float)
            if (values <= 0).any():
                raise ValueError(
                    f"Column '{column}' has non-positive values; log transform undefined"
                )
            df[self.log_name(column)] = np.log(values)
        logger.debug(f"Added log terms for {list(columns)}")
        return df

    def drop(self, df: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise ValueError(f"Columns not found: {missing}")
        return df.drop(columns=list(columns))

    def build_variants(
        self,
        df: pd.DataFrame,
        target_column: str,
        quadratic: Optional[Sequence[str]] = None,
        log: Optional[Sequence[str]] = None,
    ) -> Dict[str, pd.DataFrame]:
        """Create the datasets compared in the feature-engineering iterations.

        Args:
            df: Baseline dataset.
            target_column: Target column; never transformed.
            quadratic: Predictors to square.
            log: Predictors to log-transform.

        Returns:
            Ordered mapping: ``baseline`` always, then ``quadratic``,
            ``log`` and ``quadratic_log`` where the column lists allow.
        """
        quadratic = list(quadratic or [])
        log = list(log or [])

        for column in quadratic + log:
            if column == target_column:
                raise ValueError(f"Target column '{target_column}' cannot be transformed")

        variants: Dict[str, pd.DataFrame] = {"baseline": df.copy()}
        if quadratic:
            variants["quadratic"] = self.add_quadratic(df, quadratic)
        if log:
            variants["log"] = self.add_log(df, log)
        if quadratic and log:
            variants["quadratic_log"] = self.add_log(self.add_quadratic(df, quadratic), log)

        logger.info(f"Built dataset variants: {list(variants)}")
        return variants

    def correlation_with_target(
        self,
        df: pd.DataFrame,
        target_column: str,
        method: str = "pearson",
    ) -> pd.Series:
        """Correlation of each numeric predictor with the target.

        Args:
            df: Dataset.
            target_column: Numeric target column.
            method: 'pearson' or 'spearman'.

        Returns:
            Series indexed by column, sorted by absolute correlation (descending).
        """
        if method not in self.CORRELATION_METHODS:
            raise ValueError(f"Unknown method: {method}. Use one of {self.CORRELATION_METHODS}.")
        self._check_numeric(df, [target_column])

        correlate = pearsonr if method == "pearson" else spearmanr
        y = df[target_column].to_numpy(dtype=float)

        correlations = {}
        for column in df.columns:
            if column == target_column:
                continue
            series = df[column]
            if not pd.api.types.is_numeric_dtype(series) or pd.api.types.is_bool_dtype(series):
                continue
            x = series.to_numpy(dtype=float)
            if np.ptp(x) == 0:
                correlations[column] = float("nan")
                continue
            correlations[column] = float(correlate(x, y)[0])

        result = pd.Series(correlations, name=f"{method}_r", dtype=float)
        return result.reindex(result.abs().sort_values(ascending=False).index)
