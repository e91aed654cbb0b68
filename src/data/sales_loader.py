"""Sales dataset loading and preprocessing module.

This module turns a delimited sales file into the tabular shape the
evaluation harness works on: one row per observation, named numeric and
categorical columns, identifier columns removed.
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from loguru import logger

# Column names treated as identifiers when their values are unique per row
ID_PATTERN = re.compile(r"^(?:[Ii][Dd]|.+[_\s-][Ii][Dd]|.+[a-z]ID)$")


class SalesDataLoader:
    """Load and preprocess a tabular sales dataset.

    This class handles:
    - Loading data from delimited text files
    - Identifier column removal
    - Categorical column inference
    - Missing value removal

    Attributes:
        id_columns: Column names always dropped as identifiers.
        categorical_columns: Extra columns forced to categorical dtype.

    Example:
        >>> loader = SalesDataLoader(id_columns=["store"])
        >>> df = loader.load_from_csv("data/raw/sales.csv")
        >>> df_clean = loader.preprocess(df)
        >>> print(f"Loaded {len(df_clean)} rows")
    """

    def __init__(
        self,
        id_columns: Optional[List[str]] = None,
        categorical_columns: Optional[List[str]] = None,
    ) -> None:
        """Initialize sales loader.

        Args:
            id_columns: Identifier columns to drop.
            categorical_columns: Numeric-coded columns to treat as categorical.
        """
        self.id_columns = list(id_columns or [])
        self.categorical_columns = list(categorical_columns or [])

    def load_from_csv(self, path: str, sep: Optional[str] = None) -> pd.DataFrame:
        """Load raw data from a delimited file.

        Args:
            path: Path to the file.
            sep: Field separator; sniffed from the file when None.

        Returns:
            DataFrame with raw data and whitespace-stripped column names.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        if not Path(path).exists():
            raise FileNotFoundError(f"Data file not found: {path}")

        logger.info(f"Loading data from {path}")
        if sep is None:
            df = pd.read_csv(path, sep=None, engine="python")
        else:
            df = pd.read_csv(path, sep=sep)

        df.columns = df.columns.str.strip()

        logger.info(f"Loaded {len(df)} rows x {len(df.columns)} columns")
        return df

    def find_id_columns(self, df: pd.DataFrame) -> List[str]:
        """Identifier columns: configured names plus unique-valued id-like names."""
        found = [c for c in self.id_columns if c in df.columns]

        for column in df.columns:
            if column in found:
                continue
            if ID_PATTERN.match(str(column)) and df[column].is_unique:
                found.append(column)

        return found

    def preprocess(self, df: pd.DataFrame) -> pd.DataFrame:
        """Prepare raw data for modeling.

        Steps:
        1. Drop identifier columns
        2. Convert text and configured columns to categorical
        3. Drop rows with missing values

        Args:
            df: Raw DataFrame.

        Returns:
            Cleaned DataFrame with a fresh index.
        """
        logger.info(f"Preprocessing {len(df)} rows")
        df = df.copy()

        id_columns = self.find_id_columns(df)
        if id_columns:
            df = df.drop(columns=id_columns)
            logger.info(f"Dropped identifier columns: {id_columns}")

        for column in df.columns:
            series = df[column]
            is_text = pd.api.types.is_object_dtype(series) or pd.api.types.is_string_dtype(series)
            if column in self.categorical_columns or is_text:
                df[column] = df[column].astype("category")

        n_before = len(df)
        df = df.dropna().reset_index(drop=True)
        if len(df) < n_before:
            logger.info(f"Dropped {n_before - len(df)} rows with missing values")

        logger.info(f"Preprocessing complete: {len(df)} rows, {len(df.columns)} columns")
        return df

    def categorical_columns_of(self, df: pd.DataFrame) -> List[str]:
        return [
            c for c in df.columns if isinstance(df[c].dtype, pd.CategoricalDtype)
        ]

    def validate_target(self, df: pd.DataFrame, target_column: str) -> None:
        """Check that the target column exists and is numeric.

        Raises:
            ValueError: If the target is missing or not numeric.
        """
        if target_column not in df.columns:
            raise ValueError(
                f"Target column '{target_column}' not found. "
                f"Available columns: {list(df.columns)}"
            )
        series = df[target_column]
        if pd.api.types.is_bool_dtype(series) or not pd.api.types.is_numeric_dtype(series):
            raise ValueError(f"Target column '{target_column}' is not numeric ({series.dtype})")

    def get_statistics(self, df: pd.DataFrame, target_column: str) -> Dict[str, Any]:
        """Calculate dataset statistics.

        Args:
            df: DataFrame to analyze.
            target_column: Target column name.

        Returns:
            Dictionary with statistics.
        """
        target = df[target_column]
        return {
            "n_rows": len(df),
            "n_columns": len(df.columns),
            "categorical_columns": self.categorical_columns_of(df),
            "target_mean": float(target.mean()),
            "target_std": float(target.std()),
            "target_min": float(target.min()),
            "target_max": float(target.max()),
        }
