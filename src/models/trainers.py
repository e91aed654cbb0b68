"""Model trainers for the regression model families compared in the report.

A trainer knows how to turn a training subset (a DataFrame holding the
feature columns and the target column) into a ``FittedModel``. Trainers
are passed explicitly to the cross-validation harness, so any family that
can fit on rows and predict on rows can be evaluated.

Example:
    >>> trainer = get_trainer("linear")
    >>> fitted = trainer.fit(train_df, "sales")
    >>> predictions = fitted.predict(test_df)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type

import numpy as np
import pandas as pd
from loguru import logger
from sklearn.base import BaseEstimator
from sklearn.compose import ColumnTransformer
from sklearn.linear_model import LinearRegression
from sklearn.metrics import mean_squared_error, r2_score
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder
from sklearn.tree import DecisionTreeRegressor

from .model_tree import ModelTreeRegressor


def _is_categorical(series: pd.Series) -> bool:
    return (
        isinstance(series.dtype, pd.CategoricalDtype)
        or pd.api.types.is_object_dtype(series)
        or pd.api.types.is_bool_dtype(series)
        or pd.api.types.is_string_dtype(series)
    )


def build_preprocessor(X: pd.DataFrame) -> ColumnTransformer:
    """One-hot encode categorical columns, pass numeric columns through.

    Args:
        X: Feature frame the preprocessor will be fitted on.

    Returns:
        Unfitted ColumnTransformer producing a dense matrix.
    """
    categorical = [c for c in X.columns if _is_categorical(X[c])]
    numeric = [c for c in X.columns if c not in categorical]

    transformers = []
    if categorical:
        transformers.append(
            ("categorical", OneHotEncoder(handle_unknown="ignore"), categorical)
        )
    if numeric:
        transformers.append(("numeric", "passthrough", numeric))

    return ColumnTransformer(
        transformers,
        remainder="drop",
        sparse_threshold=0.0,
        verbose_feature_names_out=False,
    )


class FittedModel:
    """A trained predictor produced by a ``ModelTrainer``.

    Attributes:
        pipeline: Fitted scikit-learn pipeline (encoding + estimator).
        feature_names: Input columns the model was trained on.
        target_column: Name of the predicted column.
        family: Name of the model family that produced it.
        training_metrics: R2 and RMSE on the training rows.
    """

    def __init__(
        self,
        pipeline: Pipeline,
        feature_names: List[str],
        target_column: str,
        family: str,
        training_metrics: Optional[Dict[str, float]] = None,
    ) -> None:
        self.pipeline = pipeline
        self.feature_names = list(feature_names)
        self.target_column = target_column
        self.family = family
        self.training_metrics = training_metrics or {}

    @property
    def estimator(self) -> BaseEstimator:
        return self.pipeline.named_steps["model"]

    def predict(self, rows: pd.DataFrame) -> np.ndarray:
        """Predict the target for each row.

        Args:
            rows: Frame containing at least the training feature columns.

        Returns:
            Predictions of shape (n_rows,), aligned with ``rows``.
        """
        missing = [c for c in self.feature_names if c not in rows.columns]
        if missing:
            raise ValueError(f"Missing feature columns: {missing}")

        return np.asarray(self.pipeline.predict(rows[self.feature_names]), dtype=float)

    def encoded_feature_names(self) -> List[str]:
        """Column names after one-hot encoding."""
        return list(self.pipeline.named_steps["preprocess"].get_feature_names_out())

    def summary(self) -> pd.DataFrame:
        """Coefficients (linear models) or feature importances (trees).

        Returns:
            DataFrame with a ``feature`` column and either ``coefficient``
            or ``importance``.
        """
        names = self.encoded_feature_names()
        estimator = self.estimator

        if hasattr(estimator, "coef_"):
            df = pd.DataFrame({
                "feature": ["(intercept)"] + names,
                "coefficient": np.concatenate(
                    [[float(estimator.intercept_)], np.ravel(estimator.coef_)]
                ),
            })
            return df

        df = pd.DataFrame({
            "feature": names,
            "importance": estimator.feature_importances_,
        })
        return df.sort_values("importance", ascending=False).reset_index(drop=True)

    def __repr__(self) -> str:
        return f"FittedModel(family='{self.family}', n_features={len(self.feature_names)})"


class ModelTrainer(ABC):
    """Base class for model families.

    Subclasses provide ``build_estimator``; ``fit`` handles feature
    selection, categorical encoding, and training.
    """

    name: str = "base"

    def __init__(self, **params: Any) -> None:
        self.params: Dict[str, Any] = params

    @abstractmethod
    def build_estimator(self) -> BaseEstimator:
        """Create a fresh, unfitted regressor."""

    def fit(self, rows: pd.DataFrame, target_column: str) -> FittedModel:
        """Train a new model on ``rows``.

        Args:
            rows: Training subset including the target column.
            target_column: Column to predict; every other column is a feature.

        Returns:
            Independent FittedModel.

        Raises:
            ValueError: If the subset is empty, lacks the target, or has
                no feature columns.
        """
        if target_column not in rows.columns:
            raise ValueError(f"Target column '{target_column}' not in training rows")
        if len(rows) == 0:
            raise ValueError("Cannot fit on an empty training subset")

        feature_names = [c for c in rows.columns if c != target_column]
        if not feature_names:
            raise ValueError("Training rows contain no feature columns")

        X = rows[feature_names]
        y = rows[target_column].to_numpy(dtype=float)

        pipeline = Pipeline([
            ("preprocess", build_preprocessor(X)),
            ("model", self.build_estimator()),
        ])
        pipeline.fit(X, y)

        y_fit = pipeline.predict(X)
        training_metrics = {
            "r2_train": float(r2_score(y, y_fit)) if len(y) > 1 else float("nan"),
            "rmse_train": float(np.sqrt(mean_squared_error(y, y_fit))),
        }

        logger.debug(
            f"Fitted {self.name} on {len(rows)} rows x {len(feature_names)} features: "
            f"{training_metrics}"
        )

        return FittedModel(pipeline, feature_names, target_column, self.name, training_metrics)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.params})"


class LinearRegressionTrainer(ModelTrainer):
    """Ordinary least squares regression."""

    name = "linear"

    def build_estimator(self) -> BaseEstimator:
        return LinearRegression(**self.params)


class RegressionTreeTrainer(ModelTrainer):
    """CART regression tree with rpart-like stopping rules."""

    name = "tree"

    DEFAULTS: Dict[str, Any] = {
        "min_samples_split": 20,
        "min_samples_leaf": 7,
        "max_depth": 30,
        "random_state": 0,
    }

    def __init__(self, **params: Any) -> None:
        super().__init__(**{**self.DEFAULTS, **params})

    def build_estimator(self) -> BaseEstimator:
        return DecisionTreeRegressor(**self.params)


class ModelTreeTrainer(ModelTrainer):
    """Regression tree with a linear model in every leaf."""

    name = "model_tree"

    DEFAULTS: Dict[str, Any] = {
        "max_depth": 3,
        "min_samples_leaf": 20,
        "random_state": 0,
    }

    def __init__(self, **params: Any) -> None:
        super().__init__(**{**self.DEFAULTS, **params})

    def build_estimator(self) -> BaseEstimator:
        return ModelTreeRegressor(**self.params)


TRAINERS: Dict[str, Type[ModelTrainer]] = {
    LinearRegressionTrainer.name: LinearRegressionTrainer,
    RegressionTreeTrainer.name: RegressionTreeTrainer,
    ModelTreeTrainer.name: ModelTreeTrainer,
}


def available_trainers() -> List[str]:
    return list(TRAINERS)


def get_trainer(name: str, **params: Any) -> ModelTrainer:
    """Instantiate a trainer by family name.

    Args:
        name: One of ``available_trainers()``.
        **params: Estimator parameters overriding the family defaults.

    Returns:
        New ModelTrainer.
    """
    if name not in TRAINERS:
        raise ValueError(
            f"Unknown model family: {name}. Use one of {available_trainers()}."
        )
    return TRAINERS[name](**params)
