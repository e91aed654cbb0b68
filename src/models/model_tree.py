"""Model tree regressor: a regression tree with linear models in its leaves.

The tree partitions the feature space with scikit-learn's
``DecisionTreeRegressor``; each leaf then gets its own ordinary least
squares fit on the training rows routed to it, giving a piecewise-linear
predictor in the spirit of M5-style model trees.
"""

from typing import Dict, Optional

import numpy as np
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.linear_model import LinearRegression
from sklearn.tree import DecisionTreeRegressor
from sklearn.utils.validation import check_array, check_is_fitted, check_X_y


class ModelTreeRegressor(RegressorMixin, BaseEstimator):
    """Piecewise-linear regressor built on a shallow regression tree.

    Args:
        max_depth: Maximum depth of the partitioning tree.
        min_samples_leaf: Minimum training rows per leaf (and per leaf model).
        random_state: Seed for the tree's tie-breaking between splits.

    Example:
        >>> model = ModelTreeRegressor(max_depth=2, min_samples_leaf=10)
        >>> model.fit(X_train, y_train).predict(X_test)
    """

    def __init__(
        self,
        max_depth: Optional[int] = 3,
        min_samples_leaf: int = 20,
        random_state: Optional[int] = None,
    ) -> None:
        self.max_depth = max_depth
        self.min_samples_leaf = min_samples_leaf
        self.random_state = random_state

    def fit(self, X, y) -> "ModelTreeRegressor":
        X, y = check_X_y(X, y, dtype=np.float64, y_numeric=True)

        self.tree_ = DecisionTreeRegressor(
            max_depth=self.max_depth,
            min_samples_leaf=self.min_samples_leaf,
            random_state=self.random_state,
        )
        self.tree_.fit(X, y)

        leaves = self.tree_.apply(X)
        self.leaf_models_: Dict[int, LinearRegression] = {}
        for leaf in np.unique(leaves):
            mask = leaves == leaf
            self.leaf_models_[int(leaf)] = LinearRegression().fit(X[mask], y[mask])

        self.n_features_in_ = X.shape[1]
        return self

    def predict(self, X) -> np.ndarray:
        check_is_fitted(self, "leaf_models_")
        X = check_array(X, dtype=np.float64)

        leaves = self.tree_.apply(X)
        y_pred = np.empty(X.shape[0], dtype=np.float64)
        for leaf in np.unique(leaves):
            mask = leaves == leaf
            y_pred[mask] = self.leaf_models_[int(leaf)].predict(X[mask])

        return y_pred

    @property
    def n_leaves(self) -> int:
        check_is_fitted(self, "leaf_models_")
        return len(self.leaf_models_)

    @property
    def feature_importances_(self) -> np.ndarray:
        check_is_fitted(self, "tree_")
        return self.tree_.feature_importances_
