"""Unit tests for model trainers and the model tree regressor."""

import numpy as np
import pandas as pd
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from models.model_tree import ModelTreeRegressor
from models.trainers import (
    FittedModel,
    LinearRegressionTrainer,
    ModelTreeTrainer,
    RegressionTreeTrainer,
    available_trainers,
    get_trainer,
)


@pytest.fixture
def sample_data():
    """Create sample regression data with a categorical predictor."""
    np.random.seed(42)
    n_samples = 200

    x1 = np.random.randn(n_samples)
    x2 = np.random.randn(n_samples)
    store = np.random.choice(["a", "b"], n_samples)
    y = x1 * 2 + x2 * 0.5 + np.where(store == "a", 1.0, -1.0) + np.random.randn(n_samples) * 0.1

    return pd.DataFrame({"x1": x1, "x2": x2, "store": store, "sales": y})


class TestLinearRegressionTrainer:
    """Tests for the ordinary least squares family."""

    @pytest.fixture
    def trainer(self):
        return LinearRegressionTrainer()

    def test_fit(self, trainer, sample_data):
        """Fitting returns a FittedModel with training metrics."""
        fitted = trainer.fit(sample_data, "sales")

        assert isinstance(fitted, FittedModel)
        assert fitted.family == "linear"
        assert fitted.feature_names == ["x1", "x2", "store"]
        assert fitted.training_metrics["r2_train"] > 0.95

    def test_predict(self, trainer, sample_data):
        """Predictions align with the input rows."""
        fitted = trainer.fit(sample_data.iloc[:150], "sales")
        predictions = fitted.predict(sample_data.iloc[150:])

        assert predictions.shape == (50,)
        assert np.isfinite(predictions).all()

    def test_predict_ignores_target_column(self, trainer, sample_data):
        """Held-out rows may include or omit the target column."""
        fitted = trainer.fit(sample_data, "sales")

        with_target = fitted.predict(sample_data)
        without_target = fitted.predict(sample_data.drop(columns=["sales"]))
        np.testing.assert_allclose(with_target, without_target)

    def test_summary_coefficients(self, trainer, sample_data):
        """Coefficients recover the generating relationship."""
        fitted = trainer.fit(sample_data, "sales")
        summary = fitted.summary().set_index("feature")["coefficient"]

        assert summary["x1"] == pytest.approx(2.0, abs=0.05)
        assert summary["x2"] == pytest.approx(0.5, abs=0.05)
        assert "(intercept)" in summary.index
        assert "store_a" in summary.index

    def test_unseen_category(self, trainer, sample_data):
        """Unseen categorical levels at prediction time do not fail."""
        fitted = trainer.fit(sample_data, "sales")
        new_rows = sample_data.iloc[:3].copy()
        new_rows["store"] = "c"

        predictions = fitted.predict(new_rows)
        assert predictions.shape == (3,)

    def test_missing_feature_column(self, trainer, sample_data):
        fitted = trainer.fit(sample_data, "sales")

        with pytest.raises(ValueError, match="Missing feature columns"):
            fitted.predict(sample_data.drop(columns=["x2"]))

    def test_independent_models(self, trainer, sample_data):
        """Each fit produces a new, independent model."""
        first = trainer.fit(sample_data.iloc[:100], "sales")
        second = trainer.fit(sample_data.iloc[100:], "sales")

        assert first.pipeline is not second.pipeline
        assert not np.allclose(first.predict(sample_data), second.predict(sample_data))


class TestTreeTrainers:
    """Tests for the tree-based families."""

    def test_regression_tree_defaults(self):
        trainer = RegressionTreeTrainer()

        assert trainer.params["min_samples_leaf"] == 7
        assert trainer.params["min_samples_split"] == 20

    def test_regression_tree_override(self):
        trainer = get_trainer("tree", max_depth=2)

        assert trainer.params["max_depth"] == 2
        assert trainer.params["min_samples_leaf"] == 7

    def test_regression_tree_importance(self, sample_data):
        """Tree summary ranks features by importance."""
        fitted = RegressionTreeTrainer().fit(sample_data, "sales")
        summary = fitted.summary()

        assert list(summary.columns) == ["feature", "importance"]
        assert summary.iloc[0]["feature"] == "x1"
        assert summary["importance"].sum() == pytest.approx(1.0)

    def test_model_tree_fit_predict(self, sample_data):
        fitted = ModelTreeTrainer().fit(sample_data, "sales")
        predictions = fitted.predict(sample_data)

        assert predictions.shape == (len(sample_data),)
        assert fitted.training_metrics["r2_train"] > 0.95


class TestModelTreeRegressor:
    """Tests for the piecewise-linear estimator."""

    @pytest.fixture
    def piecewise_data(self):
        """y = x below zero and x + 20 above: two slope-1 segments."""
        rng = np.random.default_rng(0)
        X = rng.uniform(-5, 5, (400, 1))
        y = np.where(X[:, 0] < 0, X[:, 0], X[:, 0] + 20) + rng.normal(0, 0.05, 400)
        return X, y

    def test_fits_piecewise_linear(self, piecewise_data):
        """Linear leaves capture each segment's slope."""
        X, y = piecewise_data
        model = ModelTreeRegressor(max_depth=1, min_samples_leaf=20).fit(X, y)

        assert model.n_leaves == 2
        assert model.score(X, y) > 0.99

    def test_beats_constant_leaves(self, piecewise_data):
        """Linear leaves outperform a tree of the same depth."""
        from sklearn.tree import DecisionTreeRegressor

        X, y = piecewise_data
        model_tree = ModelTreeRegressor(max_depth=2, min_samples_leaf=20).fit(X, y)
        tree = DecisionTreeRegressor(max_depth=2, min_samples_leaf=20).fit(X, y)

        assert model_tree.score(X, y) > tree.score(X, y)

    def test_predict_before_fit(self):
        from sklearn.exceptions import NotFittedError

        with pytest.raises(NotFittedError):
            ModelTreeRegressor().predict(np.zeros((2, 1)))

    def test_get_params(self):
        model = ModelTreeRegressor(max_depth=4)

        assert model.get_params()["max_depth"] == 4
        assert model.get_params()["min_samples_leaf"] == 20


class TestTrainerErrors:
    """Test edge cases and error handling."""

    def test_unknown_family(self):
        with pytest.raises(ValueError, match="Unknown model family"):
            get_trainer("svm")

    def test_available_trainers(self):
        assert available_trainers() == ["linear", "tree", "model_tree"]

    def test_empty_training_subset(self, sample_data):
        with pytest.raises(ValueError, match="empty"):
            LinearRegressionTrainer().fit(sample_data.iloc[:0], "sales")

    def test_no_feature_columns(self, sample_data):
        with pytest.raises(ValueError, match="no feature columns"):
            LinearRegressionTrainer().fit(sample_data[["sales"]], "sales")

    def test_missing_target(self, sample_data):
        with pytest.raises(ValueError, match="Target column"):
            LinearRegressionTrainer().fit(sample_data, "revenue")

    def test_repr(self):
        assert "max_depth" in repr(ModelTreeTrainer())
        assert "linear" in repr(LinearRegressionTrainer().fit(
            pd.DataFrame({"x": [1.0, 2.0, 3.0], "y": [2.0, 4.0, 6.0]}), "y"
        ))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
