"""Unit tests for regression metrics and the metric report."""

import numpy as np
import pandas as pd
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from evaluation.exceptions import ConfigurationError, UnknownMetricError
from evaluation.metrics import (
    DEFAULT_METRICS,
    MetricEngine,
    RegressionMetricEngine,
    calculate_metrics,
    resolve_metric_names,
)
from evaluation.report import MEAN_COLUMN, STD_COLUMN, MetricReport


class TestRegressionMetricEngine:
    """Tests for RegressionMetricEngine."""

    @pytest.fixture
    def engine(self):
        return RegressionMetricEngine()

    @pytest.fixture
    def sample_values(self):
        """Small vectors with hand-computed metric values."""
        return np.array([1.0, 2.0, 3.0, 4.0]), np.array([1.0, 2.0, 3.0, 5.0])

    def test_known_values(self, engine, sample_values):
        """Each metric matches its definition."""
        y_true, y_pred = sample_values
        metrics = engine.compute(y_true, y_pred, DEFAULT_METRICS)

        assert metrics["MAE"] == pytest.approx(0.25)
        assert metrics["RMSE"] == pytest.approx(0.5)
        assert metrics["MAPE"] == pytest.approx(6.25)
        assert metrics["RMSPE"] == pytest.approx(12.5)
        assert metrics["RAE"] == pytest.approx(25.0)
        assert metrics["RRSE"] == pytest.approx(100 * np.sqrt(0.2))
        assert metrics["R2"] == pytest.approx(0.8)

    def test_perfect_prediction(self, engine):
        """Perfect predictions give zero error and R2 of 1."""
        y = np.array([3.0, 1.0, 4.0, 1.5])
        metrics = engine.compute(y, y, ["MAE", "RMSE", "RAE", "R2"])

        assert metrics["MAE"] == 0.0
        assert metrics["RMSE"] == 0.0
        assert metrics["RAE"] == 0.0
        assert metrics["R2"] == pytest.approx(1.0)

    def test_request_order_and_case(self, engine, sample_values):
        """Names are matched case-insensitively, returned in request order."""
        metrics = engine.compute(*sample_values, ["r2", "Mae", "R2"])

        assert list(metrics) == ["R2", "MAE"]

    def test_zero_actual_gives_infinite_percentage(self, engine):
        """Percentage errors are not masked when an actual value is zero."""
        metrics = engine.compute([0.0, 1.0], [1.0, 1.0], ["MAPE", "RMSPE"])

        assert np.isinf(metrics["MAPE"])
        assert np.isinf(metrics["RMSPE"])

    def test_constant_actual(self, engine):
        """Variance-based metrics are non-finite for a constant target."""
        metrics = engine.compute([2.0, 2.0, 2.0], [1.0, 2.0, 3.0], ["R2", "RAE", "RRSE"])

        assert not np.isfinite(metrics["R2"])
        assert np.isinf(metrics["RAE"])
        assert np.isinf(metrics["RRSE"])

    def test_single_value_r2(self, engine):
        """R2 of a single observation is undefined."""
        assert np.isnan(engine.compute([1.0], [2.0], ["R2"])["R2"])

    def test_unknown_metric(self, engine, sample_values):
        """Unknown names raise UnknownMetricError listing them."""
        with pytest.raises(UnknownMetricError) as excinfo:
            engine.compute(*sample_values, ["RMSE", "FOO", "bar"])

        assert excinfo.value.names == ["FOO", "bar"]
        assert "FOO" in str(excinfo.value)

    def test_validate(self, engine):
        assert engine.validate(["rmse", "mape"]) == ["RMSE", "MAPE"]
        assert engine.validate(["rmse", "RMSE"]) == ["RMSE", "RMSE"]
        assert engine.supports("rrse")
        assert not engine.supports("accuracy")

    def test_length_mismatch(self, engine):
        with pytest.raises(ValueError, match="Length mismatch"):
            engine.compute([1.0, 2.0], [1.0], ["MAE"])

    def test_empty_vectors(self, engine):
        with pytest.raises(ValueError, match="empty"):
            engine.compute([], [], ["MAE"])

    def test_custom_metric_table(self):
        """Engines can be built over a custom metric table."""
        engine = RegressionMetricEngine({"MAX": lambda y, p: float(np.max(np.abs(y - p)))})

        assert engine.names == ["MAX"]
        assert engine.compute([1.0, 2.0], [1.5, 4.0], ["max"]) == {"MAX": 2.0}


class TestResolveMetricNames:
    """Tests for checking a metric request before training."""

    def test_canonical_names(self):
        assert resolve_metric_names(RegressionMetricEngine(), ["mae", "r2"]) == ["MAE", "R2"]

    def test_single_name_string(self):
        assert resolve_metric_names(RegressionMetricEngine(), "rmse") == ["RMSE"]

    def test_duplicates_rejected(self):
        """Names that collapse to the same metric are rejected."""
        with pytest.raises(ConfigurationError, match="R2"):
            resolve_metric_names(RegressionMetricEngine(), ["r2", "R2"])

    def test_empty_request(self):
        with pytest.raises(ConfigurationError):
            resolve_metric_names(RegressionMetricEngine(), [])

    def test_engine_without_validate(self):
        """Engines that only compute get the names as given."""

        class ComputeOnly:
            def compute(self, actual, predicted, metric_names):
                return {name: 0.0 for name in metric_names}

        assert resolve_metric_names(ComputeOnly(), ["Bias", "MAE"]) == ["Bias", "MAE"]

    def test_base_class_default_validate(self):
        class Bias(MetricEngine):
            def compute(self, actual, predicted, metric_names):
                diff = float(np.mean(np.asarray(predicted) - np.asarray(actual)))
                return {name: diff for name in metric_names}

        engine = Bias()
        assert engine.validate(["bias"]) == ["bias"]
        assert engine.compute([1.0, 2.0], [2.0, 3.0], ["bias"]) == {"bias": 1.0}

    def test_base_class_is_abstract(self):
        with pytest.raises(TypeError):
            MetricEngine()


def test_calculate_metrics_defaults():
    """calculate_metrics returns every supported metric by default."""
    metrics = calculate_metrics(np.array([1.0, 2.0, 3.0]), np.array([1.1, 2.1, 2.9]))

    assert list(metrics) == DEFAULT_METRICS
    assert metrics["R2"] > 0.9


class TestMetricReport:
    """Tests for MetricReport."""

    @pytest.fixture
    def report(self):
        return MetricReport.from_fold_values(
            ["RMSE", "R2"],
            [
                {"RMSE": 1.0, "R2": 0.9},
                {"RMSE": 2.0, "R2": 0.8},
                {"RMSE": 3.0, "R2": 0.7},
            ],
        )

    def test_layout(self, report):
        table = report.to_frame()

        assert list(table.columns) == ["Fold1", "Fold2", "Fold3", MEAN_COLUMN, STD_COLUMN]
        assert list(table.index) == ["RMSE", "R2"]
        assert report.fold_columns == ["Fold1", "Fold2", "Fold3"]

    def test_summary_columns(self, report):
        assert report.mean("RMSE") == pytest.approx(2.0)
        assert report.std("RMSE") == pytest.approx(1.0)
        assert report.mean("R2") == pytest.approx(0.8)
        np.testing.assert_allclose(report.fold_values("R2"), [0.9, 0.8, 0.7])

    def test_nan_propagates(self):
        """A NaN fold makes the summary NaN rather than being skipped."""
        report = MetricReport.from_fold_values(
            ["R2"], [{"R2": 0.5}, {"R2": float("nan")}, {"R2": 0.7}]
        )

        assert np.isnan(report.mean("R2"))
        assert np.isnan(report.std("R2"))

    def test_to_frame_is_copy(self, report):
        """Mutating the returned frame leaves the report untouched."""
        table = report.to_frame()
        table.loc["RMSE", MEAN_COLUMN] = 99.0

        assert report.mean("RMSE") == pytest.approx(2.0)

    def test_frozen(self, report):
        with pytest.raises(AttributeError):
            report.table = pd.DataFrame()

    def test_format_rounds_only_for_display(self):
        report = MetricReport.from_fold_values(
            ["MAE"], [{"MAE": 1.23456}, {"MAE": 2.34567}]
        )
        text = report.format(precision=2)

        assert "1.23" in text
        assert "1.23456" not in text
        assert report.fold_values("MAE")[0] == 1.23456

    def test_to_dict(self, report):
        data = report.to_dict()

        assert data["RMSE"]["Fold2"] == 2.0
        assert data["R2"][MEAN_COLUMN] == pytest.approx(0.8)

    def test_repr(self, report):
        assert "n_folds=3" in repr(report)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
