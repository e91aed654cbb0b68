"""Regression model families for cross-validated comparison."""

from .model_tree import ModelTreeRegressor
from .trainers import (
    FittedModel,
    LinearRegressionTrainer,
    ModelTrainer,
    ModelTreeTrainer,
    RegressionTreeTrainer,
    available_trainers,
    get_trainer,
)

__all__ = [
    "FittedModel",
    "LinearRegressionTrainer",
    "ModelTrainer",
    "ModelTreeRegressor",
    "ModelTreeTrainer",
    "RegressionTreeTrainer",
    "available_trainers",
    "get_trainer",
]
