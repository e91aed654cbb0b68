"""Data loading and feature engineering modules."""

from .sales_loader import SalesDataLoader
from .feature_engineering import FeatureEngineer

__all__ = ["SalesDataLoader", "FeatureEngineer"]
