"""Sales Regression Cross-Validation Report.

Loads a tabular sales dataset, fits linear regression, regression tree
and model-tree learners, and compares them with stratified k-fold
cross-validation across several feature-engineering variants.

Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "Graduate Student"
