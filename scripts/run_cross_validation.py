#!/usr/bin/env python
"""Compare regression model families on the sales dataset.

This script implements the report's evaluation pipeline:
1. Load and preprocess the sales data
2. Rank predictors by correlation with the target
3. Build feature-engineering variants (quadratic / log terms)
4. Cross-validate every model family on every variant
5. Save per-fold reports and the summary table

Usage:
    python scripts/run_cross_validation.py --data data/raw/sales.csv --target sales

Example:
    python scripts/run_cross_validation.py \\
        --data data/raw/sales.csv \\
        --target sales \\
        --quadratic price \\
        --log advertising \\
        --n-folds 5 \\
        --seed 500
"""

import argparse
import json
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pandas as pd
from loguru import logger

from data.feature_engineering import FeatureEngineer
from data.sales_loader import SalesDataLoader
from evaluation.cross_validation import compare_models, summarize_reports
from evaluation.exceptions import EvaluationError
from evaluation.holdout import evaluate_holdout
from models.trainers import available_trainers, get_trainer
from utils.config import Config
from utils.logger import setup_logger


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Cross-validate regression models on a sales dataset"
    )

    parser.add_argument("--data", type=str, default=None, help="Path to input CSV file")
    parser.add_argument("--target", type=str, default=None, help="Target column name")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory for reports",
    )
    parser.add_argument(
        "--models",
        nargs="+",
        choices=available_trainers(),
        default=None,
        help="Model families to compare",
    )
    parser.add_argument("--metrics", nargs="+", default=None, help="Metrics to report")
    parser.add_argument("--quadratic", nargs="*", default=None, help="Columns to square")
    parser.add_argument("--log", nargs="*", default=None, help="Columns to log-transform")
    parser.add_argument("--n-folds", type=int, default=None, help="Number of CV folds")
    parser.add_argument("--n-jobs", type=int, default=None, help="Folds run in parallel")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--config", type=str, default=None, help="Path to YAML configuration file")
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level")

    return parser.parse_args(argv)


def apply_overrides(config: Config, args: argparse.Namespace) -> None:
    """Command-line values take precedence over the YAML configuration."""
    overrides = {
        "data.path": args.data,
        "data.target_column": args.target,
        "paths.results": args.output,
        "cv.models": args.models,
        "cv.metrics": args.metrics,
        "cv.n_folds": args.n_folds,
        "cv.n_jobs": args.n_jobs,
        "features.quadratic": args.quadratic,
        "features.log": args.log,
        "random_seed": args.seed,
    }
    for key, value in overrides.items():
        if value is not None:
            config.set(key, value)


def main(argv=None):
    """Main evaluation pipeline."""
    args = parse_args(argv)

    config = Config(args.config)
    apply_overrides(config, args)

    output_dir = Path(config.get("paths.results"))
    setup_logger(log_file=str(output_dir / "cv.log"), level=args.log_level)
    logger.info("=" * 60)
    logger.info("Sales Regression - Cross-Validation Report")
    logger.info("=" * 60)

    data_path = config.get("data.path")
    target = config.get("data.target_column")
    seed = config.get("random_seed")
    n_folds = config.get("cv.n_folds")
    metrics = config.get("cv.metrics")

    # ===== Step 1: Load Data =====
    logger.info("Step 1: Loading data...")

    if not Path(data_path).exists():
        logger.error(f"Data file not found: {data_path}")
        return 1

    loader = SalesDataLoader(
        id_columns=config.get("data.id_columns"),
        categorical_columns=config.get("data.categorical_columns"),
    )
    df = loader.preprocess(loader.load_from_csv(data_path))

    try:
        loader.validate_target(df, target)
    except ValueError as exc:
        logger.error(str(exc))
        return 1

    logger.info(f"Dataset statistics: {loader.get_statistics(df, target)}")

    # ===== Step 2: Explore =====
    logger.info("Step 2: Correlation with target...")

    engineer = FeatureEngineer()
    correlations = engineer.correlation_with_target(df, target)
    logger.info(f"Correlations with '{target}':\n{correlations.round(3).to_string()}")

    # ===== Step 3: Feature variants =====
    logger.info("Step 3: Building feature variants...")

    try:
        variants = engineer.build_variants(
            df,
            target,
            quadratic=config.get("features.quadratic"),
            log=config.get("features.log"),
        )
    except ValueError as exc:
        logger.error(f"Feature engineering failed: {exc}")
        return 1

    # ===== Step 4: Cross-validate =====
    logger.info("Step 4: Cross-validating model families...")

    trainers = {
        name: get_trainer(name, **(config.get(f"models.{name}") or {}))
        for name in config.get("cv.models")
    }

    all_reports = {}
    summaries = []
    try:
        for variant, dataset in variants.items():
            for model_name, trainer in trainers.items():
                holdout = evaluate_holdout(dataset, target, trainer, metrics, seed=seed)
                logger.info(f"[{variant}] {model_name} holdout test metrics: {holdout['test']}")

            reports = compare_models(
                dataset,
                target,
                trainers,
                n_folds=n_folds,
                seed=seed,
                metric_names=metrics,
                n_jobs=config.get("cv.n_jobs"),
            )
            for model_name, report in reports.items():
                logger.info(f"[{variant}] {model_name}:\n{report.format(precision=3)}")
                all_reports[f"{variant}/{model_name}"] = report.to_dict()

            summary = summarize_reports(reports)
            summary.insert(0, "variant", variant)
            summaries.append(summary)
    except EvaluationError as exc:
        logger.error(f"Evaluation failed: {exc}")
        return 1

    # ===== Step 5: Save Results =====
    logger.info("Step 5: Saving results...")

    output_dir.mkdir(parents=True, exist_ok=True)

    reports_path = output_dir / "cv_reports.json"
    with open(reports_path, "w") as f:
        json.dump(
            {"config": config.config, "reports": all_reports},
            f,
            indent=2,
            default=str,
        )

    summary_table = pd.concat(summaries)
    summary_path = output_dir / "cv_summary.csv"
    summary_table.to_csv(summary_path)

    # ===== Summary =====
    logger.info("=" * 60)
    logger.info("EVALUATION COMPLETE")
    logger.info("=" * 60)
    logger.info(f"Mean metrics per variant and model:\n{summary_table.round(3).to_string()}")
    logger.info(f"\nArtifacts saved to: {output_dir}")
    logger.info(f"  - Reports: {reports_path.name}")
    logger.info(f"  - Summary: {summary_path.name}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
