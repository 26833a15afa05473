#!/usr/bin/env python3
"""
Main script for running the lineage × symbiont trait analysis.
"""

# Pipeline overview (README-style):
# 1) Load one per-individual CSV per trait and standardize lineage, symbiont,
#    response and censoring columns.
# 2) Test the lineage effect with the model suited to each response
#    (binomial / inverse-Gaussian / negative-binomial / gamma GLM, Cox PH,
#    one-way ANOVA).
# 3) Derive Tukey HSD compact letters keyed by lineage.
# 4) Summarize lineages (mean ± SE) and draw ranked bar charts with letters.
# 5) Analyse morphometric traits jointly (PCA biplot, MANOVA, correlations,
#    heatmap) and export every table next to its figure.

import argparse
import logging
import os
import sys
import time

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from symbio.analysis import process_all_datasets
from symbio.config import (
    DEFAULT_ALPHA,
    DEFAULT_DATA_DIR,
    DEFAULT_DATASETS,
    DEFAULT_MORPHOMETRICS,
    DEFAULT_OUTPUT_DIR,
    LOG_FILENAME,
    dataset_by_key,
)


def _build_arg_parser():
    parser = argparse.ArgumentParser(
        description="Lineage × symbiont trait analysis with ranked bar charts."
    )
    parser.add_argument(
        "--data-dir",
        default=str(DEFAULT_DATA_DIR),
        help=f"Directory holding the input CSV files (default: {DEFAULT_DATA_DIR}).",
    )
    parser.add_argument(
        "--outdir",
        default=str(DEFAULT_OUTPUT_DIR),
        help=f"Output directory (default: {DEFAULT_OUTPUT_DIR}).",
    )
    parser.add_argument(
        "--datasets",
        nargs="+",
        choices=[spec.key for spec in DEFAULT_DATASETS],
        default=None,
        help="Subset of datasets to run (default: all).",
    )
    parser.add_argument(
        "--alpha",
        type=float,
        default=DEFAULT_ALPHA,
        help="Family-wise significance level for Tukey letters.",
    )
    parser.add_argument(
        "--skip-multivariate",
        action="store_true",
        help="Skip the PCA / MANOVA / correlation analysis of morphometrics.",
    )
    return parser


def _configure_logging(output_dir):
    os.makedirs(output_dir, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(os.path.join(output_dir, LOG_FILENAME), mode="w"),
        ],
        force=True,
    )


def main(argv=None):
    """Main execution function with step timing logs."""
    parser = _build_arg_parser()
    args = parser.parse_args(argv)
    if not 0 < args.alpha < 1:
        parser.error(f"--alpha must be in (0, 1), got {args.alpha}")
    _configure_logging(args.outdir)

    start_time = time.time()
    logging.info("Initializing lineage × symbiont analysis pipeline")

    datasets = (
        tuple(dataset_by_key(key) for key in args.datasets)
        if args.datasets
        else DEFAULT_DATASETS
    )
    logging.info("Configured %d datasets from %s", len(datasets), args.data_dir)

    results, failures = process_all_datasets(
        datasets=datasets,
        data_dir=args.data_dir,
        output_dir=args.outdir,
        alpha=args.alpha,
        multivariate=None if args.skip_multivariate else DEFAULT_MORPHOMETRICS,
    )

    total_duration = time.time() - start_time
    logging.info(f"Total execution time: {total_duration:.2f} seconds")
    logging.info("Completed %d analyses", len(results))
    for key, result in results.items():
        figure = getattr(result, "figure_path", None)
        if figure is not None:
            logging.info("  - %s chart: %s", key, figure)

    if failures:
        for key, message in failures.items():
            logging.error("  - %s failed: %s", key, message)
        return 1

    logging.info("Analysis pipeline completed successfully")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
