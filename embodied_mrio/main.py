"""
Main execution script for the embodied MRIO analysis package.

This script provides a command-line interface for computing embodied
employment and value-added transfers between regions. It orchestrates bundle
loading, the Leontief system, both factor branches, and optional saving of
the region-level results.

Usage:
    python -m embodied_mrio.main --years 2012 2015 2017 --save-results
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from embodied_mrio import config
from embodied_mrio.exceptions import MRIOError
from embodied_mrio.io_data import MRIODataLoader
from embodied_mrio.pipeline import EmbodiedAnalysisResult, run_embodied_analysis
from embodied_mrio.utils.logging_config import set_package_level, setup_logger

logger = setup_logger("embodied_mrio.main", level=config.LOG_LEVEL, log_file=config.LOG_FILE)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Parameters
    ----------
    argv : list of str, optional
        Arguments to parse, by default ``sys.argv[1:]``.

    Returns
    -------
    argparse.Namespace
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description='Embodied employment and value-added transfers in MRIO tables',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Analyze a single year
    python -m embodied_mrio.main --years 2012

    # Analyze every available year and save region-level matrices
    python -m embodied_mrio.main --years 2012 2015 2017 --save-results

    # Use the explicit Leontief inverse instead of LU solves
    python -m embodied_mrio.main --years 2017 --explicit-inverse
        """
    )

    parser.add_argument(
        '--years',
        type=int,
        nargs='+',
        default=[config.DEFAULT_YEAR],
        help=f'Table years to process (default: {config.DEFAULT_YEAR})'
    )

    parser.add_argument(
        '--input-folder',
        type=Path,
        default=config.INPUT_FOLDER,
        help=f'Folder with preprocessed bundles (default: {config.INPUT_FOLDER})'
    )

    parser.add_argument(
        '--output-folder',
        type=Path,
        default=config.OUTPUT_FOLDER,
        help=f'Folder for saved results (default: {config.OUTPUT_FOLDER})'
    )

    parser.add_argument(
        '--save-results',
        action='store_true',
        help='Save region-level transfer matrices and summaries'
    )

    parser.add_argument(
        '--output-format',
        type=str,
        choices=['pickle', 'csv', 'both'],
        default='csv',
        help='Output file format (default: csv)'
    )

    parser.add_argument(
        '--explicit-inverse',
        action='store_true',
        help='Multiply by the explicit Leontief inverse instead of LU solves'
    )

    parser.add_argument(
        '--max-condition-number',
        type=float,
        default=config.MAX_CONDITION_NUMBER,
        help=f'Abort when cond(I - A) exceeds this (default: {config.MAX_CONDITION_NUMBER:g})'
    )

    parser.add_argument(
        '--no-validate',
        dest='validate',
        action='store_false',
        help='Skip data-quality warnings while loading'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser.parse_args(argv)


def process_year(
    year: int,
    loader: MRIODataLoader,
    args: argparse.Namespace
) -> Optional[EmbodiedAnalysisResult]:
    """
    Process a single year of MRIO data.

    Parameters
    ----------
    year : int
        Year to process.
    loader : MRIODataLoader
        Bundle loader instance.
    args : argparse.Namespace
        Command-line arguments.

    Returns
    -------
    EmbodiedAnalysisResult or None
        Results, or None if processing failed.
    """
    logger.info("=" * 80)
    logger.info(f"PROCESSING YEAR {year}")
    logger.info("=" * 80)

    try:
        logger.info("Step 1: Loading MRIO bundle...")
        bundle = loader.load_year(year, validate=args.validate)

        logger.info("Step 2: Computing embodied flows...")
        result = run_embodied_analysis(
            bundle,
            use_lu_solve=not args.explicit_inverse,
            max_condition_number=args.max_condition_number,
        )
        logger.info(f"  Condition number of (I - A): {result.condition_number:.3e}")

        if args.save_results:
            logger.info("Step 3: Saving results...")
            save_results(year, result, args)

        logger.info(f"Successfully processed year {year}")
        return result

    except MRIOError as e:
        logger.error(f"Failed to process year {year}: {e}", exc_info=True)
        return None


def save_results(
    year: int,
    result: EmbodiedAnalysisResult,
    args: argparse.Namespace
) -> List[Path]:
    """
    Save region-level results of both branches to disk.

    Parameters
    ----------
    year : int
        Year being saved.
    result : EmbodiedAnalysisResult
        Analysis results.
    args : argparse.Namespace
        Command-line arguments (output folder and format).

    Returns
    -------
    List[Path]
        Paths of the files written.
    """
    output_folder = Path(args.output_folder)
    output_folder.mkdir(parents=True, exist_ok=True)

    tables = {'transfer_summary': result.transfer_summary()}
    for branch, branch_result in result.branches().items():
        frames = branch_result.to_frames()
        for name in ('region_flow', 'self_trade_free_flow', 'net_flow_matrix'):
            tables[f'{branch}_{name}'] = frames[name]

    written = []
    for name, table in tables.items():
        if args.output_format in ['pickle', 'both']:
            pickle_path = output_folder / f"{name}_{year}.pkl"
            table.to_pickle(pickle_path)
            written.append(pickle_path)
        if args.output_format in ['csv', 'both']:
            csv_path = output_folder / f"{name}_{year}.csv"
            table.to_csv(csv_path)
            written.append(csv_path)

    logger.info(f"Saved {len(written)} files to {output_folder}")
    return written


def print_summary_statistics(year: int, result: EmbodiedAnalysisResult, top: int = 5) -> None:
    """
    Log the largest net exporters and importers of each branch.

    Parameters
    ----------
    year : int
        Year of the results.
    result : EmbodiedAnalysisResult
        Analysis results.
    top : int, optional
        Number of regions listed at each end, by default 5.
    """
    logger.info("")
    logger.info("=" * 80)
    logger.info(f"SUMMARY STATISTICS {year}")
    logger.info("=" * 80)

    summary = result.transfer_summary()
    for branch in result.branches():
        net = summary[(branch, 'net')].sort_values(ascending=False)
        total = summary[(branch, 'export')].sum()
        logger.info(f"{branch}: total interregional transfer {total:,.2f}")
        logger.info(f"  Top {top} net exporters:")
        for region, value in net.head(top).items():
            logger.info(f"    {region}: {value:,.2f}")
        logger.info(f"  Top {top} net importers:")
        for region, value in net.tail(top)[::-1].items():
            logger.info(f"    {region}: {value:,.2f}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function."""
    args = parse_arguments(argv)

    if args.verbose:
        set_package_level("DEBUG")

    logger.info("Validating configuration...")
    if not config.validate_config(args.input_folder, args.output_folder):
        logger.error("Configuration validation failed. Exiting.")
        return 1

    loader = MRIODataLoader(input_folder=args.input_folder)

    results = {}
    for year in args.years:
        result = process_year(year, loader, args)
        if result is not None:
            results[year] = result

    if not results:
        logger.error("No years processed successfully. Exiting.")
        return 1

    for year, result in results.items():
        print_summary_statistics(year, result)

    logger.info("")
    logger.info("=" * 80)
    logger.info("ANALYSIS COMPLETE")
    logger.info("=" * 80)
    logger.info(f"Processed {len(results)}/{len(args.years)} year(s) successfully")

    if args.save_results:
        logger.info(f"Results saved to: {args.output_folder}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
