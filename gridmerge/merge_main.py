#!/usr/bin/env python3
"""
Forecast/Population Master Dataset - Main Entry Point

Joins the forecast grid exports for a run date with the population grid and
writes master_<MM-DD-YYYY>.csv.

Process:
1. Loads the population grid into a rounded-coordinate index
2. Selects the forecast files for the run date
3. Merges every forecast row that lands on a populated grid cell
4. Optionally drops zero-population rows and rows outside the US
5. Validates the output file

Usage:
    python -m gridmerge.merge_main merge 01-15-2024
    python -m gridmerge.merge_main merge --keep-nonzero --keep-us
    python -m gridmerge.merge_main keep-us master_01-15-2024.csv
"""

import argparse
import os
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import polars as pl

from . import config
from .errors import GridMergeError
from .filters import (
    filter_nonzero_population,
    keep_us as keep_us_filter,
    prefixed_output_path,
)
from .forecasts import forecast_directory, select_forecast_files
from .merging import JoinStats, join_forecasts
from .population import PopulationIndex
from .utils import MasterRecordWriter, print_sample_data, print_summary_statistics
from .validation import validate_and_report


@dataclass
class PipelineResult:
    """Outcome of a pipeline run."""

    date: str
    output_file: str
    stats: JoinStats
    forecast_files: List[str] = field(default_factory=list)
    filter_stats: Dict[str, Dict[str, int]] = field(default_factory=dict)
    final_file: Optional[str] = None
    validation_passed: Optional[bool] = None


def run_pipeline(
    date: Optional[str] = None,
    population_file: Optional[str] = None,
    data_root: Optional[str] = None,
    output_dir: Optional[str] = None,
    keep_nonzero: bool = False,
    keep_us: bool = False,
    validate: bool = True,
    verbose: bool = True,
) -> PipelineResult:
    """
    Build the master dataset for one run date.

    Args:
        date: Run date as MM-DD-YYYY (default: today)
        population_file: Population grid CSV (default: config.POPULATION_FILE)
        data_root: Folder containing the MM-DD-YYYY forecast folders
        output_dir: Folder for the master file and filtered copies
        keep_nonzero: Also write filtered_<master> without zero-population rows
        keep_us: Also write us_<...> restricted to the contiguous US
        validate: Whether to validate the final output file
        verbose: Whether to print progress

    Returns:
        PipelineResult with the output paths and merge statistics

    Raises:
        MissingInputFile: If the population grid cannot be read
        MissingInputDirectory: If the forecast folder does not exist
    """
    date = date or config.today_date()
    population_file = population_file or config.POPULATION_FILE
    data_root = data_root or config.DATA_ROOT
    output_dir = output_dir or config.OUTPUT_DIR

    if verbose:
        print("=== Forecast/Population Master Merge ===\n")

    # Step 1: Population grid
    if verbose:
        print("1. Loading population grid...")
    index = PopulationIndex.build(population_file, verbose=verbose)

    # Step 2: Forecast files for the run date
    folder = forecast_directory(data_root, date)
    if verbose:
        print(f"\n2. Selecting forecast files in {folder}...")
    forecast_files = list(select_forecast_files(folder, date))

    if verbose:
        for path in forecast_files:
            print(f"   Found file: {path.name}")
    if not forecast_files:
        print(f"[WARNING] No forecast files for {date} in {folder}")

    # Step 3: Merge
    os.makedirs(output_dir, exist_ok=True)
    output_file = os.path.join(output_dir, config.master_filename(date))
    if verbose:
        print(f"\n3. Merging {len(forecast_files)} forecast files...")

    stats = JoinStats()
    with MasterRecordWriter.open(output_file) as writer:
        writer.write_all(join_forecasts(forecast_files, index, stats, verbose=verbose))

    result = PipelineResult(
        date=date,
        output_file=output_file,
        stats=stats,
        forecast_files=[str(path) for path in forecast_files],
        final_file=output_file,
    )

    if verbose:
        print(f"[SUCCESS] Done. Output saved to {output_file}")
        print(f"Matched {stats.match_count} out of {stats.total_count} locations")

    # Step 4: Optional filters, chained on the previous step's output
    if keep_nonzero:
        if verbose:
            print("\n4. Dropping zero-population rows...")
        result.filter_stats["nonzero"] = filter_nonzero_population(
            result.final_file, verbose=verbose
        )
        result.final_file = prefixed_output_path(result.final_file, "filtered_")

    if keep_us:
        if verbose:
            print("\n4. Restricting to the contiguous US...")
        result.filter_stats["us"] = keep_us_filter(result.final_file, verbose=verbose)
        result.final_file = prefixed_output_path(result.final_file, "us_")

    if verbose:
        print_summary_statistics(
            len(index), result.forecast_files, stats.as_dict(), result.final_file
        )
        print_sample_data(result.final_file)

    # Step 5: Validate the output file
    if validate:
        if verbose:
            print("\n=== Validating Output File ===")
        result.validation_passed = validate_and_report(
            result.final_file, print_report=verbose
        )
        if result.validation_passed:
            if verbose:
                print("[SUCCESS] All validation checks passed!")
        else:
            print(
                "[WARNING] Some validation checks failed - please review the issues above"
            )

    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Merge daily forecast grids with the population grid",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m gridmerge.merge_main merge 01-15-2024
  python -m gridmerge.merge_main merge --population population_2020.csv --keep-us
  python -m gridmerge.merge_main filter-population master_01-15-2024.csv
  python -m gridmerge.merge_main keep-us master_01-15-2024.csv
  python -m gridmerge.merge_main validate master_01-15-2024.csv
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    merge = subparsers.add_parser("merge", help="Build master_<date>.csv")
    merge.add_argument(
        "date",
        nargs="?",
        default=None,
        help="Run date as MM-DD-YYYY (default: today)",
    )
    merge.add_argument(
        "--population",
        type=str,
        default=None,
        help=f"Population grid CSV (default: {config.POPULATION_FILE})",
    )
    merge.add_argument(
        "--data_root",
        type=str,
        default=None,
        help=f"Folder containing the MM-DD-YYYY forecast folders (default: {config.DATA_ROOT})",
    )
    merge.add_argument(
        "--output_dir",
        type=str,
        default=None,
        help=f"Directory for output files (default: {config.OUTPUT_DIR})",
    )
    merge.add_argument(
        "--keep-nonzero",
        action="store_true",
        help="Also write a copy without zero-population rows",
    )
    merge.add_argument(
        "--keep-us",
        action="store_true",
        help="Also write a copy restricted to the contiguous US",
    )
    merge.add_argument(
        "--no-validate", action="store_true", help="Skip output validation"
    )
    merge.add_argument("--quiet", action="store_true", help="Only print warnings")

    nonzero = subparsers.add_parser(
        "filter-population", help="Keep rows with population > 0"
    )
    nonzero.add_argument("master_file", help="CSV to filter")
    nonzero.add_argument("--output", default=None, help="Output path")
    nonzero.add_argument(
        "--column_index",
        type=int,
        default=config.POPULATION_COLUMN_INDEX,
        help=f"Zero-based population column (default: {config.POPULATION_COLUMN_INDEX})",
    )

    us = subparsers.add_parser("keep-us", help="Keep rows inside the contiguous US")
    us.add_argument("master_file", help="CSV to filter")
    us.add_argument("--output", default=None, help="Output path")

    validate = subparsers.add_parser("validate", help="Validate a master CSV")
    validate.add_argument("master_file", help="CSV to validate")
    validate.add_argument(
        "--min_records", type=int, default=0, help="Minimum number of records"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line interface. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        if args.command == "merge":
            run_pipeline(
                date=args.date,
                population_file=args.population,
                data_root=args.data_root,
                output_dir=args.output_dir,
                keep_nonzero=args.keep_nonzero,
                keep_us=args.keep_us,
                validate=not args.no_validate,
                verbose=not args.quiet,
            )
        elif args.command == "filter-population":
            filter_nonzero_population(
                args.master_file, args.output, column_index=args.column_index
            )
        elif args.command == "keep-us":
            keep_us_filter(args.master_file, args.output)
        elif args.command == "validate":
            if not validate_and_report(args.master_file, min_records=args.min_records):
                return 1
    except (GridMergeError, OSError, ValueError, pl.exceptions.PolarsError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
