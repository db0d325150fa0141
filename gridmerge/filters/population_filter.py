"""
Population-threshold filter.

Copies a CSV keeping only the rows whose population column holds a value
greater than zero.
"""

import os
from typing import Dict, Optional

import polars as pl

from ..config import POPULATION_COLUMN_INDEX
from ..errors import MissingInputFile


def read_string_table(path, what: str) -> pl.DataFrame:
    if not os.path.isfile(path):
        raise MissingInputFile(path, what)
    try:
        return pl.read_csv(path, infer_schema_length=0, encoding="utf8-lossy")
    except pl.exceptions.NoDataError:
        # Zero-byte file: no header, so no columns to filter on
        return pl.DataFrame()
    except OSError as e:
        raise MissingInputFile(path, what) from e


def prefixed_output_path(input_path, prefix: str) -> str:
    """Place ``<prefix><name>`` next to the input file."""
    directory, name = os.path.split(os.fspath(input_path))
    return os.path.join(directory, prefix + name)


def filter_nonzero_population(
    input_path,
    output_path: Optional[str] = None,
    column_index: int = POPULATION_COLUMN_INDEX,
    verbose: bool = True,
) -> Dict[str, int]:
    """
    Keep rows with population > 0.

    Args:
        input_path: CSV to filter (header row is copied through)
        output_path: Destination; defaults to filtered_<name> beside the input
        column_index: Zero-based position of the population column
        verbose: Whether to print a summary line

    Returns:
        Dictionary with total, kept and removed row counts. Rows whose
        population does not parse count as removed.

    Raises:
        MissingInputFile: If the input cannot be read
    """
    input_path = os.fspath(input_path)
    if output_path is None:
        output_path = prefixed_output_path(input_path, "filtered_")

    df = read_string_table(input_path, "master file")
    if column_index >= len(df.columns):
        raise ValueError(
            f"Population column {column_index} out of range for {len(df.columns)} columns"
        )

    population = (
        pl.col(df.columns[column_index])
        .str.strip_chars()
        .cast(pl.Float64, strict=False)
    )
    kept = df.filter((population > 0).fill_null(False))
    kept.write_csv(output_path)

    stats = {
        "total_count": len(df),
        "kept_count": len(kept),
        "removed_count": len(df) - len(kept),
    }

    if verbose:
        print(f"Output saved to {output_path}")
        print(
            f"Kept {stats['kept_count']} out of {stats['total_count']} rows ({stats['removed_count']} removed)"
        )

    return stats
