"""
Data utility functions for the master dataset pipeline.

Provides CSV loading with tolerant numeric casting, the master record
writer, and the summary printouts used by the pipeline.
"""

import os
from typing import Dict, Iterable, List, Optional

import polars as pl

from ..config import FLOAT_PRECISION, MASTER_HEADER
from ..errors import MissingInputFile


def read_csv_columns(
    path,
    columns: List[str],
    what: str = "input file",
) -> pl.DataFrame:
    """
    Read a headered CSV as strings, renaming its columns positionally.

    The header row is ignored; columns are assigned by position so files with
    differently named headers still load.

    Args:
        path: CSV file to read
        columns: Names to give the columns, in file order
        what: Description of the file for error messages

    Returns:
        DataFrame of Utf8 columns (empty fields are empty strings)

    Raises:
        MissingInputFile: If the file does not exist or cannot be read
    """
    path = os.fspath(path)
    if not os.path.isfile(path):
        raise MissingInputFile(path, what)

    try:
        df = pl.read_csv(
            path,
            has_header=True,
            infer_schema_length=0,  # Everything as Utf8, cast later
            truncate_ragged_lines=True,
            missing_utf8_is_empty_string=True,
            encoding="utf8-lossy",  # Bad bytes become U+FFFD, rejected per row
        )
    except pl.exceptions.NoDataError:
        # Zero-byte file: nothing to read, not even a header
        return pl.DataFrame(schema={col: pl.Utf8 for col in columns})
    except OSError as e:
        raise MissingInputFile(path, what) from e

    # Pad or trim to the expected layout, then name by position
    for i in range(len(df.columns), len(columns)):
        df = df.with_columns(pl.lit(None, dtype=pl.Utf8).alias(f"__missing_{i}"))
    return df.select(
        [pl.col(old).alias(new) for old, new in zip(df.columns, columns)]
    )


def cast_numeric_columns(df: pl.DataFrame, columns: List[str]) -> pl.DataFrame:
    """
    Cast string columns to Float64, turning unparseable values into nulls.

    Parsing is locale independent ("." is always the decimal separator).
    """
    return df.with_columns(
        [
            pl.col(col).str.strip_chars().cast(pl.Float64, strict=False).alias(col)
            for col in columns
            if col in df.columns
        ]
    )


def format_float(value: float) -> str:
    """Render a float with the fixed output precision."""
    return f"{value:.{FLOAT_PRECISION}f}"


def format_record(record) -> str:
    """Serialize a MergedRecord as one comma-delimited line (no newline)."""
    return ",".join(
        [
            record.timestamp,
            format_float(record.latitude),
            format_float(record.longitude),
            format_float(record.population),
            format_float(record.temperature),
            format_float(record.temperature_stddev),
        ]
    )


class MasterRecordWriter:
    """
    Append-only writer for master CSV files.

    The header is written once when the writer opens; every record after that
    becomes exactly one line. Use as a context manager so the file is flushed
    and closed even when the run aborts.
    """

    def __init__(self, stream):
        self.stream = stream
        self.records_written = 0
        self.stream.write(",".join(MASTER_HEADER) + "\n")

    @classmethod
    def open(cls, path) -> "MasterRecordWriter":
        return cls(open(path, "w", encoding="utf-8", newline=""))

    def write(self, record) -> None:
        # Format first so a failure never leaves half a line behind
        line = format_record(record) + "\n"
        self.stream.write(line)
        self.records_written += 1

    def write_all(self, records: Iterable) -> int:
        for record in records:
            self.write(record)
        return self.records_written

    def close(self) -> None:
        self.stream.flush()
        self.stream.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def write_master_csv(records: Iterable, path) -> int:
    """
    Write merged records to a master CSV file.

    Args:
        records: Iterable of MergedRecord (consumed lazily)
        path: Output file path

    Returns:
        Number of records written
    """
    with MasterRecordWriter.open(path) as writer:
        return writer.write_all(records)


def print_summary_statistics(
    population_entries: int,
    forecast_files: List[str],
    merge_stats: Dict[str, int],
    output_file: Optional[str] = None,
) -> None:
    """Print summary statistics for a completed merge."""

    print("\n=== Summary Statistics ===")
    print(f"Population grid cells: {population_entries}")
    print(f"Forecast files merged: {len(forecast_files)}")

    total = merge_stats.get("total_count", 0)
    matched = merge_stats.get("match_count", 0)
    malformed = merge_stats.get("malformed_count", 0)
    coverage = (matched / total * 100) if total > 0 else 0.0
    print(f"Matched {matched} out of {total} locations ({coverage:.1f}%)")
    if malformed:
        print(f"  of which {malformed} rows were malformed and dropped")

    if output_file:
        print(f"Output saved to {output_file}")


def print_sample_data(path, n: int = 5) -> None:
    """Print the first rows of a master CSV."""

    print("\n=== Sample Data ===")
    try:
        print(pl.read_csv(path, n_rows=n))
    except UnicodeEncodeError:
        # Handle Unicode encoding issues on Windows
        print("Sample data cannot be displayed in this terminal.")
    except pl.exceptions.NoDataError:
        print("Output file is empty.")
