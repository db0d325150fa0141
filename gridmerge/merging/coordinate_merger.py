"""
Coordinate-based merging of forecast grid points with the population grid.

Forecast rows are normalized onto the population grid's rounded 0-360 degree
coordinates and probed against the PopulationIndex. Matching rows become
MergedRecords; everything else is dropped and counted.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import (
    TYPE_CHECKING,
    Dict,
    Iterable,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Tuple,
)

import polars as pl

from ..config import FORECAST_COLUMNS
from ..utils.data_utils import cast_numeric_columns, read_csv_columns
from .coordinates import Convention, CoordinateKey, finite_mask, normalize_frame

if TYPE_CHECKING:
    from ..population.population_index import PopulationIndex

NUMERIC_COLUMNS = FORECAST_COLUMNS[1:]
INVALID_TEXT = "\ufffd"  # Replacement character left by lossy UTF-8 decoding


class MergedRecord(NamedTuple):
    """A forecast row enriched with the population of its grid cell."""

    timestamp: str
    latitude: float
    longitude: float
    population: float
    temperature: float
    temperature_stddev: float


@dataclass
class FileStats:
    """Row counts for a single forecast file."""

    total_count: int = 0
    match_count: int = 0
    malformed_count: int = 0


@dataclass
class JoinStats:
    """
    Counters accumulated over a join.

    ``total_count`` includes malformed rows, so ``unmatched_count`` covers
    both rows that failed to parse and rows with no population cell.
    ``malformed_count`` breaks out the parse failures.
    """

    total_count: int = 0
    match_count: int = 0
    malformed_count: int = 0
    per_file: Dict[str, FileStats] = field(default_factory=dict)

    @property
    def unmatched_count(self) -> int:
        return self.total_count - self.match_count

    def add(self, name: str, file_stats: FileStats) -> None:
        """Merge one file's partial counts into the run totals."""
        self.per_file[name] = file_stats
        self.total_count += file_stats.total_count
        self.match_count += file_stats.match_count
        self.malformed_count += file_stats.malformed_count

    def as_dict(self) -> Dict[str, int]:
        return {
            "files": len(self.per_file),
            "total_count": self.total_count,
            "match_count": self.match_count,
            "unmatched_count": self.unmatched_count,
            "malformed_count": self.malformed_count,
        }


def load_forecast_file(path) -> Tuple[pl.DataFrame, int]:
    """
    Read one forecast CSV and normalize its coordinates.

    Args:
        path: Forecast CSV (header + timestamp,latitude,longitude,
            temperature,temperature_stddev rows)

    Returns:
        Tuple of (normalized frame of well-formed rows, number of data rows read)

    Raises:
        MissingInputFile: If the file cannot be read
    """
    raw = read_csv_columns(path, FORECAST_COLUMNS, what="forecast file")
    row_count = len(raw)

    df = cast_numeric_columns(raw, NUMERIC_COLUMNS)
    # An empty timestamp is passed through; one with undecodable bytes is not
    timestamp_ok = df["timestamp"].is_not_null() & ~df["timestamp"].str.contains(
        INVALID_TEXT, literal=True
    )
    valid = finite_mask(df, NUMERIC_COLUMNS) & timestamp_ok.fill_null(False).to_numpy()
    df = df.filter(pl.Series(valid))

    return normalize_frame(df, Convention.FORECAST), row_count


def _join_file(
    path, index: "PopulationIndex", file_stats: FileStats
) -> Iterator[MergedRecord]:
    df, row_count = load_forecast_file(path)
    file_stats.total_count = row_count
    file_stats.malformed_count = row_count - len(df)

    for timestamp, lat, lon, temp, temp_stddev in df.select(
        FORECAST_COLUMNS
    ).iter_rows():
        key = CoordinateKey(lat, lon)
        population = index.lookup(key)
        if population is None:
            continue
        file_stats.match_count += 1
        yield MergedRecord(
            timestamp, key.latitude, key.longitude, population, temp, temp_stddev
        )


def join_forecasts(
    forecast_files: Iterable,
    index: "PopulationIndex",
    stats: Optional[JoinStats] = None,
    verbose: bool = False,
) -> Iterator[MergedRecord]:
    """
    Lazily join forecast files against the population index.

    Files are processed one at a time in the order given. Each file's
    counts are merged into ``stats`` once the file has been fully consumed.

    Args:
        forecast_files: Paths of forecast CSVs to merge
        index: Population index built for this run
        stats: Accumulator for match/total counters (updated in place)
        verbose: Whether to print per-file progress

    Yields:
        MergedRecord for every forecast row whose rounded coordinate has a
        population cell
    """
    if stats is None:
        stats = JoinStats()

    for path in forecast_files:
        name = Path(path).name
        file_stats = FileStats()
        yield from _join_file(path, index, file_stats)
        stats.add(name, file_stats)

        if verbose:
            print(
                f"   {name}: {file_stats.match_count}/{file_stats.total_count} rows matched"
            )
            if file_stats.malformed_count:
                print(
                    f"[WARNING] {name}: dropped {file_stats.malformed_count} malformed rows"
                )


def merge_forecast_population(
    forecast_files: Iterable,
    index: "PopulationIndex",
    verbose: bool = False,
) -> Tuple[List[MergedRecord], JoinStats]:
    """
    Join forecast files against the population index and collect the result.

    Args:
        forecast_files: Paths of forecast CSVs to merge
        index: Population index built for this run
        verbose: Whether to print per-file progress

    Returns:
        Tuple of (merged_records, statistics)
    """
    stats = JoinStats()
    records = list(join_forecasts(forecast_files, index, stats, verbose=verbose))
    return records, stats
