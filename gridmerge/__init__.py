"""
gridmerge - daily forecast x population master dataset.

Joins weather-forecast grid points with a fixed population grid on rounded
latitude/longitude and writes one master CSV per run date.
"""

from .errors import GridMergeError, MalformedRow, MissingInputDirectory, MissingInputFile
from .forecasts import date_prefix, select_forecast_files
from .merging import (
    Convention,
    CoordinateKey,
    JoinStats,
    MergedRecord,
    join_forecasts,
    merge_forecast_population,
    normalize,
)
from .population import PopulationIndex, build_population_index

__all__ = [
    "Convention",
    "CoordinateKey",
    "GridMergeError",
    "JoinStats",
    "MalformedRow",
    "MergedRecord",
    "MissingInputDirectory",
    "MissingInputFile",
    "PopulationIndex",
    "build_population_index",
    "date_prefix",
    "join_forecasts",
    "merge_forecast_population",
    "normalize",
    "select_forecast_files",
]
