"""
Coordinate merging for the forecast/population join.

Handles longitude convention reconciliation and rounded-key matching between
forecast grid points and population grid cells.
"""

from .coordinates import Convention, CoordinateKey, normalize, normalize_frame
from .coordinate_merger import (
    FileStats,
    JoinStats,
    MergedRecord,
    join_forecasts,
    merge_forecast_population,
)

__all__ = [
    'Convention',
    'CoordinateKey',
    'FileStats',
    'JoinStats',
    'MergedRecord',
    'join_forecasts',
    'merge_forecast_population',
    'normalize',
    'normalize_frame',
]
