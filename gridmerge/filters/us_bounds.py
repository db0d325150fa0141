"""
US bounding-box filter.

Keeps the rows of a CSV whose rounded coordinates fall inside the contiguous
United States. Works on +/-180 forecast-style files and on 0-360 master files.
"""

import math
import os
from typing import Dict, Optional

import polars as pl

from ..config import US_LAT_RANGE, US_LON_RANGE
from ..merging.coordinates import round_half_away
from .population_filter import read_string_table, prefixed_output_path


def in_us_bounds(lat: float, lon: float) -> bool:
    """
    Check whether a coordinate lies in the contiguous US box.

    Longitudes above 180 are read as 0-360 values and mapped back to +/-180.
    """
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    if lon > 180.0:
        lon -= 360.0
    lat = round_half_away(lat)
    lon = round_half_away(lon)
    return (US_LAT_RANGE[0] <= lat <= US_LAT_RANGE[1]) and (
        US_LON_RANGE[0] <= lon <= US_LON_RANGE[1]
    )


def keep_us(
    input_path,
    output_path: Optional[str] = None,
    lat_col: str = "latitude",
    lon_col: str = "longitude",
    verbose: bool = True,
) -> Dict[str, int]:
    """
    Write the rows of a CSV that fall inside the US bounding box.

    Args:
        input_path: CSV with latitude and longitude columns
        output_path: Destination; defaults to us_<name> beside the input
        lat_col: Name of the latitude column
        lon_col: Name of the longitude column
        verbose: Whether to print a summary line

    Returns:
        Dictionary with total and kept row counts

    Raises:
        MissingInputFile: If the input cannot be read
        ValueError: If the coordinate columns are missing
    """
    input_path = os.fspath(input_path)
    if output_path is None:
        output_path = prefixed_output_path(input_path, "us_")

    df = read_string_table(input_path, "master file")
    missing = [col for col in (lat_col, lon_col) if col not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    lats = df[lat_col].str.strip_chars().cast(pl.Float64, strict=False).to_list()
    lons = df[lon_col].str.strip_chars().cast(pl.Float64, strict=False).to_list()
    mask = [
        lat is not None and lon is not None and in_us_bounds(lat, lon)
        for lat, lon in zip(lats, lons)
    ]

    kept = df.filter(pl.Series(mask, dtype=pl.Boolean))
    kept.write_csv(output_path)

    stats = {"total_count": len(df), "kept_count": len(kept)}

    if verbose:
        print(f"Output saved to {output_path}")
        print(f"Kept {stats['kept_count']} out of {stats['total_count']} locations")

    return stats
