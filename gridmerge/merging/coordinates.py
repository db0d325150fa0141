"""
Coordinate normalization for the forecast/population join.

Both datasets are keyed on latitude/longitude rounded to 0.01 degrees. The
population grid stores longitude in 0-360 degrees while forecasts use +/-180,
so forecast longitudes are shifted before rounding.
"""

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np
import polars as pl

from ..config import ROUND_DECIMALS
from ..errors import MalformedRow

_SCALE = 10.0**ROUND_DECIMALS


class Convention(Enum):
    """Longitude convention of a source dataset."""

    POPULATION = "0-360"
    FORECAST = "+/-180"


@dataclass(frozen=True)
class CoordinateKey:
    """
    Latitude/longitude pair already rounded to the join precision.

    Both axes are snapped to the nearest whole number of hundredths and
    stored as ``hundredths / 100``, so keys built from scalars, from polars
    frames, or from a float that drifted in its last bit compare and hash
    the same.
    """

    latitude: float
    longitude: float

    def __post_init__(self):
        object.__setattr__(self, "latitude", _snap(self.latitude))
        object.__setattr__(self, "longitude", _snap(self.longitude))


def _snap(value: float) -> float:
    value = float(value)
    if not math.isfinite(value):
        return value
    return round(value * _SCALE) / _SCALE + 0.0


def round_half_away(value: float) -> float:
    """Round to ROUND_DECIMALS places, halves away from zero."""
    # + 0.0 folds -0.0 into 0.0
    return math.copysign(math.floor(abs(value * _SCALE) + 0.5), value) / _SCALE + 0.0


def normalize(lat: float, lon: float, convention: Convention) -> CoordinateKey:
    """
    Convert a raw coordinate into its canonical join key.

    Args:
        lat: Raw latitude in degrees
        lon: Raw longitude in degrees, in the given convention
        convention: Longitude convention the value arrives in

    Returns:
        CoordinateKey with both axes rounded to the join precision

    Raises:
        MalformedRow: If either value is NaN or infinite
    """
    lat = float(lat)
    lon = float(lon)
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise MalformedRow(reason=f"non-finite coordinate ({lat}, {lon})")

    if convention is Convention.FORECAST and lon < 0:
        lon += 360.0

    return CoordinateKey(round_half_away(lat), round_half_away(lon))


def _hundredths_expr(col: pl.Expr) -> pl.Expr:
    # Same rule as round_half_away, as whole hundredths of a degree
    return (
        pl.when(col < 0)
        .then(-((-col * _SCALE) + 0.5).floor())
        .otherwise(((col * _SCALE) + 0.5).floor())
        .cast(pl.Int64)
    )


def normalize_frame(
    df: pl.DataFrame,
    convention: Convention,
    lat_col: str = "latitude",
    lon_col: str = "longitude",
) -> pl.DataFrame:
    """
    Vectorised normalize() over the coordinate columns of a DataFrame.

    Rows must already have finite coordinates; callers filter the rest.
    """
    lon = pl.col(lon_col)
    if convention is Convention.FORECAST:
        lon = pl.when(lon < 0).then(lon + 360.0).otherwise(lon)

    hundredths = df.select(
        _hundredths_expr(pl.col(lat_col)).alias(lat_col),
        _hundredths_expr(lon).alias(lon_col),
    )

    # numpy divides exactly, matching the scalar path bit for bit; polars
    # may multiply by the reciprocal instead
    return df.with_columns(
        pl.Series(lat_col, hundredths[lat_col].to_numpy() / _SCALE, dtype=pl.Float64),
        pl.Series(lon_col, hundredths[lon_col].to_numpy() / _SCALE, dtype=pl.Float64),
    )


def finite_mask(df: pl.DataFrame, columns) -> np.ndarray:
    """Boolean mask of rows whose given columns are all present and finite."""
    if df.is_empty():
        return np.zeros(0, dtype=bool)
    values = df.select(columns).to_numpy().astype(np.float64)
    return np.isfinite(values).all(axis=1)
