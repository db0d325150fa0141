"""
Population grid index.

Loads the population-by-location CSV once per run into an immutable mapping
from rounded coordinate key to population value.
"""

from types import MappingProxyType
from typing import Dict, Mapping, Optional

import polars as pl

from ..config import POPULATION_COLUMNS
from ..merging.coordinates import (
    Convention,
    CoordinateKey,
    finite_mask,
    normalize_frame,
)
from ..utils.data_utils import cast_numeric_columns, read_csv_columns


class PopulationIndex:
    """
    Read-only lookup table of population by CoordinateKey.

    Built with PopulationIndex.build(); never mutated afterwards.
    """

    def __init__(
        self,
        entries: Mapping[CoordinateKey, float],
        source_rows: int = 0,
        collisions: int = 0,
        wrapped_rows: int = 0,
        malformed_rows: int = 0,
    ):
        self._entries = MappingProxyType(dict(entries))
        self.source_rows = source_rows
        self.collisions = collisions
        self.wrapped_rows = wrapped_rows
        self.malformed_rows = malformed_rows

    @classmethod
    def build(cls, source, verbose: bool = True) -> "PopulationIndex":
        """
        Build the index from a population CSV.

        The file has a header row followed by longitude,latitude,population
        rows with longitude in 0-360 degrees. Coordinates are rounded to the
        join precision; when two rows round to the same key the later row
        wins and the overwrite is counted in ``collisions``.

        Args:
            source: Path to the population CSV
            verbose: Whether to print load progress

        Returns:
            PopulationIndex

        Raises:
            MissingInputFile: If the file cannot be read
        """
        if verbose:
            print("Reading population data...")

        raw = read_csv_columns(source, POPULATION_COLUMNS, what="population file")
        index = cls.from_frame(cast_numeric_columns(raw, POPULATION_COLUMNS))

        if verbose:
            for key, population in list(index.items())[:5]:
                print(
                    f"   Population entry: lat={key.latitude}, lon={key.longitude}, pop={population}"
                )
            print(f"   Total population entries: {len(index)}")
            if index.malformed_rows:
                print(
                    f"[WARNING] Skipped {index.malformed_rows} malformed population rows"
                )
            if index.wrapped_rows:
                print(
                    f"[WARNING] {index.wrapped_rows} population rows had negative longitudes; shifted into 0-360"
                )
            if index.collisions:
                print(
                    f"[WARNING] {index.collisions} population rows rounded onto an existing key (last value kept)"
                )

        return index

    @classmethod
    def from_frame(cls, df: pl.DataFrame) -> "PopulationIndex":
        """Build the index from a numeric longitude/latitude/population frame."""
        source_rows = len(df)

        valid = finite_mask(df, POPULATION_COLUMNS)
        df = df.filter(pl.Series(valid))
        malformed_rows = source_rows - len(df)

        # The grid is 0-360; a negative longitude can only come from a +/-180
        # export, so bring it onto the grid before rounding
        wrapped_rows = df.filter(pl.col("longitude") < 0).height
        if wrapped_rows:
            df = df.with_columns(
                pl.when(pl.col("longitude") < 0)
                .then(pl.col("longitude") + 360.0)
                .otherwise(pl.col("longitude"))
                .alias("longitude")
            )
        df = normalize_frame(df, Convention.POPULATION)

        # Last write wins on rounded-key collisions
        deduped = df.unique(
            subset=["latitude", "longitude"], keep="last", maintain_order=True
        )
        collisions = len(df) - len(deduped)

        entries: Dict[CoordinateKey, float] = {
            CoordinateKey(lat, lon): pop
            for lat, lon, pop in deduped.select(
                ["latitude", "longitude", "population"]
            ).iter_rows()
        }

        return cls(
            entries,
            source_rows=source_rows,
            collisions=collisions,
            wrapped_rows=wrapped_rows,
            malformed_rows=malformed_rows,
        )

    def lookup(self, key: CoordinateKey) -> Optional[float]:
        """Return the population for a key, or None when the cell is absent."""
        return self._entries.get(key)

    def items(self):
        return self._entries.items()

    @property
    def entries(self) -> Mapping[CoordinateKey, float]:
        return self._entries

    def __contains__(self, key) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"PopulationIndex({len(self)} cells, {self.collisions} collisions)"


def build_population_index(source, verbose: bool = True) -> PopulationIndex:
    """Load a population CSV into a PopulationIndex."""
    return PopulationIndex.build(source, verbose=verbose)
