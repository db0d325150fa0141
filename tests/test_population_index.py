import pytest

from gridmerge.errors import MissingInputFile
from gridmerge.merging.coordinates import CoordinateKey
from gridmerge.population import PopulationIndex, build_population_index


def test_build_swaps_file_order_into_lat_lon_keys(population_csv):
    path = population_csv([(237.67, 37.62, 850000), (10.5, -5.25, 12)])
    index = PopulationIndex.build(path, verbose=False)

    assert len(index) == 2
    assert index.lookup(CoordinateKey(37.62, 237.67)) == 850000.0
    assert index.lookup(CoordinateKey(-5.25, 10.5)) == 12.0


def test_lookup_miss_returns_none(population_csv):
    index = PopulationIndex.build(population_csv([(237.67, 37.62, 1)]), verbose=False)
    assert index.lookup(CoordinateKey(37.63, 237.67)) is None
    assert CoordinateKey(37.63, 237.67) not in index


def test_coordinates_are_rounded_on_load(population_csv):
    index = PopulationIndex.build(
        population_csv([(237.6712, 37.6188, 42)]), verbose=False
    )
    assert index.lookup(CoordinateKey(37.62, 237.67)) == 42.0


def test_colliding_keys_keep_last_value(population_csv):
    path = population_csv([(237.671, 37.621, 100), (237.669, 37.619, 200)])
    index = PopulationIndex.build(path, verbose=False)

    assert len(index) == 1
    assert index.lookup(CoordinateKey(37.62, 237.67)) == 200.0
    assert index.collisions == 1


def test_collision_is_reported(population_csv, capsys):
    path = population_csv([(237.671, 37.621, 100), (237.669, 37.619, 200)])
    PopulationIndex.build(path, verbose=True)
    assert "last value kept" in capsys.readouterr().out


def test_negative_longitude_rows_are_shifted_onto_grid(population_csv):
    index = PopulationIndex.build(
        population_csv([(-122.33, 37.62, 850000)]), verbose=False
    )
    assert index.lookup(CoordinateKey(37.62, 237.67)) == 850000.0
    assert index.wrapped_rows == 1


def test_malformed_rows_are_skipped(population_csv):
    path = population_csv(
        [(237.67, 37.62, 5), ("abc", 37.63, 7), (237.69, "nan", 9), (1.0, 2.0, "x")]
    )
    index = PopulationIndex.build(path, verbose=False)

    assert len(index) == 1
    assert index.malformed_rows == 3
    assert index.source_rows == 4


def test_header_only_file_builds_empty_index(population_csv):
    index = PopulationIndex.build(population_csv([]), verbose=False)
    assert len(index) == 0


def test_missing_file_is_fatal(tmp_path):
    with pytest.raises(MissingInputFile) as excinfo:
        build_population_index(tmp_path / "nope.csv", verbose=False)
    assert isinstance(excinfo.value, FileNotFoundError)


def test_index_is_read_only(population_csv):
    index = PopulationIndex.build(population_csv([(1.0, 2.0, 3)]), verbose=False)
    with pytest.raises(TypeError):
        index.entries[CoordinateKey(0.0, 0.0)] = 1.0
