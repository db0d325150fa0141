import pytest

from gridmerge.errors import MissingInputFile
from gridmerge.merging import (
    Convention,
    JoinStats,
    MergedRecord,
    join_forecasts,
    merge_forecast_population,
    normalize,
)
from gridmerge.population import PopulationIndex


@pytest.fixture
def index(population_csv):
    return PopulationIndex.build(
        population_csv([(237.67, 37.62, 850000), (286.0, 40.71, 27000)]),
        verbose=False,
    )


def test_matching_row_is_enriched_with_population(forecast_dir, index):
    folder = forecast_dir(
        "01-15-2024",
        {"01_15_2024_x.csv": [("2024-01-15T00:00", 37.62, -122.33, 12.5, 0.3)]},
    )
    records, stats = merge_forecast_population(
        [folder / "01_15_2024_x.csv"], index
    )

    assert records == [
        MergedRecord("2024-01-15T00:00", 37.62, 237.67, 850000.0, 12.5, 0.3)
    ]
    assert stats.match_count == 1
    assert stats.total_count == 1


def test_output_carries_rounded_coordinates_and_raw_timestamp(forecast_dir, index):
    folder = forecast_dir(
        "01-15-2024",
        {"01_15_2024_x.csv": [("2024-01-15 06:00:00 UTC", 37.6213, -122.3321, 1.0, 2.0)]},
    )
    records, _ = merge_forecast_population([folder / "01_15_2024_x.csv"], index)

    (record,) = records
    assert record.timestamp == "2024-01-15 06:00:00 UTC"
    assert (record.latitude, record.longitude) == (37.62, 237.67)


def test_unmatched_row_is_dropped_but_counted(forecast_dir, index):
    folder = forecast_dir(
        "01-15-2024",
        {"01_15_2024_x.csv": [("2024-01-15T00:00", 10.0, 10.0, 1.0, 0.1)]},
    )
    records, stats = merge_forecast_population([folder / "01_15_2024_x.csv"], index)

    assert records == []
    assert stats.match_count == 0
    assert stats.total_count == 1
    assert stats.unmatched_count == 1
    assert stats.malformed_count == 0


def test_malformed_rows_count_as_unmatched(forecast_dir, index):
    folder = forecast_dir(
        "01-15-2024",
        {
            "01_15_2024_x.csv": [
                ("2024-01-15T00:00", "abc", -122.33, 12.5, 0.3),
                ("2024-01-15T01:00", 37.62, -122.33, "warm", 0.3),
                ("2024-01-15T02:00", 37.62, -122.33, 13.0, 0.4),
            ]
        },
    )
    records, stats = merge_forecast_population([folder / "01_15_2024_x.csv"], index)

    assert [r.timestamp for r in records] == ["2024-01-15T02:00"]
    assert stats.total_count == 3
    assert stats.match_count == 1
    assert stats.malformed_count == 2
    assert stats.unmatched_count == 2


def test_counts_span_all_files(forecast_dir, index):
    folder = forecast_dir(
        "01-15-2024",
        {
            "01_15_2024_a.csv": [
                ("t0", 37.62, -122.33, 1.0, 0.1),
                ("t0", 0.0, 0.0, 1.0, 0.1),
            ],
            "01_15_2024_b.csv": [
                ("t1", 40.71, -74.0, 2.0, 0.2),
                ("t1", 37.62, -122.33, 3.0, 0.3),
                ("t1", 1.0, 1.0, 3.0, 0.3),
            ],
        },
    )
    files = sorted(folder.iterdir())
    stats = JoinStats()
    records = list(join_forecasts(files, index, stats))

    assert len(records) == 3
    assert stats.total_count == 5
    assert stats.match_count == 3
    assert stats.match_count <= stats.total_count
    assert stats.per_file["01_15_2024_a.csv"].total_count == 2
    assert stats.per_file["01_15_2024_b.csv"].match_count == 2
    assert {r.population for r in records} == {850000.0, 27000.0}


def test_join_is_lazy(forecast_dir, index):
    folder = forecast_dir(
        "01-15-2024",
        {"01_15_2024_x.csv": [("t0", 37.62, -122.33, 1.0, 0.1)]},
    )
    stats = JoinStats()
    records = join_forecasts([folder / "01_15_2024_x.csv"], index, stats)

    assert stats.total_count == 0
    list(records)
    assert stats.total_count == 1


def test_no_files_produces_no_records(index):
    records, stats = merge_forecast_population([], index)
    assert records == []
    assert stats.as_dict()["total_count"] == 0
    assert stats.match_count == 0


def test_missing_forecast_file_is_fatal(tmp_path, index):
    with pytest.raises(MissingInputFile):
        merge_forecast_population([tmp_path / "01_15_2024_gone.csv"], index)


@pytest.mark.parametrize("grid_rows", [1, 2, 50])
@pytest.mark.parametrize("forecast_rows", [1, 2, 50])
def test_match_does_not_depend_on_file_sizes(
    population_csv, forecast_dir, grid_rows, forecast_rows
):
    grid = [(237.67, 37.62, 850000)] + [
        (100.0 + i, 10.0 + i * 0.01, i) for i in range(grid_rows - 1)
    ]
    index = PopulationIndex.build(population_csv(grid), verbose=False)

    rows = [("t0", 37.62, -122.33, 12.5, 0.3)] + [
        ("t0", -50.0, 1.0 + i * 0.01, 1.0, 0.1) for i in range(forecast_rows - 1)
    ]
    folder = forecast_dir("01-15-2024", {"01_15_2024_x.csv": rows})
    records, stats = merge_forecast_population([folder / "01_15_2024_x.csv"], index)

    assert stats.match_count == 1
    assert stats.total_count == forecast_rows
    assert records[0].population == 850000.0
    assert (records[0].latitude, records[0].longitude) == (37.62, 237.67)


def test_scalar_key_finds_cells_of_a_large_index(population_csv):
    grid = [(237.67, 37.62, 850000), (286.0, 40.71, 27000), (1.0, 1.0, 3)]
    index = PopulationIndex.build(population_csv(grid), verbose=False)

    assert index.lookup(normalize(37.62, -122.33, Convention.FORECAST)) == 850000.0
    assert index.lookup(normalize(40.71, -74.0, Convention.FORECAST)) == 27000.0


def test_undecodable_row_is_counted_as_malformed(forecast_dir, index):
    folder = forecast_dir("01-15-2024", {})
    path = folder / "01_15_2024_x.csv"
    path.write_bytes(
        b"timestamp,latitude,longitude,temperature,temperature_stddev\n"
        b"\xff\xfe-bad,37.62,-122.33,12.5,0.3\n"
        b"2024-01-15T00:00,37.62,-122.33,12.5,0.3\n"
    )
    records, stats = merge_forecast_population([path], index)

    assert [r.timestamp for r in records] == ["2024-01-15T00:00"]
    assert stats.total_count == 2
    assert stats.malformed_count == 1


def test_empty_timestamp_is_passed_through(forecast_dir, index):
    folder = forecast_dir("01-15-2024", {"01_15_2024_x.csv": [("", 37.62, -122.33, 12.5, 0.3)]})
    records, stats = merge_forecast_population([folder / "01_15_2024_x.csv"], index)

    assert [r.timestamp for r in records] == [""]
    assert stats.malformed_count == 0
