import pytest


def write_csv(path, header, rows):
    lines = [header] + [",".join(str(v) for v in row) for row in rows]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def population_csv(tmp_path):
    def _make(rows, name="population.csv"):
        return write_csv(tmp_path / name, "longitude,latitude,population", rows)

    return _make


@pytest.fixture
def forecast_dir(tmp_path):
    """Create a MM-DD-YYYY folder and return a helper that adds forecast files."""

    def _make(date, files):
        folder = tmp_path / date
        folder.mkdir(exist_ok=True)
        for name, rows in files.items():
            write_csv(
                folder / name,
                "timestamp,latitude,longitude,temperature,temperature_stddev",
                rows,
            )
        return folder

    return _make
