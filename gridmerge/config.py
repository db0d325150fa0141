"""
Configuration for the gridmerge pipeline.

Paths can be overridden through environment variables (or a .env file);
everything else is a fixed property of the input and output formats.
"""

import os
from datetime import datetime

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Input / output locations
POPULATION_FILE = os.getenv("GRIDMERGE_POPULATION_FILE", "population_2020.csv")
DATA_ROOT = os.getenv("GRIDMERGE_DATA_ROOT", ".")  # Holds one MM-DD-YYYY folder per run
OUTPUT_DIR = os.getenv("GRIDMERGE_OUTPUT_DIR", ".")

# Join configuration
ROUND_DECIMALS = 2  # 0.01 degree fuzzy-match cell
FLOAT_PRECISION = 6  # Digits after the decimal point in output files
DATE_FORMAT = "%m-%d-%Y"

# File layouts
POPULATION_COLUMNS = ["longitude", "latitude", "population"]
FORECAST_COLUMNS = [
    "timestamp",
    "latitude",
    "longitude",
    "temperature",
    "temperature_stddev",
]
MASTER_HEADER = [
    "forecast_time",
    "latitude",
    "longitude",
    "population",
    "temp_2m",
    "temp_2m_stddev",
]
POPULATION_COLUMN_INDEX = 3  # Position of population in master files

# Contiguous US bounding box (degrees, +/-180 longitude)
US_LAT_RANGE = (24.25, 49.25)
US_LON_RANGE = (-125.00, -67.00)


def today_date() -> str:
    """Return the local date formatted as MM-DD-YYYY."""
    return datetime.now().strftime(DATE_FORMAT)


def master_filename(date: str) -> str:
    """Name of the master output file for a run date."""
    return f"master_{date}.csv"
