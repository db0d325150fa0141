"""
Row filters applied before or after the merge.

Population-threshold and US bounding-box filters over CSV files.
"""

from .population_filter import filter_nonzero_population, prefixed_output_path
from .us_bounds import in_us_bounds, keep_us

__all__ = [
    'filter_nonzero_population',
    'in_us_bounds',
    'keep_us',
    'prefixed_output_path',
]
