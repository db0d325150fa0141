"""
Population grid loading.

Builds the rounded-coordinate lookup table that forecast rows are joined
against.
"""

from .population_index import PopulationIndex, build_population_index

__all__ = ['PopulationIndex', 'build_population_index']
