"""
Forecast input discovery.

Locates the forecast CSV exports that belong to a run date.
"""

from .file_selector import date_prefix, forecast_directory, select_forecast_files

__all__ = ['date_prefix', 'forecast_directory', 'select_forecast_files']
