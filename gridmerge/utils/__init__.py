"""
Utility functions for the master dataset pipeline.

CSV loading, record serialization and summary printouts.
"""

from .data_utils import (
    MasterRecordWriter,
    cast_numeric_columns,
    format_float,
    format_record,
    print_sample_data,
    print_summary_statistics,
    read_csv_columns,
    write_master_csv,
)

__all__ = [
    'MasterRecordWriter',
    'cast_numeric_columns',
    'format_float',
    'format_record',
    'print_sample_data',
    'print_summary_statistics',
    'read_csv_columns',
    'write_master_csv',
]
