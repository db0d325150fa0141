"""
Validation helpers for master dataset output.

Contains utilities for validating output files and data integrity.
"""

from .data_validator import validate_output_file, validate_and_report

__all__ = ['validate_output_file', 'validate_and_report']
