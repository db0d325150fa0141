"""
Data validation utilities for master dataset output.

Checks a merged forecast/population CSV for existence, layout and value
ranges before it is handed downstream.
"""

import os
import time
from typing import Any, Dict, List, Optional

import polars as pl

from ..config import MASTER_HEADER


def validate_output_file(
    file_path: str,
    max_age_minutes: Optional[int] = None,
    required_columns: Optional[List[str]] = None,
    min_records: int = 0,
) -> Dict[str, Any]:
    """
    Validate a master CSV output file.

    Args:
        file_path: Path to the output file to validate
        max_age_minutes: Maximum age of file in minutes to be considered
            fresh. None skips the freshness check.
        required_columns: List of required column names. If None, uses the
            master header.
        min_records: Minimum number of records required

    Returns:
        Dictionary containing validation results and statistics
    """
    if required_columns is None:
        required_columns = list(MASTER_HEADER)

    validation_result = {
        "file_exists": False,
        "file_size_mb": 0,
        "file_age_minutes": float("inf"),
        "is_fresh": False,
        "record_count": 0,
        "column_count": 0,
        "missing_columns": [],
        "has_null_coordinates": False,
        "out_of_range_coordinates": 0,
        "negative_population": 0,
        "duplicate_count": 0,
        "population_total": 0.0,
        "data_types_valid": True,
        "errors": [],
        "warnings": [],
        "is_valid": False,
    }

    # Step 1: Check file existence
    if not os.path.exists(file_path):
        validation_result["errors"].append(f"File does not exist: {file_path}")
        print(f"[ERROR] File does not exist: {file_path}")
        return validation_result

    validation_result["file_exists"] = True

    # Step 2: Check file age
    file_stat = os.stat(file_path)
    file_age_minutes = (time.time() - file_stat.st_mtime) / 60
    validation_result["file_age_minutes"] = file_age_minutes

    if max_age_minutes is None or file_age_minutes <= max_age_minutes:
        validation_result["is_fresh"] = True
    else:
        validation_result["warnings"].append(
            f"File is {file_age_minutes:.1f} minutes old (>{max_age_minutes} minutes)"
        )
        print(f"[WARNING] File is older than {max_age_minutes} minutes")

    # Step 3: Check file size
    validation_result["file_size_mb"] = file_stat.st_size / (1024 * 1024)

    if file_stat.st_size == 0:
        validation_result["errors"].append("File is empty (0 bytes)")
        print("[ERROR] File is empty")
        return validation_result

    # Step 4: Try to read the file
    try:
        df = pl.read_csv(file_path)
    except Exception as e:
        validation_result["errors"].append(f"Failed to read file: {str(e)}")
        print(f"[ERROR] Failed to read file: {e}")
        return validation_result

    # Step 5: Basic dataframe validation
    validation_result["record_count"] = len(df)
    validation_result["column_count"] = len(df.columns)

    if len(df) < min_records:
        validation_result["errors"].append(
            f"Insufficient records: {len(df)} (minimum required: {min_records})"
        )
        print(f"[ERROR] Insufficient records: {len(df)} < {min_records}")

    # Step 6: Check for required columns
    missing_columns = [col for col in required_columns if col not in df.columns]
    validation_result["missing_columns"] = missing_columns

    if missing_columns:
        validation_result["errors"].append(
            f"Missing required columns: {missing_columns}"
        )
        print(f"[ERROR] Missing required columns: {missing_columns}")

    # Step 7: Validate data types and ranges for numeric columns
    data_type_issues = []
    ranges = {
        "latitude": (-90, 90),
        "longitude": (0, 360),
    }

    for col in MASTER_HEADER[1:]:
        if col not in df.columns or df.is_empty():
            continue
        if not df[col].dtype.is_numeric():
            data_type_issues.append(f"{col} column is not numeric")
            print(f"[ERROR] {col} column is not numeric")
            continue

        null_count = df[col].null_count()
        if null_count > 0:
            if col in ranges:
                validation_result["has_null_coordinates"] = True
            validation_result["warnings"].append(
                f"Found {null_count} null values in {col} column"
            )
            print(f"[WARNING] Found {null_count} null {col} values")

        if col in ranges:
            low, high = ranges[col]
            invalid_count = (~df[col].drop_nulls().is_between(low, high)).sum()
            validation_result["out_of_range_coordinates"] += int(invalid_count)
            if invalid_count > 0:
                validation_result["warnings"].append(
                    f"Found {invalid_count} {col} values outside valid range [{low}, {high}]"
                )
                print(f"[WARNING] Found {invalid_count} invalid {col} values")

    if "population" in df.columns and df["population"].dtype.is_numeric():
        validation_result["population_total"] = float(df["population"].sum() or 0.0)
        negative_count = (df["population"].drop_nulls() < 0).sum()
        validation_result["negative_population"] = int(negative_count)
        if negative_count > 0:
            validation_result["warnings"].append(
                f"Found {negative_count} negative population values"
            )
            print(f"[WARNING] Found {negative_count} negative population values")

    if data_type_issues:
        validation_result["data_types_valid"] = False
        validation_result["errors"].extend(data_type_issues)

    # Step 8: Check for duplicate records
    key_columns = ["forecast_time", "latitude", "longitude"]
    if all(col in df.columns for col in key_columns):
        duplicate_count = len(df) - len(df.unique(subset=key_columns))
        validation_result["duplicate_count"] = duplicate_count
        if duplicate_count > 0:
            validation_result["warnings"].append(
                f"Found {duplicate_count} potential duplicate records"
            )
            print(f"[WARNING] Found {duplicate_count} duplicate records")

    # Step 9: Final validation status
    validation_result["is_valid"] = len(validation_result["errors"]) == 0

    return validation_result


def print_validation_report(validation_result: Dict[str, Any]) -> None:
    """Print a formatted validation report."""

    print("\n" + "=" * 50)
    print("VALIDATION REPORT")
    print("=" * 50)

    print("[FILE] File Status:")
    print(f"   Exists: {'OK' if validation_result['file_exists'] else 'FAIL'}")
    print(f"   Size: {validation_result['file_size_mb']:.2f} MB")
    print(f"   Age: {validation_result['file_age_minutes']:.1f} minutes")
    print(f"   Fresh: {'OK' if validation_result['is_fresh'] else 'WARN'}")

    print("\n[DATA] Data Status:")
    print(f"   Records: {validation_result['record_count']:,}")
    print(f"   Columns: {validation_result['column_count']}")
    print(f"   Population covered: {validation_result['population_total']:,.0f}")
    print(f"   Duplicate rows: {validation_result['duplicate_count']}")
    print(
        f"   Coordinates out of range: {validation_result['out_of_range_coordinates']}"
    )
    print(f"   Negative population: {validation_result['negative_population']}")
    print(
        f"   Data types valid: {'OK' if validation_result['data_types_valid'] else 'FAIL'}"
    )

    if validation_result["errors"]:
        print(f"\n[ERROR] ERRORS ({len(validation_result['errors'])}):")
        for error in validation_result["errors"]:
            print(f"   - {error}")

    if validation_result["warnings"]:
        print(f"\n[WARN] WARNINGS ({len(validation_result['warnings'])}):")
        for warning in validation_result["warnings"]:
            print(f"   - {warning}")

    overall_status = "PASSED" if validation_result.get("is_valid", False) else "FAILED"
    print(f"\n[RESULT] Overall Status: {overall_status}")
    print("=" * 50)


def validate_and_report(
    file_path: str,
    max_age_minutes: Optional[int] = None,
    required_columns: Optional[List[str]] = None,
    min_records: int = 0,
    print_report: bool = True,
) -> bool:
    """
    Validate a file and optionally print a formatted report.

    Args:
        file_path: Path to file to validate
        max_age_minutes: Maximum acceptable file age in minutes
        required_columns: List of required column names
        min_records: Minimum number of records required
        print_report: Whether to print the validation report

    Returns:
        True if validation passed, False otherwise
    """
    validation_result = validate_output_file(
        file_path=file_path,
        max_age_minutes=max_age_minutes,
        required_columns=required_columns,
        min_records=min_records,
    )

    if print_report:
        print_validation_report(validation_result)

    return validation_result.get("is_valid", False)
