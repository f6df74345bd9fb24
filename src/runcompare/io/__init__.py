"""
Input layer: structural parsing of experiment-tracking tables into records.
"""

from runcompare.io.records import RECORD_FIELDS, Record, iter_records, parse_records, read_records

__all__ = ["RECORD_FIELDS", "Record", "iter_records", "parse_records", "read_records"]
