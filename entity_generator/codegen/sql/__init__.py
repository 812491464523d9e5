"""
SQL side of the pipeline: DDL parsing and table metadata extraction.
"""

from .adapter import TableMetadataAdapter, normalize_type_name
from .parser import ParseResult, parse_table, strip_partition_clause

__all__ = [
    "ParseResult",
    "parse_table",
    "strip_partition_clause",
    "TableMetadataAdapter",
    "normalize_type_name",
]
