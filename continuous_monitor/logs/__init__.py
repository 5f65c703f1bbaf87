"""Kernel log parsing, incremental extraction and the dmesg source."""

from .parser import LogEntry, parse_line, parse_batch, parse_timestamp
from .extractor import ExtractionResult, extract, extract_text
from .source import DmesgLogSource

__all__ = [
    "LogEntry",
    "parse_line",
    "parse_batch",
    "parse_timestamp",
    "ExtractionResult",
    "extract",
    "extract_text",
    "DmesgLogSource",
]
