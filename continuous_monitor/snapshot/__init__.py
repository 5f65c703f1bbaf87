"""Snapshot document, assembly and publishing."""

from .models import Snapshot, SystemMetrics, LogsBlock
from .assembler import assemble_snapshot, format_timestamp
from .publisher import SnapshotPublisher

__all__ = [
    "Snapshot",
    "SystemMetrics",
    "LogsBlock",
    "assemble_snapshot",
    "format_timestamp",
    "SnapshotPublisher",
]
