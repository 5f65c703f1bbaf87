"""continuous-monitor: incremental kernel log snapshots for a local host.

Example:
    >>> import asyncio
    >>> from continuous_monitor import Monitor, MonitorConfig
    >>> monitor = Monitor.from_config(MonitorConfig(interval_seconds=5))
    >>> asyncio.run(monitor.run())
"""

__version__ = "0.1.0"

from .config import MonitorConfig
from .logs import ExtractionResult, LogEntry, extract, parse_batch
from .monitor import CycleResult, Monitor
from .snapshot import Snapshot, SnapshotPublisher, assemble_snapshot
from .state import Checkpoint, CheckpointStore, check_and_maybe_reset

__all__ = [
    "__version__",
    "MonitorConfig",
    "Monitor",
    "CycleResult",
    "Checkpoint",
    "CheckpointStore",
    "check_and_maybe_reset",
    "LogEntry",
    "ExtractionResult",
    "extract",
    "parse_batch",
    "Snapshot",
    "SnapshotPublisher",
    "assemble_snapshot",
]
