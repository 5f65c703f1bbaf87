"""Error hierarchy for the continuous monitor.

Only StateDirectoryError is fatal. Everything else is raised by a
collaborator and degraded by the polling loop so the monitor keeps running.
"""

from pathlib import Path
from typing import Optional, Union


class MonitorError(Exception):
    """Base exception for all continuous monitor errors."""

    pass


class StateDirectoryError(MonitorError):
    """Raised when the checkpoint state directory cannot be created."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class CheckpointStoreError(MonitorError):
    """Raised when a checkpoint value cannot be written."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class CollectorError(MonitorError):
    """Raised when a host collaborator (log source, snapshot provider) fails.

    Attributes:
        source: Name of the failing collaborator (e.g. "dmesg", "top")
    """

    def __init__(self, message: str, source: str = "", exit_code: Optional[int] = None):
        super().__init__(message)
        self.source = source
        self.exit_code = exit_code


class PublishError(MonitorError):
    """Raised when the snapshot document cannot be written to its sink."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None
