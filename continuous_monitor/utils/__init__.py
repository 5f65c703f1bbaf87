"""Utility modules for the continuous monitor."""

from .errors import (
    MonitorError,
    StateDirectoryError,
    CheckpointStoreError,
    CollectorError,
    PublishError,
)
from .log import setup_logging

__all__ = [
    "MonitorError",
    "StateDirectoryError",
    "CheckpointStoreError",
    "CollectorError",
    "PublishError",
    "setup_logging",
]
