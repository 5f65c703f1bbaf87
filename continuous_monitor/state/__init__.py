"""Checkpoint persistence and reboot detection."""

from .models import Checkpoint, UNKNOWN_BOOT_ID
from .store import CheckpointStore
from .reboot import RebootCheck, check_and_maybe_reset, normalize_boot_id

__all__ = [
    "Checkpoint",
    "UNKNOWN_BOOT_ID",
    "CheckpointStore",
    "RebootCheck",
    "check_and_maybe_reset",
    "normalize_boot_id",
]
