"""Reboot detection by boot identifier comparison."""

import logging
from dataclasses import dataclass
from typing import Optional

from continuous_monitor.state.models import Checkpoint, UNKNOWN_BOOT_ID

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RebootCheck:
    """Outcome of a reboot check."""

    checkpoint: Checkpoint
    reset: bool = False


def normalize_boot_id(boot_id: Optional[str]) -> str:
    """Return the stripped boot id, or the "unknown" sentinel if empty."""
    if boot_id is None:
        return UNKNOWN_BOOT_ID
    boot_id = boot_id.strip()
    return boot_id or UNKNOWN_BOOT_ID


def check_and_maybe_reset(
    current_boot_id: Optional[str],
    checkpoint: Checkpoint,
) -> RebootCheck:
    """Reset the checkpoint if the host has rebooted since it was written.

    Kernel log timestamps restart at zero on every boot, so an offset from a
    previous boot is meaningless and must be discarded.

    Args:
        current_boot_id: Boot id read from the host (None/empty if unreadable)
        checkpoint: Checkpoint loaded from the store

    Returns:
        RebootCheck with the checkpoint to use and whether it was reset
    """
    boot_id = normalize_boot_id(current_boot_id)

    if boot_id == checkpoint.boot_id:
        return RebootCheck(checkpoint=checkpoint, reset=False)

    logger.debug(
        f"Boot id changed from {checkpoint.boot_id!r} to {boot_id!r}, "
        f"dropping offset {checkpoint.last_log_offset}"
    )
    return RebootCheck(
        checkpoint=Checkpoint(boot_id=boot_id, last_log_offset=0.0),
        reset=True,
    )
