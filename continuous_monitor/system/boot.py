"""Boot identifier source."""

import logging
from pathlib import Path
from typing import Optional, Union

from continuous_monitor.config import DEFAULT_BOOT_ID_PATH
from continuous_monitor.state.reboot import normalize_boot_id

logger = logging.getLogger(__name__)


def read_boot_id(path: Optional[Union[str, Path]] = None) -> str:
    """Read the kernel's per-boot random identifier.

    Returns "unknown" when the file is missing or unreadable (containers,
    non-Linux hosts, restricted /proc).
    """
    path = Path(path) if path else DEFAULT_BOOT_ID_PATH
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Boot id unavailable at {path}: {e}")
        return normalize_boot_id(None)
    return normalize_boot_id(raw)
