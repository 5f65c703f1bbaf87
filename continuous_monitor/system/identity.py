"""Stable server identifier for metrics and process reports."""

import logging
import socket
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

MACHINE_ID_PATHS = (Path("/etc/machine-id"), Path("/var/lib/dbus/machine-id"))
UNKNOWN = "unknown"


def read_machine_id(paths: Iterable[Path] = MACHINE_ID_PATHS) -> str:
    """Return the first readable machine id, or "unknown"."""
    for path in paths:
        try:
            value = Path(path).read_text(encoding="utf-8").strip()
        except OSError:
            continue
        if value:
            return value
    logger.debug("No machine id found")
    return UNKNOWN


def generate_server_id(
    hostname: Optional[str] = None,
    machine_id: Optional[str] = None,
) -> str:
    """Build "<hostname>-<first 8 chars of machine id>"."""
    if hostname is None:
        hostname = socket.gethostname() or UNKNOWN
    if machine_id is None:
        machine_id = read_machine_id()
    return f"{hostname}-{machine_id[:8]}"
