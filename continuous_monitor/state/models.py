"""Checkpoint state persisted between polling cycles."""

from dataclasses import dataclass, asdict, replace
from typing import Any, Dict

# Substituted when the host does not expose a boot identifier
UNKNOWN_BOOT_ID = "unknown"


@dataclass(frozen=True)
class Checkpoint:
    """Progress through the kernel ring buffer for one boot epoch.

    Attributes:
        boot_id: Boot identifier the offset belongs to ("" before first run)
        last_log_offset: Highest log timestamp already reported, in seconds
            since boot. Never decreases within a boot epoch.
    """

    boot_id: str = ""
    last_log_offset: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.boot_id and self.last_log_offset == 0.0

    def advance(self, offset: float) -> "Checkpoint":
        """Return a checkpoint whose offset is the larger of the two."""
        if offset <= self.last_log_offset:
            return self
        return replace(self, last_log_offset=offset)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
