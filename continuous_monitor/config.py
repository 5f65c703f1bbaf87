"""Monitor configuration.

Defaults match the original shell deployment:
- State directory: ~/.continuous_monitor
- Snapshot file: ./continuous_monitor.json
- Poll interval: 5 seconds
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

DEFAULT_STATE_DIR = Path.home() / ".continuous_monitor"
DEFAULT_OUTPUT_FILE = Path("continuous_monitor.json")
DEFAULT_INTERVAL_SECONDS = 5.0
DEFAULT_COMMAND_TIMEOUT = 10.0
DEFAULT_BOOT_ID_PATH = Path("/proc/sys/kernel/random/boot_id")
DEFAULT_DMESG_COMMAND = ["dmesg", "--color=never"]

# Environment variable prefix used by CLI options
ENV_PREFIX = "CONTINUOUS_MONITOR_"


@dataclass
class MonitorConfig:
    """Configuration for the polling monitor."""

    state_dir: Union[str, Path] = DEFAULT_STATE_DIR
    output_file: Union[str, Path] = DEFAULT_OUTPUT_FILE
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    boot_id_path: Union[str, Path] = DEFAULT_BOOT_ID_PATH
    dmesg_command: List[str] = field(default_factory=lambda: list(DEFAULT_DMESG_COMMAND))

    def __post_init__(self):
        self.state_dir = Path(self.state_dir).expanduser()
        self.output_file = Path(self.output_file).expanduser()
        self.boot_id_path = Path(self.boot_id_path)

        if self.interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if self.command_timeout <= 0:
            raise ValueError("command_timeout must be positive")
        if not self.dmesg_command:
            raise ValueError("dmesg_command must not be empty")


def interval_from_parts(minutes: int = 0, seconds: float = 0) -> float:
    """Combine a minutes/seconds pair into an interval in seconds.

    Raises:
        ValueError: If the resulting interval is not positive
    """
    total = minutes * 60 + seconds
    if total <= 0:
        raise ValueError("Please specify a positive interval")
    return float(total)
