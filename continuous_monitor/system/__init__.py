"""Host collaborators: commands, boot id, identity and usage."""

from .commands import CommandRunner, CommandResult
from .boot import read_boot_id
from .provider import HostSnapshot, HostSnapshotProvider
from .identity import generate_server_id
from .metrics import MetricsData, collect_metrics
from .processes import ProcessData, ThreadData, check_max_threads_process, collect_processes

__all__ = [
    "CommandRunner",
    "CommandResult",
    "read_boot_id",
    "HostSnapshot",
    "HostSnapshotProvider",
    "generate_server_id",
    "MetricsData",
    "collect_metrics",
    "ProcessData",
    "ThreadData",
    "check_max_threads_process",
    "collect_processes",
]
