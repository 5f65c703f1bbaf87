"""Numeric host usage metrics.

Percentages are rounded to one decimal. Disk IO is cumulative since boot
in MB; network in/out is the traffic seen during a short sampling window
in KB.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import psutil

from continuous_monitor.system.identity import generate_server_id

logger = logging.getLogger(__name__)

CPU_SAMPLE_SECONDS = 0.2
NETWORK_SAMPLE_SECONDS = 0.1


@dataclass
class MetricsData:
    """One numeric usage sample."""

    server_id: str
    timestamp: int  # milliseconds since the epoch
    cpu_usage: float = 0.0
    memory_usage: float = 0.0
    disk_usage: float = 0.0
    io_read: float = 0.0
    io_write: float = 0.0
    network_in: float = 0.0
    network_out: float = 0.0

    def to_dict(self) -> Dict:
        return {
            "serverId": self.server_id,
            "timestamp": self.timestamp,
            "cpuUsage": self.cpu_usage,
            "memoryUsage": self.memory_usage,
            "diskUsage": self.disk_usage,
            "ioRead": self.io_read,
            "ioWrite": self.io_write,
            "networkIn": self.network_in,
            "networkOut": self.network_out,
        }


def _percent(used: float, total: float) -> float:
    if total <= 0:
        return 0.0
    return round(used / total * 100.0, 1)


def disk_usage_percent() -> float:
    """Used share of all mounted physical partitions combined."""
    total = used = 0
    seen = set()
    for partition in psutil.disk_partitions(all=False):
        if partition.device in seen:
            continue
        seen.add(partition.device)
        try:
            usage = psutil.disk_usage(partition.mountpoint)
        except OSError as e:
            logger.debug(f"Skipping {partition.mountpoint}: {e}")
            continue
        total += usage.total
        used += usage.total - usage.free
    return _percent(used, total)


def disk_io_mb() -> Tuple[float, float]:
    """Cumulative (read, write) MB across disks."""
    counters = psutil.disk_io_counters()
    if counters is None:
        return 0.0, 0.0
    mb = 1024 * 1024
    return round(counters.read_bytes / mb, 1), round(counters.write_bytes / mb, 1)


def network_kb(sample_seconds: float, sleep: Callable[[float], None]) -> Tuple[float, float]:
    """(received, sent) KB during a sampling window."""
    before = psutil.net_io_counters()
    sleep(sample_seconds)
    after = psutil.net_io_counters()
    if before is None or after is None:
        return 0.0, 0.0
    received = max(after.bytes_recv - before.bytes_recv, 0)
    sent = max(after.bytes_sent - before.bytes_sent, 0)
    return round(received / 1024, 1), round(sent / 1024, 1)


def collect_metrics(
    server_id: Optional[str] = None,
    cpu_sample_seconds: float = CPU_SAMPLE_SECONDS,
    network_sample_seconds: float = NETWORK_SAMPLE_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> MetricsData:
    """Take one usage sample of the local host.

    Blocks for roughly cpu_sample_seconds + network_sample_seconds.
    """
    if server_id is None:
        server_id = generate_server_id()
    timestamp = int(time.time() * 1000)

    cpu = round(psutil.cpu_percent(interval=cpu_sample_seconds), 1)
    mem = psutil.virtual_memory()
    io_read, io_write = disk_io_mb()
    net_in, net_out = network_kb(network_sample_seconds, sleep)

    return MetricsData(
        server_id=server_id,
        timestamp=timestamp,
        cpu_usage=cpu,
        memory_usage=_percent(mem.total - mem.available, mem.total),
        disk_usage=disk_usage_percent(),
        io_read=io_read,
        io_write=io_write,
        network_in=net_in,
        network_out=net_out,
    )
