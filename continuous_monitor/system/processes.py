"""Thread-heavy process report.

Lists processes with many threads, each with a one-point usage trend and
up to ten of its threads. Kept out of the snapshot document, whose
``threadinfo`` field stays empty.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import psutil

from continuous_monitor.system.identity import generate_server_id

logger = logging.getLogger(__name__)

MIN_THREADS = 20
MAX_THREAD_DETAILS = 10

PROCESS_ATTRS = [
    "pid",
    "name",
    "username",
    "status",
    "num_threads",
    "cpu_percent",
    "memory_percent",
]


def format_cpu_time(seconds: float) -> str:
    """Format seconds as H:MM:SS."""
    total = int(seconds)
    return f"{total // 3600}:{total % 3600 // 60:02d}:{total % 60:02d}"


@dataclass
class ThreadData:
    thread_id: int
    user_name: str
    command: str
    user_time: float = 0.0
    system_time: float = 0.0

    def to_dict(self) -> Dict:
        return {
            "threadId": self.thread_id,
            "userName": self.user_name,
            "command": self.command,
            "userTime": self.user_time,
            "systemTime": self.system_time,
            "runtime": format_cpu_time(self.user_time + self.system_time),
        }


@dataclass
class TrendData:
    timestamp: int
    cpu_usage: float
    memory_usage: float
    thread_count: int

    def to_dict(self) -> Dict:
        return {
            "timestamp": self.timestamp,
            "cpuUsage": self.cpu_usage,
            "memoryUsage": self.memory_usage,
            "threadCount": self.thread_count,
        }


@dataclass
class ProcessData:
    """A process and a sample of its threads."""

    server_id: str
    pid: int
    name: str
    user_name: str
    status: str
    timestamp: int
    trend: List[TrendData] = field(default_factory=list)
    threads: List[ThreadData] = field(default_factory=list)

    @property
    def thread_count(self) -> int:
        return self.trend[-1].thread_count if self.trend else 0

    def to_dict(self) -> Dict:
        return {
            "serverId": self.server_id,
            "pid": self.pid,
            "name": self.name,
            "userName": self.user_name,
            "status": self.status,
            "timestamp": self.timestamp,
            "trend": [t.to_dict() for t in self.trend],
            "threads": [t.to_dict() for t in self.threads],
        }


def thread_details(
    proc, user_name: str, command: str, limit: int = MAX_THREAD_DETAILS
) -> List[ThreadData]:
    """Return up to limit threads of proc; empty if they cannot be read."""
    try:
        threads = proc.threads()
    except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
        logger.debug(f"Cannot list threads of pid {proc.pid}: {e}")
        return []

    return [
        ThreadData(
            thread_id=t.id,
            user_name=user_name,
            command=command,
            user_time=t.user_time,
            system_time=t.system_time,
        )
        for t in threads[:limit]
    ]


def _to_process_data(proc, server_id: str, timestamp: int) -> ProcessData:
    info = proc.info
    name = info.get("name") or ""
    user_name = info.get("username") or "unknown"
    return ProcessData(
        server_id=server_id,
        pid=info.get("pid") or proc.pid,
        name=name,
        user_name=user_name,
        status=info.get("status") or "unknown",
        timestamp=timestamp,
        trend=[
            TrendData(
                timestamp=timestamp,
                cpu_usage=round(info.get("cpu_percent") or 0.0, 1),
                memory_usage=round(info.get("memory_percent") or 0.0, 1),
                thread_count=info.get("num_threads") or 0,
            )
        ],
        threads=thread_details(proc, user_name, name),
    )


def collect_processes(
    min_threads: int = MIN_THREADS,
    server_id: Optional[str] = None,
) -> List[ProcessData]:
    """Report every process with at least min_threads threads."""
    if server_id is None:
        server_id = generate_server_id()
    timestamp = int(time.time() * 1000)

    processes = []
    for proc in psutil.process_iter(PROCESS_ATTRS):
        if (proc.info.get("num_threads") or 0) < min_threads:
            continue
        processes.append(_to_process_data(proc, server_id, timestamp))

    logger.debug(f"{len(processes)} processes with >= {min_threads} threads")
    return processes


def check_max_threads_process(server_id: Optional[str] = None) -> Optional[ProcessData]:
    """Find the process with the most threads, or None if none is visible."""
    busiest = None
    for proc in psutil.process_iter(PROCESS_ATTRS):
        count = proc.info.get("num_threads") or 0
        if busiest is None or count > (busiest.info.get("num_threads") or 0):
            busiest = proc

    if busiest is None:
        return None
    if server_id is None:
        server_id = generate_server_id()
    return _to_process_data(busiest, server_id, int(time.time() * 1000))
