"""Merge host values and new log entries into a Snapshot."""

from datetime import datetime
from typing import Optional

from continuous_monitor.logs.extractor import ExtractionResult
from continuous_monitor.snapshot.models import LogsBlock, Snapshot, SystemMetrics
from continuous_monitor.system.provider import HostSnapshot


def format_timestamp(now: Optional[datetime] = None) -> str:
    """Format a time as ISO-8601 with second precision and a UTC offset.

    Naive datetimes are interpreted as local time.
    """
    now = now or datetime.now()
    if now.tzinfo is None:
        now = now.astimezone()
    return now.isoformat(timespec="seconds")


def assemble_snapshot(
    host: HostSnapshot,
    extraction: ExtractionResult,
    now: Optional[datetime] = None,
) -> Snapshot:
    """Build the published document for one cycle.

    Args:
        host: Values from the snapshot provider (opaque text)
        extraction: Result of the incremental log extraction
        now: Time of the snapshot, defaults to the current local time

    Returns:
        Snapshot ready to publish
    """
    return Snapshot(
        hostname=host.hostname or "",
        ip_address=host.ip_address or "",
        timestamp=format_timestamp(now),
        system_metrics=SystemMetrics(
            cpu_info=host.cpu_info or "",
            memory_info=host.memory_info or "",
            swap_info=host.swap_info or "",
            threadinfo="",
        ),
        logs=LogsBlock(dmesg=extraction.text),
    )
