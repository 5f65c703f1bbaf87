"""Kernel ring-buffer line parsing.

dmesg format:
    [    4.396920] usb 1-1: new high-speed USB device number 2
    continuation text without a timestamp

Lines without a leading bracketed timestamp are kept as untimestamped
entries rather than rejected.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

TIMESTAMP_PATTERN = re.compile(r"^\[\s*(\d+\.\d+)\s*\]")


@dataclass(frozen=True)
class LogEntry:
    """A single ring-buffer line.

    Attributes:
        raw_text: The line exactly as read from the log source
        timestamp: Seconds since boot, or None for untimestamped lines
    """

    raw_text: str
    timestamp: Optional[float] = None

    @property
    def is_timestamped(self) -> bool:
        return self.timestamp is not None


def parse_timestamp(line: str) -> Optional[float]:
    """Extract the relative timestamp from a log line, if it has one."""
    match = TIMESTAMP_PATTERN.match(line)
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def parse_line(line: str) -> LogEntry:
    return LogEntry(raw_text=line, timestamp=parse_timestamp(line))


def parse_batch(text: str) -> List[LogEntry]:
    """Parse a full log source dump into entries, preserving order."""
    return [parse_line(line) for line in text.splitlines()]
