"""Incremental extraction of new kernel log entries.

The log source returns the entire retained ring buffer on every call. The
extractor turns that full batch plus the last reported watermark into the
delta of entries appended since, and the new watermark.

Rules:
- An entry is new iff its timestamp is strictly greater than the watermark
  in force before this cycle. Entries are never compared with each other.
- Equal timestamps are excluded, so the last reported line is not repeated.
- The new watermark is the maximum of the old one and every timestamp seen.
- Untimestamped lines are never emitted and never move the watermark.

Known limitations:
- If the ring buffer overwrote entries beneath the watermark, those entries
  are lost from the delta stream.
- An out-of-order buffer can yield a delta that is not sorted by timestamp.
- Continuation lines following a new entry are dropped.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from continuous_monitor.logs.parser import LogEntry, parse_batch


@dataclass
class ExtractionResult:
    """Newly observed entries and the watermark after this cycle."""

    new_entries: List[LogEntry] = field(default_factory=list)
    new_offset: float = 0.0

    @property
    def text(self) -> str:
        """New entries joined by newlines ("" if none)."""
        return "\n".join(entry.raw_text for entry in self.new_entries)

    def advanced_from(self, last_offset: float) -> bool:
        return self.new_offset > last_offset


def extract(
    batch: Iterable[LogEntry],
    last_offset: Optional[float] = None,
) -> ExtractionResult:
    """Compute the entries appended since last_offset.

    Args:
        batch: The full current log buffer, in source order
        last_offset: Watermark from the checkpoint; None means nothing has
            been reported yet

    Returns:
        ExtractionResult with new entries in source order and the new
        watermark (never lower than last_offset)
    """
    watermark = 0.0 if last_offset is None else float(last_offset)
    max_offset = watermark
    new_entries: List[LogEntry] = []

    for entry in batch:
        ts = entry.timestamp
        if ts is None:
            continue
        if ts > watermark:
            new_entries.append(entry)
        if ts > max_offset:
            max_offset = ts

    return ExtractionResult(new_entries=new_entries, new_offset=max_offset)


def extract_text(text: str, last_offset: Optional[float] = None) -> ExtractionResult:
    """Parse raw log source output and extract the new entries."""
    return extract(parse_batch(text), last_offset)
