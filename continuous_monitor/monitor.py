"""Polling loop driving one snapshot per interval.

Each cycle runs strictly in order:

    load checkpoint -> detect reboot -> read log source -> extract
    -> persist checkpoint (only if it changed) -> collect host values
    -> assemble -> publish

then sleeps. The checkpoint write completes before the sleep, so a process
killed at any point resumes from a consistent checkpoint.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Protocol

from continuous_monitor.config import MonitorConfig
from continuous_monitor.logs.extractor import ExtractionResult, extract
from continuous_monitor.logs.parser import LogEntry
from continuous_monitor.logs.source import DmesgLogSource
from continuous_monitor.snapshot.assembler import assemble_snapshot
from continuous_monitor.snapshot.models import Snapshot
from continuous_monitor.snapshot.publisher import SnapshotPublisher
from continuous_monitor.state.models import Checkpoint
from continuous_monitor.state.reboot import check_and_maybe_reset
from continuous_monitor.state.store import CheckpointStore
from continuous_monitor.system.boot import read_boot_id
from continuous_monitor.system.commands import CommandRunner
from continuous_monitor.system.provider import HostSnapshot, HostSnapshotProvider
from continuous_monitor.utils.errors import MonitorError

logger = logging.getLogger(__name__)


class LogSource(Protocol):
    async def read(self) -> List[LogEntry]: ...


class SnapshotProvider(Protocol):
    async def collect(self) -> HostSnapshot: ...


# Operator feedback hook: (event, message)
EventCallback = Callable[[str, str], None]


@dataclass
class CycleResult:
    """Outcome of one polling cycle."""

    cycle: int
    checkpoint: Checkpoint
    extraction: ExtractionResult
    snapshot: Snapshot
    reboot_detected: bool = False
    persisted: bool = False
    published_path: Optional[Path] = None
    errors: List[str] = field(default_factory=list)

    @property
    def new_entry_count(self) -> int:
        return len(self.extraction.new_entries)


class Monitor:
    """Runs the load/detect/extract/persist/publish cycle.

    Usage:
        monitor = Monitor.from_config(MonitorConfig())
        await monitor.run()

    All collaborators are injectable; tests pass fakes and a no-op sleep to
    run many cycles without real delay.
    """

    def __init__(
        self,
        store: CheckpointStore,
        log_source: LogSource,
        snapshot_provider: SnapshotProvider,
        publisher: SnapshotPublisher,
        boot_id_reader: Callable[[], str] = read_boot_id,
        interval_seconds: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Optional[Callable[[], datetime]] = None,
        on_event: Optional[EventCallback] = None,
    ):
        self.store = store
        self.log_source = log_source
        self.snapshot_provider = snapshot_provider
        self.publisher = publisher
        self.boot_id_reader = boot_id_reader
        self.interval_seconds = interval_seconds
        self.sleep = sleep
        self.clock = clock or datetime.now
        self.on_event = on_event

        self._cycles = 0
        # Checkpoint that advanced but could not be written yet
        self._unsaved: Optional[Checkpoint] = None

    @classmethod
    def from_config(
        cls,
        config: MonitorConfig,
        on_event: Optional[EventCallback] = None,
    ) -> "Monitor":
        """Build a monitor wired to the real host.

        Raises:
            StateDirectoryError: If the checkpoint directory cannot be created
        """
        runner = CommandRunner(timeout=config.command_timeout)
        return cls(
            store=CheckpointStore(config.state_dir),
            log_source=DmesgLogSource(runner, config.dmesg_command),
            snapshot_provider=HostSnapshotProvider(runner),
            publisher=SnapshotPublisher(config.output_file),
            boot_id_reader=lambda: read_boot_id(config.boot_id_path),
            interval_seconds=config.interval_seconds,
            on_event=on_event,
        )

    @property
    def cycles(self) -> int:
        return self._cycles

    def _emit(self, event: str, message: str) -> None:
        if self.on_event:
            self.on_event(event, message)

    def _load_checkpoint(self) -> Checkpoint:
        if self._unsaved is not None:
            return self._unsaved
        return self.store.load()

    async def _read_logs(self, errors: List[str]) -> List[LogEntry]:
        try:
            return list(await self.log_source.read())
        except (MonitorError, OSError) as e:
            logger.warning(f"Log source failed: {e}")
            errors.append(f"logs: {e}")
            return []

    async def _collect_host(self, errors: List[str]) -> HostSnapshot:
        try:
            return await self.snapshot_provider.collect()
        except (MonitorError, OSError) as e:
            logger.warning(f"Snapshot provider failed: {e}")
            errors.append(f"host: {e}")
            return HostSnapshot()

    async def run_cycle(self) -> CycleResult:
        """Run a single cycle and publish its snapshot."""
        self._cycles += 1
        errors: List[str] = []

        loaded = self._load_checkpoint()
        check = check_and_maybe_reset(self.boot_id_reader(), loaded)
        checkpoint = check.checkpoint
        if check.reset:
            if loaded.is_empty:
                logger.info(f"Initialized checkpoint for boot {checkpoint.boot_id}")
            else:
                logger.warning(
                    f"System reboot detected (boot id changed). "
                    f"Resetting dmesg offset from {loaded.last_log_offset}"
                )
                self._emit(
                    "reboot",
                    "System reboot detected (Boot ID changed). Resetting dmesg timestamp.",
                )

        batch = await self._read_logs(errors)
        extraction = extract(batch, checkpoint.last_log_offset)
        checkpoint = checkpoint.advance(extraction.new_offset)

        persisted = False
        if checkpoint != loaded or self._unsaved is not None:
            persisted = self.store.save(checkpoint)
            if persisted:
                self._unsaved = None
            else:
                self._unsaved = checkpoint
                errors.append("checkpoint: not persisted")

        host = await self._collect_host(errors)
        snapshot = assemble_snapshot(host, extraction, now=self.clock())

        result = CycleResult(
            cycle=self._cycles,
            checkpoint=checkpoint,
            extraction=extraction,
            snapshot=snapshot,
            reboot_detected=check.reset and not loaded.is_empty,
            persisted=persisted,
            errors=errors,
        )

        try:
            result.published_path = self.publisher.publish(snapshot)
        except MonitorError as e:
            logger.error(f"Failed to publish snapshot: {e}")
            result.errors.append(f"publish: {e}")
            self._emit("publish_failed", str(e))
        else:
            logger.debug(
                f"Cycle {self._cycles}: {result.new_entry_count} new log entries, "
                f"offset {checkpoint.last_log_offset}"
            )
            self._emit("published", f"Updated {result.published_path}")

        return result

    async def run(self, max_cycles: Optional[int] = None) -> int:
        """Run cycles until cancelled, or until max_cycles have completed.

        Returns:
            Number of cycles run
        """
        logger.info(
            f"Starting continuous monitoring every {self.interval_seconds}s "
            f"(state: {self.store.state_dir})"
        )
        completed = 0
        while max_cycles is None or completed < max_cycles:
            await self.run_cycle()
            completed += 1
            if max_cycles is not None and completed >= max_cycles:
                break
            await self.sleep(self.interval_seconds)
        return completed
