"""Kernel ring-buffer log source."""

import logging
from typing import List, Optional, Sequence

from continuous_monitor.config import DEFAULT_DMESG_COMMAND
from continuous_monitor.logs.parser import LogEntry, parse_batch
from continuous_monitor.system.commands import CommandRunner
from continuous_monitor.utils.errors import CollectorError

logger = logging.getLogger(__name__)


class DmesgLogSource:
    """Reads the whole kernel ring buffer via dmesg.

    Usage:
        source = DmesgLogSource()
        batch = await source.read()
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        command: Optional[Sequence[str]] = None,
    ):
        self.runner = runner or CommandRunner()
        self.command = list(command) if command else list(DEFAULT_DMESG_COMMAND)

    async def read_raw(self) -> str:
        """Return raw dmesg output.

        Raises:
            CollectorError: If dmesg is missing, fails, or times out
        """
        result = await self.runner.run(self.command)
        if not result.success:
            raise CollectorError(
                f"dmesg command failed: {result.stderr.strip() or 'no output'}",
                source="dmesg",
                exit_code=result.exit_code,
            )
        return result.stdout

    async def read(self) -> List[LogEntry]:
        """Return the current buffer, or an empty batch if it is unavailable.

        An unavailable source and an empty buffer are deliberately
        indistinguishable to callers.
        """
        try:
            raw = await self.read_raw()
        except CollectorError as e:
            logger.warning(f"Log source unavailable: {e}")
            return []
        return parse_batch(raw)
