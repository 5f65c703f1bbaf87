"""Local command execution.

Host utilities (dmesg, top, hostname, ip) are treated as unreliable: a
missing binary, non-zero exit or timeout all produce a failed CommandResult
instead of an exception, so callers can degrade to empty values.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Sequence

from continuous_monitor.config import DEFAULT_COMMAND_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result of a local command execution."""

    stdout: str
    stderr: str
    exit_code: int

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class CommandRunner:
    """Runs local commands without a shell.

    Usage:
        runner = CommandRunner(timeout=10)
        result = await runner.run(["dmesg", "--color=never"])
        if result.success:
            print(result.stdout)
    """

    def __init__(self, timeout: float = DEFAULT_COMMAND_TIMEOUT):
        self.timeout = timeout

    async def run(self, args: Sequence[str]) -> CommandResult:
        """Run a command and capture its output.

        Args:
            args: Program and arguments

        Returns:
            CommandResult; exit_code is 127 if the program is missing and
            -1 if it timed out
        """
        cmd = " ".join(args)
        logger.debug(f"Running: {cmd}")

        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            return CommandResult(stdout="", stderr=f"{args[0]}: not found", exit_code=127)
        except OSError as e:
            return CommandResult(stdout="", stderr=str(e), exit_code=126)

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            logger.warning(f"Command timed out after {self.timeout}s: {cmd}")
            return CommandResult(stdout="", stderr="timeout", exit_code=-1)

        result = CommandResult(
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
            exit_code=proc.returncode if proc.returncode is not None else -1,
        )
        if not result.success:
            logger.debug(f"Command exited {result.exit_code}: {cmd}: {result.stderr.strip()}")
        return result
