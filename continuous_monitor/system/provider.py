"""Host identity and resource usage snapshot.

Collects, per cycle:
- hostname: `hostname`
- ip_address: first address of `hostname -I`, falling back to the `src`
  address of `ip route get 1`
- cpu/memory/swap: the summary lines from the header of `top -b -n 1`

The summary lines are passed through as opaque text.
"""

import logging
import socket
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Tuple

from continuous_monitor.system.commands import CommandRunner

logger = logging.getLogger(__name__)

# Only the header block of top carries the summary lines
TOP_HEADER_LINES = 10


@dataclass
class HostSnapshot:
    """Raw host values for one cycle."""

    hostname: str = ""
    ip_address: str = ""
    cpu_info: str = ""
    memory_info: str = ""
    swap_info: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_top_summary(output: str) -> Tuple[str, str, str]:
    """Pick the CPU, memory and swap summary lines out of `top -b` output.

    Returns:
        (cpu_line, mem_line, swap_line); a missing line is ""
    """
    cpu = mem = swap = ""
    for line in output.splitlines()[:TOP_HEADER_LINES]:
        if not cpu and line.startswith("%Cpu"):
            cpu = line
        elif not mem and "Mem :" in line:
            mem = line
        elif not swap and "Swap:" in line:
            swap = line
    return cpu, mem, swap


def parse_hostname_addresses(output: str) -> str:
    """Return the first address printed by `hostname -I`, or ""."""
    fields = output.split()
    return fields[0] if fields else ""


def parse_route_source(output: str) -> str:
    """Return the source address from `ip route get 1` output, or ""."""
    fields = output.split()
    if "src" in fields:
        idx = fields.index("src")
        if idx + 1 < len(fields):
            return fields[idx + 1]
    # Older iproute2 builds print the address in the 7th column
    if len(fields) >= 7:
        return fields[6]
    return ""


class HostSnapshotProvider:
    """Collects a HostSnapshot from local system utilities.

    Every lookup degrades independently: a failing command leaves its field
    empty and the remaining fields are still collected.
    """

    def __init__(self, runner: Optional[CommandRunner] = None):
        self.runner = runner or CommandRunner()

    async def collect(self) -> HostSnapshot:
        snapshot = HostSnapshot()
        snapshot.hostname = await self._get_hostname()
        snapshot.ip_address = await self._get_ip_address()
        snapshot.cpu_info, snapshot.memory_info, snapshot.swap_info = (
            await self._get_usage_summary()
        )
        return snapshot

    async def _get_hostname(self) -> str:
        result = await self.runner.run(["hostname"])
        if result.success and result.stdout.strip():
            return result.stdout.strip()
        return socket.gethostname()

    async def _get_ip_address(self) -> str:
        result = await self.runner.run(["hostname", "-I"])
        if result.success:
            address = parse_hostname_addresses(result.stdout)
            if address:
                return address

        result = await self.runner.run(["ip", "route", "get", "1"])
        if result.success:
            return parse_route_source(result.stdout)

        logger.debug("No IP address available")
        return ""

    async def _get_usage_summary(self) -> Tuple[str, str, str]:
        result = await self.runner.run(["top", "-b", "-n", "1"])
        if not result.success:
            logger.warning(f"top failed: {result.stderr.strip() or result.exit_code}")
            return "", "", ""
        return parse_top_summary(result.stdout)
