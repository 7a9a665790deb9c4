"""
NetSnmp - Liveness Probe.

Cheap ICMP reachability check used to filter candidates before the
heavier SNMP probe. Uses the system ping binary through an asyncio
subprocess, so no raw-socket privileges are needed.

The engine works without a liveness probe: when ping is unavailable, or
ICMP is blocked by policy (scan_mode "snmp"), every expanded address is
an SNMP candidate.
"""

import asyncio
import logging
import math
import platform
import shutil
from typing import List, Optional, Protocol

logger = logging.getLogger(__name__)


class LivenessProbe(Protocol):
    """Reachability check contract."""

    async def is_alive(self, address: str, timeout_ms: int) -> bool:
        ...


class PingProbe:
    """
    ICMP echo via the system ping command.

    One echo request per address; the timeout is rounded up to whole
    seconds on platforms whose ping only accepts seconds.
    """

    def __init__(self, ping_path: Optional[str] = None, count: int = 1):
        self.ping_path = ping_path or shutil.which('ping')
        self.count = count
        self._windows = platform.system().lower() == 'windows'

    @property
    def available(self) -> bool:
        return self.ping_path is not None

    def build_command(self, address: str, timeout_ms: int) -> List[str]:
        """Platform-specific ping command line."""
        if self._windows:
            return [self.ping_path, '-n', str(self.count), '-w', str(timeout_ms), address]
        timeout_s = max(1, math.ceil(timeout_ms / 1000))
        return [self.ping_path, '-c', str(self.count), '-W', str(timeout_s), '-q', address]

    async def is_alive(self, address: str, timeout_ms: int) -> bool:
        """True when the host answered an echo request in time."""
        if not self.available:
            raise RuntimeError("ping command not found")

        proc = await asyncio.create_subprocess_exec(
            *self.build_command(address, timeout_ms),
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        try:
            # Guard against ping implementations that ignore -W
            await asyncio.wait_for(proc.wait(), timeout=timeout_ms / 1000 + 2)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            logger.debug(f"Ping to {address} overran its timeout")
            return False

        alive = proc.returncode == 0
        logger.debug(f"Ping {address}: {'alive' if alive else 'no reply'}")
        return alive
