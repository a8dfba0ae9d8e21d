"""SSH transport for deploying to a Pi.

Uses asyncssh for the remote shell and for scp; a MockSSHConnection is
provided for tests.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import asyncssh

logger = logging.getLogger(__name__)


class RemoteDisconnected(Exception):
    """The connection dropped while a remote command was running."""


@dataclass
class SSHResult:
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


class SSHConnection(Protocol):
    """Protocol for SSH connections — real asyncssh or mock."""

    async def run(self, command: str) -> SSHResult:
        ...

    async def put(self, local_path: str | Path, remote_path: str) -> None:
        ...

    async def close(self) -> None:
        ...


class AsyncSSHConnection:
    """Real SSH connection using asyncssh."""

    def __init__(self, conn) -> None:
        self._conn = conn

    async def run(self, command: str) -> SSHResult:
        try:
            result = await self._conn.run(command, check=False)
        except asyncssh.DisconnectError as e:
            raise RemoteDisconnected(str(e)) from e
        if result.exit_signal:
            # Remote side was killed (e.g. sshd going down for a reboot)
            raise RemoteDisconnected(f"killed by {result.exit_signal[0]}")
        return SSHResult(
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode or 0,
        )

    async def put(self, local_path: str | Path, remote_path: str) -> None:
        """Copy one file to ``remote_path`` (relative to the remote home)."""
        await asyncssh.scp(str(local_path), (self._conn, remote_path), preserve=True)

    async def close(self) -> None:
        self._conn.close()
        await self._conn.wait_closed()


class MockSSHConnection:
    """Mock SSH for testing — records commands and uploads."""

    def __init__(
        self,
        responses: dict[str, SSHResult] | None = None,
        disconnect_on: tuple[str, ...] = (),
    ) -> None:
        self._responses = responses or {}
        self._disconnect_on = disconnect_on
        self._default = SSHResult(stdout="", returncode=0)
        self.commands: list[str] = []
        self.uploads: list[tuple[str, str]] = []
        self.closed = False

    async def run(self, command: str) -> SSHResult:
        self.commands.append(command)
        if self._disconnect_on and command.startswith(self._disconnect_on):
            raise RemoteDisconnected("connection lost")
        # Check exact match first, then prefix match
        if command in self._responses:
            return self._responses[command]
        for key, val in self._responses.items():
            if command.startswith(key):
                return val
        return self._default

    async def put(self, local_path: str | Path, remote_path: str) -> None:
        self.uploads.append((str(local_path), remote_path))

    async def close(self) -> None:
        self.closed = True


async def connect_ssh(
    host: str,
    username: str,
    password: str | None = None,
    key_path: str | None = None,
    port: int = 22,
    timeout: float = 5.0,
) -> AsyncSSHConnection:
    """Open an asyncssh connection to a Pi."""
    kwargs: dict = {
        "host": host,
        "port": port,
        "username": username,
        "known_hosts": None,  # Freshly imaged Pis have new host keys
        "connect_timeout": timeout,
    }
    if password:
        kwargs["password"] = password
    if key_path:
        kwargs["client_keys"] = [key_path]

    conn = await asyncssh.connect(**kwargs)
    logger.debug("SSH connected to %s@%s:%d", username, host, port)
    return AsyncSSHConnection(conn)


async def probe_ssh(host: str, port: int = 22, timeout: float = 3.0) -> bool:
    """Check if SSH is reachable on a host."""
    try:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port), timeout=timeout
        )
        writer.close()
        await writer.wait_closed()
        return True
    except (asyncio.TimeoutError, OSError):
        return False
