"""
Keep-alive submission through the relayer binary.

Building and signing an update transaction needs the relayer's keys and
light client logic. Rather than reimplement that, each update runs the
relayer executable once and checks its exit status.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Final

from ibc_keepalive.paths import Direction, RelayerConfig

from .client import LedgerClientError

logger = logging.getLogger(__name__)

STDERR_TAIL: Final = 500
"""Characters of relayer stderr kept in error messages."""

TERMINATE_TIMEOUT: Final = 5.0
"""Seconds an interrupted relayer gets to exit after SIGTERM before it is killed."""


@dataclass(frozen=True, slots=True)
class RelayerCommand:
    """Runs one client update per call using the configured relayer."""

    config: RelayerConfig

    def build_args(self, direction: Direction) -> list[str]:
        """Render the full argument vector for one update."""
        args = [self.config.binary]
        args.extend(
            arg.format(
                src_chain=direction.src_chain_id,
                dst_chain=direction.dst_chain_id,
                client_id=direction.client_id,
            )
            for arg in self.config.update_args
        )
        if self.config.home is not None:
            args.extend(["--home", self.config.home])
        return args

    async def submit(self, direction: Direction) -> None:
        """
        Run the relayer and wait for it to exit.

        Raises:
            LedgerClientError: If the relayer cannot be started or exits non-zero.
        """
        args = self.build_args(direction)
        logger.debug("Running %s", " ".join(args))

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise LedgerClientError(f"cannot start relayer {args[0]!r}: {e}") from e

        try:
            stdout, stderr = await process.communicate()
        except BaseException:
            # Cancelled mid-update. The relayer must not outlive the monitor.
            await _terminate(process)
            raise

        if process.returncode != 0:
            tail = stderr.decode("utf-8", errors="replace").strip()[-STDERR_TAIL:]
            raise LedgerClientError(
                f"update-client {direction} exited with status {process.returncode}: {tail}"
            )

        if stdout:
            logger.debug("Relayer output: %s", stdout.decode("utf-8", errors="replace").strip())


async def _terminate(process: asyncio.subprocess.Process) -> None:
    """Stop a running relayer: SIGTERM first, SIGKILL if it does not exit in time."""
    if process.returncode is not None:
        return

    try:
        process.terminate()
    except ProcessLookupError:
        return

    try:
        await asyncio.wait_for(process.wait(), timeout=TERMINATE_TIMEOUT)
    except TimeoutError:
        logger.warning("Relayer %d ignored SIGTERM, killing it", process.pid)
        process.kill()
        await process.wait()
