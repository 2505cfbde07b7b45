"""Spawns argv directly with a scrubbed environment and bounded output."""

from __future__ import annotations

import asyncio
import contextlib
import os
import signal
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol

import structlog

from shellbound.core.models import ProcessOutput
from shellbound.exceptions import SpawnFailureError

logger = structlog.get_logger()

_CHUNK_SIZE = 65_536


class ProcessRunner(Protocol):
    async def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
        timeout: float,
        max_output_bytes: int,
    ) -> ProcessOutput: ...


class _BoundedBuffer:
    """Keeps the first *limit* bytes of a stream and drops the rest."""

    def __init__(self, limit: int) -> None:
        self._limit = limit
        self._data = bytearray()
        self.truncated = False

    def feed(self, chunk: bytes) -> None:
        room = self._limit - len(self._data)
        if room > 0:
            self._data.extend(chunk[:room])
        if len(chunk) > room:
            self.truncated = True

    @property
    def data(self) -> bytes:
        return bytes(self._data)


async def _drain(stream: asyncio.StreamReader | None, buffer: _BoundedBuffer) -> None:
    if stream is None:
        return
    while True:
        chunk = await stream.read(_CHUNK_SIZE)
        if not chunk:
            return
        buffer.feed(chunk)


class SubprocessRunner:
    """Runs argv directly via asyncio.create_subprocess_exec, never a shell."""

    async def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
        timeout: float,
        max_output_bytes: int,
    ) -> ProcessOutput:
        cmd = tuple(argv)
        logger.debug("process_spawn", command=cmd[0], cwd=str(cwd))

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=cwd,
                env=dict(env),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except FileNotFoundError as e:
            raise SpawnFailureError(
                f"Command '{cmd[0]}' is not installed or not in PATH"
            ) from e
        except PermissionError as e:
            raise SpawnFailureError(f"Command '{cmd[0]}' is not executable") from e
        except OSError as e:
            logger.error("process_spawn_error", command=cmd[0], error=str(e))
            raise SpawnFailureError(f"Failed to start '{cmd[0]}': {e}") from e

        stdout = _BoundedBuffer(max_output_bytes)
        stderr = _BoundedBuffer(max_output_bytes)

        async def _communicate() -> int:
            await asyncio.gather(_drain(proc.stdout, stdout), _drain(proc.stderr, stderr))
            return await proc.wait()

        try:
            exit_code = await asyncio.wait_for(_communicate(), timeout=timeout)
        except TimeoutError:
            logger.warning("process_timeout", command=cmd[0], timeout=timeout)
            _kill_group(proc)
            await proc.wait()
            return ProcessOutput(
                exit_code=proc.returncode if proc.returncode is not None else -1,
                stdout=stdout.data,
                stderr=stderr.data,
                stdout_truncated=stdout.truncated,
                stderr_truncated=stderr.truncated,
                timed_out=True,
            )

        return ProcessOutput(
            exit_code=exit_code,
            stdout=stdout.data,
            stderr=stderr.data,
            stdout_truncated=stdout.truncated,
            stderr_truncated=stderr.truncated,
        )


def _kill_group(proc: asyncio.subprocess.Process) -> None:
    """Kill the whole process group so children don't keep the pipes open."""
    with contextlib.suppress(ProcessLookupError):
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except PermissionError:
            proc.kill()
