"""Bounded subprocess execution for runners."""
import asyncio
import contextlib
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

READ_CHUNK_SIZE = 64 * 1024


@dataclass
class ProcessOutcome:
    """What happened to one child process."""

    stdout: str
    stderr: str
    returncode: Optional[int]
    timed_out: bool
    output_exceeded: bool
    duration_ms: int


def _kill(process: asyncio.subprocess.Process) -> None:
    with contextlib.suppress(ProcessLookupError):
        process.kill()


async def run_process(
    argv: List[str],
    stdin: Optional[bytes] = None,
    timeout: float = 30.0,
    max_output_size: int = 1024 * 1024,
    cwd: Optional[Union[str, Path]] = None,
    env: Optional[Dict[str, str]] = None,
) -> ProcessOutcome:
    """
    Run a child process with a hard timeout and a stdout byte cap.

    The process is killed as soon as stdout grows past max_output_size or
    the timeout elapses. stderr is kept up to the same cap.

    Args:
        argv: Program and arguments
        stdin: Bytes written to the child's stdin (stdin is closed otherwise)
        timeout: Wall-clock limit in seconds
        max_output_size: stdout cap in bytes
        cwd: Working directory
        env: Environment for the child

    Returns:
        ProcessOutcome: Captured output and termination details

    Raises:
        FileNotFoundError: If the program does not exist
    """
    started = time.perf_counter()
    process = await asyncio.create_subprocess_exec(
        *argv,
        stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
        env=env,
    )

    stdout = bytearray()
    stderr = bytearray()
    output_exceeded = False

    async def feed_stdin() -> None:
        if stdin is None:
            return
        try:
            # The child may exit without reading its input
            with contextlib.suppress(BrokenPipeError, ConnectionResetError):
                process.stdin.write(stdin)
                await process.stdin.drain()
        finally:
            process.stdin.close()

    async def read_stdout() -> None:
        nonlocal output_exceeded
        while True:
            chunk = await process.stdout.read(READ_CHUNK_SIZE)
            if not chunk:
                return
            stdout.extend(chunk)
            if len(stdout) > max_output_size:
                output_exceeded = True
                _kill(process)
                return

    async def read_stderr() -> None:
        while True:
            chunk = await process.stderr.read(READ_CHUNK_SIZE)
            if not chunk:
                return
            room = max_output_size - len(stderr)
            if room > 0:
                stderr.extend(chunk[:room])

    timed_out = False
    try:
        await asyncio.wait_for(
            asyncio.gather(feed_stdin(), read_stdout(), read_stderr(), process.wait()),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        timed_out = True
        _kill(process)
        await process.wait()

    return ProcessOutcome(
        stdout=bytes(stdout[:max_output_size]).decode("utf-8", errors="replace"),
        stderr=bytes(stderr).decode("utf-8", errors="replace"),
        returncode=process.returncode,
        timed_out=timed_out,
        output_exceeded=output_exceeded,
        duration_ms=int((time.perf_counter() - started) * 1000),
    )
