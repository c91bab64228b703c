"""Agent runner — spawns one opencode session and streams its output."""

from __future__ import annotations

import asyncio
import sys
import time
from typing import TextIO

from .display import debug_log, echo_line
from .models import DEFAULT_AGENT, RunResult

READ_CHUNK = 65536


def build_command(
    prompt: str, model: str | None = None, agent: str = DEFAULT_AGENT
) -> list[str]:
    cmd = [agent, "run", prompt]
    if model:
        cmd.extend(["--model", model])
    return cmd


def _decode_line(raw: bytes) -> str:
    line = raw.decode("utf-8", errors="replace")
    if line.endswith("\r"):
        line = line[:-1]
    return line


async def _drain(
    stream: asyncio.StreamReader, sink: TextIO, haystack: list[str]
) -> None:
    """Copy a pipe line by line to *sink* and *haystack* until EOF."""
    buf = b""
    while True:
        chunk = await stream.read(READ_CHUNK)
        if not chunk:
            break
        buf += chunk
        *raw_lines, buf = buf.split(b"\n")
        for raw_line in raw_lines:
            line = _decode_line(raw_line)
            echo_line(line, sink)
            haystack.append(line)

    # Last line without a trailing newline
    if buf:
        line = _decode_line(buf)
        echo_line(line, sink)
        haystack.append(line)


async def run_agent(
    prompt: str,
    model: str | None = None,
    *,
    agent: str = DEFAULT_AGENT,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
    debug: bool = False,
) -> RunResult:
    """Run the agent once, mirroring both streams, and return the result.

    Every line from either pipe is written to the matching local stream as
    soon as it is read and appended to a single buffer shared by both
    pipes. Lines from one pipe keep their order; lines from different pipes
    interleave in whatever order they were read.

    Raises OSError if the executable cannot be started or a pipe read fails.
    """
    out_sink = stdout if stdout is not None else sys.stdout
    err_sink = stderr if stderr is not None else sys.stderr
    start_time = time.monotonic()

    cmd = build_command(prompt, model, agent)
    debug_log(
        f"Spawning: {' '.join(cmd[:2])} <prompt: {len(prompt)} chars> "
        f"{' '.join(cmd[3:])}".rstrip(),
        debug,
    )

    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )

    haystack: list[str] = []
    assert proc.stdout is not None
    assert proc.stderr is not None
    drains = [
        asyncio.create_task(_drain(proc.stdout, out_sink, haystack)),
        asyncio.create_task(_drain(proc.stderr, err_sink, haystack)),
    ]

    # The child may exit before its pipes are empty; collect the status
    # only after both drains have reached EOF.
    try:
        await asyncio.gather(*drains)
    except Exception:
        for task in drains:
            task.cancel()
        await asyncio.gather(*drains, return_exceptions=True)
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()
        raise

    returncode = await proc.wait()

    result = RunResult()
    # Signal deaths come back negative; report them like a missing code.
    result.exit_code = returncode if returncode is not None and returncode >= 0 else -1
    result.output = "".join(f"{line}\n" for line in haystack)
    result.lines = len(haystack)
    result.duration = time.monotonic() - start_time
    debug_log(
        f"Agent exited with {result.exit_code} after {result.lines} lines",
        debug,
    )
    return result
