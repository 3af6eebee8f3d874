"""Process runner — spawn PHPMD and stream its stdout as it arrives.

Provides ``spawn_and_stream()`` which starts the analysis process
without a shell, hands each decoded stdout chunk to a callback in
emission order, and returns a structured ``RunResult`` once stdout has
reached EOF and the process has exited.

No parsing happens here — the caller decides what a chunk means.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import shlex
import time
from collections.abc import Callable, Sequence

from pydantic import BaseModel, ConfigDict, Field

from phpmd_ide.contracts import ReportFormat
from phpmd_ide.errors import ExecutableNotFound, SpawnFailure

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

READ_CHUNK_BYTES: int = 4096
MAX_STDERR_BYTES: int = 10_000  # 10 KB

ChunkHandler = Callable[[str], None]


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


class RunResult(BaseModel):
    """Structured result of one PHPMD invocation."""

    model_config = ConfigDict(frozen=True)

    exit_code: int = Field(..., description="Process exit code")
    stderr: str = Field(default="", description="Captured stderr (may be truncated)")
    duration_ms: int = Field(default=0, ge=0, description="Wall-clock duration in ms")
    truncated: bool = Field(default=False, description="True if stderr was truncated")
    command: str = Field(..., description="The command line that was executed")

    @property
    def has_violations(self) -> bool:
        """PHPMD exits 1 on error and 2 on violations; both count."""
        return self.exit_code > 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def build_args(
    file_path: str,
    report_format: ReportFormat | str,
    rulesets: Sequence[str],
) -> list[str]:
    """Positional PHPMD arguments: ``<file> <format> <rulesets>``."""
    fmt = report_format.value if isinstance(report_format, ReportFormat) else report_format
    return [file_path, fmt, ",".join(rulesets)]


def _build_env(extra: dict[str, str] | None = None) -> dict[str, str] | None:
    """Environment for the subprocess: the host environment plus *extra*.

    Returns ``None`` (inherit unchanged) when there is nothing to add, so
    version-manager shims such as phpenv or asdf keep working.
    """
    if not extra:
        return None
    return {**os.environ, **extra}


def _truncate(text: str, max_bytes: int) -> tuple[str, bool]:
    """Truncate *text* to at most *max_bytes* characters."""
    if len(text) <= max_bytes:
        return text, False
    return (
        text[:max_bytes] + f"\n\n[... truncated at {max_bytes} bytes ...]",
        True,
    )


# ---------------------------------------------------------------------------
# Core runner
# ---------------------------------------------------------------------------


async def spawn_and_stream(
    executable: str,
    args: Sequence[str],
    *,
    on_stdout: ChunkHandler,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
    chunk_size: int = READ_CHUNK_BYTES,
) -> RunResult:
    """Run *executable* with *args*, streaming stdout into *on_stdout*.

    Parameters
    ----------
    executable:
        Program name or path.  Resolved through ``PATH`` when bare.
    args:
        Positional arguments, passed without a shell.
    on_stdout:
        Called with each decoded stdout chunk, in order.  Multi-byte
        characters split across reads are held back until complete.
    cwd:
        Working directory for the subprocess.  ``None`` → inherit.
    env:
        Extra environment variables merged on top of the host environment.

    Raises
    ------
    ExecutableNotFound
        When *executable* cannot be located.
    SpawnFailure
        When the OS refuses to start the process for any other reason.
    """
    argv = [executable, *args]
    command = shlex.join(argv)
    start = time.perf_counter()

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
            env=_build_env(env),
        )
    except FileNotFoundError as exc:
        raise ExecutableNotFound(executable, list(args)) from exc
    except OSError as exc:
        raise SpawnFailure(executable, list(args), reason=str(exc)) from exc

    logger.debug("Spawned pid=%s: %s", proc.pid, command)

    assert proc.stdout is not None and proc.stderr is not None
    stderr_task = asyncio.ensure_future(proc.stderr.read())
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    try:
        while True:
            chunk = await proc.stdout.read(chunk_size)
            if not chunk:
                break
            text = decoder.decode(chunk)
            if text:
                on_stdout(text)

        tail = decoder.decode(b"", final=True)
        if tail:
            on_stdout(tail)
    except BaseException:
        # Callback failure or cancellation: do not leave the child behind.
        stderr_task.cancel()
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
        await proc.wait()
        raise

    raw_err = await stderr_task
    exit_code = await proc.wait()
    elapsed = int((time.perf_counter() - start) * 1000)

    stderr, truncated = _truncate(raw_err.decode("utf-8", errors="replace"), MAX_STDERR_BYTES)

    return RunResult(
        exit_code=exit_code,
        stderr=stderr,
        duration_ms=elapsed,
        truncated=truncated,
        command=command,
    )


__all__ = [
    "ChunkHandler",
    "READ_CHUNK_BYTES",
    "RunResult",
    "build_args",
    "spawn_and_stream",
]
