"""Subprocess execution shared by the git and exporter wrappers."""

from __future__ import annotations

import asyncio
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

from .errors import ToolNotFoundError

_SANITIZED_VARS = {
    "PYTHONHOME",
    "PYTHONPATH",
    "PIP_RESPECT_VIRTUALENV",
}


@dataclass(slots=True)
class ProcessResult:
    """Holds the outcome of a command invocation."""

    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    raw_stdout: bytes = b""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def sanitize_environment(additional: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return a sanitized environment suitable for subprocess execution."""

    env = dict(os.environ)
    for key in _SANITIZED_VARS:
        env.pop(key, None)
    if additional:
        env.update(additional)
    return env


def resolve_executable(name: str, explicit: Path | str | None = None) -> Path:
    """Locate ``name`` on PATH, or validate an explicitly configured path."""

    if explicit is not None:
        candidate = Path(explicit).expanduser()
        if candidate.exists() and candidate.is_file():
            return candidate
        raise ToolNotFoundError(f"{name} executable not found at {candidate}")

    binary = shutil.which(name)
    if binary is None:
        raise ToolNotFoundError(f"{name} executable not found on PATH")
    return Path(binary)


async def run_process(
    cmd: Sequence[str],
    *,
    cwd: Path | None = None,
    interactive: bool = False,
    env: Mapping[str, str] | None = None,
) -> ProcessResult:
    """Run ``cmd`` to completion.

    Interactive commands inherit the terminal, so nothing is captured and
    ``stdout``/``stderr`` are empty in the result. ``raw_stdout`` keeps the
    undecoded bytes for callers that write the output to disk.
    """

    args = tuple(str(part) for part in cmd)
    stream = None if interactive else asyncio.subprocess.PIPE
    process = await asyncio.create_subprocess_exec(
        *args,
        stdin=None if interactive else asyncio.subprocess.DEVNULL,
        stdout=stream,
        stderr=stream,
        cwd=str(cwd) if cwd is not None else None,
        env=sanitize_environment(env),
    )
    stdout_bytes, stderr_bytes = await process.communicate()
    stdout = stdout_bytes.decode("utf-8", errors="replace") if stdout_bytes else ""
    stderr = stderr_bytes.decode("utf-8", errors="replace") if stderr_bytes else ""
    return ProcessResult(
        args=args,
        returncode=process.returncode,
        stdout=stdout,
        stderr=stderr,
        raw_stdout=stdout_bytes or b"",
    )


__all__ = ["ProcessResult", "resolve_executable", "run_process", "sanitize_environment"]
