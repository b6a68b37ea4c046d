"""External command execution for scaffold steps.

Spawns npm/npx (or any other executable) as a child process, drains its
stdout and stderr incrementally while it runs, and turns the outcome into a
``CommandResult`` or a typed ``CommandError``.
"""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from .errors import ScaffoldError
from .utils import console as default_console

CHUNK_SIZE = 64 * 1024


# ---------------------------------------------------------------------------
# Results & errors
# ---------------------------------------------------------------------------


@dataclass
class CommandResult:
    """Outcome of a command that exited with code 0."""

    command: str
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""
    duration_seconds: float = 0.0


class CommandError(ScaffoldError):
    """Base class for command failures."""

    def __init__(self, message: str, command: str = "") -> None:
        self.command = command
        super().__init__(message)


class CommandLaunchError(CommandError):
    """The executable could not be spawned at all."""


class CommandExitError(CommandError):
    """The command ran but exited with a non-zero code."""

    def __init__(
        self,
        message: str,
        command: str = "",
        exit_code: int = -1,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message, command=command)


class CommandTimeoutError(CommandExitError):
    """The command exceeded the runner's timeout and was killed."""


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


async def _drain(
    stream: asyncio.StreamReader | None,
    chunks: list[bytes],
    on_chunk=None,
) -> None:
    """Read *stream* to EOF, appending each chunk as it arrives."""
    if stream is None:
        return
    while True:
        data = await stream.read(CHUNK_SIZE)
        if not data:
            return
        chunks.append(data)
        if on_chunk is not None:
            on_chunk()


async def _terminate(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await process.wait()


def _decode(chunks: list[bytes]) -> str:
    return b"".join(chunks).decode("utf-8", errors="replace")


class CommandRunner:
    """Runs external commands one at a time.

    Args:
        timeout_seconds: Wall-clock limit per command; ``None`` waits forever.
        env: Extra environment variables merged on top of ``os.environ``.
        show_progress: Print one dot per stdout chunk while a command runs.
        console: Console for operator output.
    """

    def __init__(
        self,
        timeout_seconds: float | None = 600.0,
        env: dict[str, str] | None = None,
        show_progress: bool = True,
        console: Console | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.env = env
        self.show_progress = show_progress
        self.console = console or default_console

    async def run(
        self,
        command: str,
        args: Sequence[str] = (),
        cwd: str | Path | None = None,
    ) -> CommandResult:
        """Run ``command args...`` in *cwd* and wait for it to exit.

        Returns:
            A ``CommandResult`` when the exit code is 0.

        Raises:
            CommandLaunchError: If *cwd* is missing or the executable cannot
                be spawned.
            CommandExitError: If the command exits non-zero.
            CommandTimeoutError: If the timeout elapses first.
        """
        cmd = [command, *args]
        cmd_str = " ".join(cmd)
        workdir = Path(cwd) if cwd is not None else None

        if workdir is not None and not workdir.is_dir():
            raise CommandLaunchError(
                f"Working directory not found: {workdir}", command=cmd_str
            )

        self.console.print(f"[cyan]Running:[/cyan] {escape(cmd_str)}")
        if workdir is not None:
            self.console.print(f"  [dim]in {escape(str(workdir))}[/dim]")

        merged_env: dict[str, str] | None = None
        if self.env:
            merged_env = {**os.environ, **self.env}

        start_time = time.monotonic()
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(workdir) if workdir is not None else None,
                env=merged_env,
            )
        except FileNotFoundError as exc:
            raise CommandLaunchError(
                f"Executable not found: '{command}'. Ensure it is installed and in PATH.",
                command=cmd_str,
            ) from exc
        except PermissionError as exc:
            raise CommandLaunchError(
                f"Permission denied executing: '{command}'.", command=cmd_str
            ) from exc
        except OSError as exc:
            raise CommandLaunchError(
                f"Failed to start '{command}': {exc}", command=cmd_str
            ) from exc

        stdout_chunks: list[bytes] = []
        stderr_chunks: list[bytes] = []
        dots = 0

        def _tick() -> None:
            nonlocal dots
            if self.show_progress:
                dots += 1
                self.console.print(".", end="")

        try:
            await asyncio.wait_for(
                asyncio.gather(
                    _drain(process.stdout, stdout_chunks, _tick),
                    _drain(process.stderr, stderr_chunks),
                    process.wait(),
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            await _terminate(process)
            if dots:
                self.console.print()
            elapsed = time.monotonic() - start_time
            self.console.print(
                f"[red]Command timed out after {elapsed:.1f}s: {escape(cmd_str)}[/red]"
            )
            raise CommandTimeoutError(
                f"Command timed out after {self.timeout_seconds}s: {cmd_str}",
                command=cmd_str,
                exit_code=-1,
                stdout=_decode(stdout_chunks),
                stderr=_decode(stderr_chunks),
            )
        except asyncio.CancelledError:
            await _terminate(process)
            raise

        if dots:
            self.console.print()

        elapsed = time.monotonic() - start_time
        exit_code = process.returncode if process.returncode is not None else -1
        stdout_text = _decode(stdout_chunks)
        stderr_text = _decode(stderr_chunks)

        if exit_code != 0:
            self.console.print(f"[red]{escape(cmd_str)} failed with exit code {exit_code}[/red]")
            for line in stderr_text.strip().splitlines()[-10:]:
                self.console.print(f"  [dim]{escape(line.strip())}[/dim]")
            tail = stderr_text.strip()[-500:]
            raise CommandExitError(
                f"Command failed (exit {exit_code}): {cmd_str}" + (f"\n{tail}" if tail else ""),
                command=cmd_str,
                exit_code=exit_code,
                stdout=stdout_text,
                stderr=stderr_text,
            )

        self.console.print(f"[green]Finished[/green] {escape(cmd_str)} in {elapsed:.1f}s")
        return CommandResult(
            command=cmd_str,
            exit_code=exit_code,
            stdout=stdout_text,
            stderr=stderr_text,
            duration_seconds=elapsed,
        )
