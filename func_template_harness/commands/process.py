"""Command capability backed by local subprocesses."""

import asyncio
import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from func_template_harness.commands.base import Command, CommandResult, ProcessHandle

log = logging.getLogger(__name__)

# Exit status a POSIX shell reports for a missing program.
COMMAND_NOT_FOUND = 127


@dataclass(frozen=True, kw_only=True)
class SubprocessHandle(ProcessHandle):
    """Handle wrapping an asyncio subprocess."""

    process: asyncio.subprocess.Process

    @property
    def pid(self) -> int:
        return self.process.pid

    def is_alive(self) -> bool:
        return self.process.returncode is None

    async def terminate(self, timeout: float = 10) -> None:
        if not self.is_alive():
            raise ProcessLookupError(f"Process {self.pid} has already exited")

        self.process.terminate()
        try:
            await asyncio.wait_for(self.process.wait(), timeout)
        except TimeoutError:
            log.warning("Process %d ignored SIGTERM, killing it", self.pid)
            self.process.kill()
            await self.process.wait()


@dataclass(frozen=True, kw_only=True)
class SubprocessCommand(Command):
    """Runs commands as child processes of the harness."""

    async def execute(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        log.debug("Executing: %s (cwd=%s)", " ".join(args), cwd)
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                cwd=cwd,
                env=_merge_env(env),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except FileNotFoundError as e:
            return CommandResult(exit_status=COMMAND_NOT_FOUND, output=str(e))

        stdout, _ = await process.communicate()
        assert process.returncode is not None
        return CommandResult(
            exit_status=process.returncode,
            output=stdout.decode(errors="replace"),
        )

    async def start(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        log_path: Path | None = None,
    ) -> SubprocessHandle:
        log.debug("Starting: %s (cwd=%s)", " ".join(args), cwd)
        if log_path is None:
            process = await asyncio.create_subprocess_exec(
                *args,
                cwd=cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        else:
            # The child keeps its own descriptor once spawned.
            with log_path.open("ab") as output:
                process = await asyncio.create_subprocess_exec(
                    *args,
                    cwd=cwd,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=output,
                    stderr=asyncio.subprocess.STDOUT,
                )
        return SubprocessHandle(process=process)


def _merge_env(env: Mapping[str, str] | None) -> dict[str, str] | None:
    if env is None:
        return None
    return {**os.environ, **env}
