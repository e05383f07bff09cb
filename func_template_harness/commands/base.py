"""Capabilities for running external commands."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, kw_only=True)
class CommandResult:
    """Exit status and combined stdout/stderr of a finished command."""

    exit_status: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_status == 0

    def tail(self, lines: int = 20) -> str:
        """Return the last ``lines`` lines of output, for diagnostics."""
        return "\n".join(self.output.strip().splitlines()[-lines:])


class ProcessHandle(ABC):
    """Handle to a process launched in the background."""

    @abstractmethod
    def is_alive(self) -> bool:
        """Return True while the process has not exited."""

    @abstractmethod
    async def terminate(self, timeout: float = 10) -> None:
        """Stop the process, escalating to a kill after ``timeout`` seconds.

        Raises:
            ProcessLookupError: If the process has already exited

        """


class Command(ABC):
    """Runs external commands synchronously or in the background."""

    @abstractmethod
    async def execute(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        """Run ``args`` to completion and capture its output.

        Args:
            args: Program and arguments
            cwd: Working directory (default: current directory)
            env: Extra environment variables layered over the process environment

        Returns:
            The exit status and captured output

        """

    @abstractmethod
    async def start(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        log_path: Path | None = None,
    ) -> ProcessHandle:
        """Launch ``args`` in the background and return its handle.

        Args:
            args: Program and arguments
            cwd: Working directory (default: current directory)
            log_path: File receiving the process output (default: discarded)

        """
